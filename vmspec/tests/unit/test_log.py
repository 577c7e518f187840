import logging

from vmspec.log import getLogger

from . import VMSpecTest


class TestTagsAdapter(VMSpecTest):
    def test_tags(self):
        logger = getLogger("vmspec.test", ["vm-1", "store"])
        with self.assertLogs("vmspec.test", level=logging.INFO) as logs:
            logger.info("hello %s", "world")
        self.assertEqual(["INFO:vmspec.test:[vm-1,store] hello world"], logs.output)

    def test_no_tags(self):
        logger = getLogger("vmspec.test")
        with self.assertLogs("vmspec.test", level=logging.INFO) as logs:
            logger.info("hello")
        self.assertEqual(["INFO:vmspec.test:hello"], logs.output)
