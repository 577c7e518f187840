import logging
from typing import MutableMapping, Optional, Sequence, Tuple


class TagsAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs) -> Tuple[str, MutableMapping]:
        tags = self.extra["tags"]  # type: ignore
        if not tags:
            return msg, kwargs
        prefix = ",".join(tags)
        return f"[{prefix}] {msg}", kwargs


def getLogger(name: str, tags: Optional[Sequence[str]] = None) -> TagsAdapter:
    if tags is None:
        tags = []
    logger = TagsAdapter(logging.getLogger(name), dict(tags=list(tags)))
    return logger
