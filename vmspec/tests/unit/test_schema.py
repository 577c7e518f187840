from ddt import data, ddt

from vmspec.schema import (
    MICROVM_SCHEMA,
    SPEC_SCHEMA,
    VMSpecValidator,
    is_valid_mac,
    is_valid_mac_format,
)

from . import VMSpecTest


@ddt
class TestMac(VMSpecTest):
    @data(
        "aa:bb:cc:dd:ee:ff",
        "AA:BB:CC:DD:EE:FF",
        "aa-bb-cc-dd-ee-ff",
        "02:00:00:00:00:01",
    )
    def test_valid_mac(self, mac):
        self.assertTrue(is_valid_mac(mac))

    @data(
        "aa:bb",
        "aa:bb:cc:dd:ee",
        "gg:hh:ii:jj:kk:ll",
        "aa:bb:cc:dd:ee:ff:00:11",
        "",
        "0",
        "12345",
        "281474976710655",
        None,
        42,
    )
    def test_invalid_mac(self, mac):
        self.assertFalse(is_valid_mac(mac))

    def test_empty_mac_format(self):
        self.assertTrue(is_valid_mac_format(""))
        self.assertFalse(is_valid_mac_format("aa:bb"))


class TestSchemas(VMSpecTest):
    def test_schemas_are_valid(self):
        VMSpecValidator(SPEC_SCHEMA).check_schema(SPEC_SCHEMA)
        VMSpecValidator(MICROVM_SCHEMA).check_schema(MICROVM_SCHEMA)

    def test_microvm_schema_shares_definitions(self):
        for name in SPEC_SCHEMA["definitions"]:
            self.assertIn(name, MICROVM_SCHEMA["definitions"])
        self.assertEqual(
            SPEC_SCHEMA["properties"],
            MICROVM_SCHEMA["definitions"]["spec"]["properties"],
        )

    def test_format_is_checked(self):
        validator = VMSpecValidator(SPEC_SCHEMA["definitions"]["network_interface"])
        self.assertTrue(
            validator.is_valid(
                {"host_device_name": "tap0", "guest_mac": "aa:bb:cc:dd:ee:ff"}
            )
        )
        self.assertFalse(
            validator.is_valid({"host_device_name": "tap0", "guest_mac": "aa:bb"})
        )
