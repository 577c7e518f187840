from jsonschema import Draft7Validator, FormatChecker
from netaddr import valid_mac

from .constants import (
    DEFAULT_HOST_PATH_TYPE,
    HOST_PATH_TYPES,
    INITIAL_VERSION,
    INT32_MAX,
)


SPEC_SCHEMA = {
    "description": "MicroVM specification schema.",
    "type": "object",
    "properties": {
        "kernel": {"$ref": "#/definitions/kernel"},
        "initrd_image": {
            "description": "Container image holding the initial ramdisk",
            "type": "string",
        },
        "vcpu": {"description": "Number of vcpus", "type": "integer"},
        "memory_inmb": {"description": "Memory size in MB", "type": "integer"},
        "network_interfaces": {
            "type": ["array", "null"],
            "items": {"$ref": "#/definitions/network_interface"},
        },
        "volumes": {
            "type": ["array", "null"],
            "items": {"$ref": "#/definitions/volume"},
        },
    },
    "additionalProperties": False,
    "required": ["kernel", "vcpu", "memory_inmb"],
    "definitions": {
        "kernel": {
            "description": "Boot kernel extracted from a container image",
            "title": "Kernel",
            "type": "object",
            "properties": {
                "image": {
                    "description": "Container image holding the kernel",
                    "type": "string",
                },
                "filename": {
                    "description": "Path of the kernel inside the image",
                    "type": "string",
                },
                "cmdline": {
                    "description": "Kernel command line (default: provider's)",
                    "type": "string",
                },
            },
            "required": ["image", "filename"],
            "additionalProperties": False,
        },
        "network_interface": {
            "description": "Virtual network interface of the microvm",
            "title": "NetworkInterface",
            "type": "object",
            "properties": {
                "allow_mmds": {
                    "description": "Interface can be used for metadata requests",
                    "type": "boolean",
                },
                "guest_mac": {
                    "description": "MAC address in the guest (default: generated)",
                    "type": "string",
                    "format": "mac",
                },
                "host_device_name": {
                    "description": "Tap or macvtap device on the host",
                    "type": "string",
                },
                "guest_device_name": {
                    "description": "Device name in the guest (default: assigned)",
                    "type": "string",
                },
            },
            "required": ["host_device_name"],
            "additionalProperties": False,
        },
        "volume": {
            "description": "Block device attached to the microvm",
            "title": "Volume",
            "type": "object",
            "properties": {
                "id": {"type": "string"},
                "is_root": {"type": "boolean"},
                "is_read_only": {"type": "boolean"},
                "mount_point": {
                    "description": "Absolute path in the guest",
                    "type": "string",
                },
                "source": {"$ref": "#/definitions/volume_source"},
                "partition_id": {
                    "description": "Partition of the backing image to use",
                    "type": "string",
                },
                "size": {
                    "description": "Resize the backing store to this size in MB",
                    "type": "integer",
                    "minimum": 0,
                    "maximum": INT32_MAX,
                },
            },
            "required": ["id", "mount_point", "source"],
            "additionalProperties": False,
        },
        # exclusivity of the branches is checked when resolving the source
        "volume_source": {
            "description": "Where the volume content comes from",
            "title": "VolumeSource",
            "type": "object",
            "properties": {
                "container": {
                    "type": "object",
                    "properties": {"image": {"type": "string"}},
                    "required": ["image"],
                    "additionalProperties": False,
                },
                "host_path": {
                    "type": "object",
                    "properties": {
                        "path": {"type": "string"},
                        "type": {
                            "description": (
                                f"Host path type (default: {DEFAULT_HOST_PATH_TYPE})"
                            ),
                            "type": "string",
                            "enum": HOST_PATH_TYPES,
                        },
                    },
                    "required": ["path"],
                    "additionalProperties": False,
                },
            },
            "additionalProperties": False,
        },
    },  # definitions
}


MICROVM_SCHEMA = {
    "description": "MicroVM entity schema.",
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "version": {
            "description": f"Optimistic concurrency token (first: {INITIAL_VERSION})",
            "type": "integer",
        },
        "spec": {"$ref": "#/definitions/spec"},
    },
    "additionalProperties": False,
    "required": ["id", "version", "spec"],
    "definitions": {
        "spec": {k: v for k, v in SPEC_SCHEMA.items() if k != "definitions"},
        **SPEC_SCHEMA["definitions"],
    },
}


VMSpecFormatChecker = FormatChecker()


def is_valid_mac(instance) -> bool:
    """A 48 bits MAC address written in one of the notations netaddr knows.

    Plain integers (and strings of decimal digits netaddr would read as
    integers) are not MAC addresses.
    """
    if not isinstance(instance, str):
        return False
    return valid_mac(instance)


@VMSpecFormatChecker.checks("mac")
def is_valid_mac_format(instance):
    # an empty value stands for an absent one
    return instance == "" or is_valid_mac(instance)


def VMSpecValidator(schema):
    return Draft7Validator(schema, format_checker=VMSpecFormatChecker)
