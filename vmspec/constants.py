#: Version assigned to a MicroVM when the store registers it
INITIAL_VERSION = 1

#: The only host path type currently defined
HOST_PATH_RAW_FILE = "RawFile"
HOST_PATH_TYPES = [HOST_PATH_RAW_FILE]

DEFAULT_HOST_PATH_TYPE = HOST_PATH_RAW_FILE

#: Conventional mount point of the root volume
ROOT_MOUNT_POINT = "/"

DEFAULT_MIN_VCPU = 1
DEFAULT_MIN_MEMORY_IN_MB = 1

VALIDATION_FAIL_FAST = "fail_fast"
VALIDATION_COLLECT = "collect"
VALIDATION_MODES = [VALIDATION_FAIL_FAST, VALIDATION_COLLECT]

MMDS_WARN = "warn"
MMDS_ERROR = "error"
MMDS_IGNORE = "ignore"
MMDS_POLICIES = [MMDS_WARN, MMDS_ERROR, MMDS_IGNORE]

YAML_SUFFIXES = [".yaml", ".yml"]

#: Volume sizes travel as 32 bits signed integers
INT32_MAX = 2**31 - 1
