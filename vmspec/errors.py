from typing import List, Optional, Sequence


class VMSpecError(Exception):
    #: True iff the caller may retry the same request after re-fetching state
    retryable = False


class InvalidVMID(VMSpecError):
    def __init__(self, value):
        super().__init__(f"Invalid microvm identifier {value!r}")
        self.value = value


class InvalidKernelReference(VMSpecError):
    def __init__(self, missing: Sequence[str]):
        super().__init__(f"Kernel is missing {', '.join(missing)}")
        self.missing = list(missing)


class InvalidResourceSizing(VMSpecError):
    def __init__(
        self,
        field: str,
        value,
        minimum: int,
        maximum: Optional[int] = None,
        volume_id: Optional[str] = None,
    ):
        if maximum is None:
            msg = f"{field} must be at least {minimum} (got {value!r})"
        else:
            msg = f"{field} must be between {minimum} and {maximum} (got {value!r})"
        if volume_id is not None:
            msg = f"{msg} (volume {volume_id})"
        super().__init__(msg)
        self.field = field
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        self.volume_id = volume_id


class DuplicateVolumeID(VMSpecError):
    def __init__(self, volume_id: str, indexes: Optional[Sequence[int]] = None):
        if volume_id:
            msg = f"Volume id {volume_id} is used more than once"
        else:
            msg = "Volume id must not be empty"
        super().__init__(msg)
        self.volume_id = volume_id
        self.indexes = list(indexes) if indexes is not None else []


class MissingRootVolume(VMSpecError):
    def __init__(self):
        super().__init__("Exactly one volume must be the root volume, none found")


class MultipleRootVolumes(VMSpecError):
    def __init__(self, volume_ids: Sequence[str]):
        super().__init__(
            "Exactly one volume must be the root volume, found %s"
            % ", ".join(volume_ids)
        )
        self.volume_ids = list(volume_ids)


class InvalidMountPoint(VMSpecError):
    def __init__(self, volume_id: str, mount_point: Optional[str], msg: str = ""):
        if not msg:
            msg = f"Mount point {mount_point!r} of volume {volume_id} is not absolute"
        super().__init__(msg)
        self.volume_id = volume_id
        self.mount_point = mount_point


class InvalidVolumeSource(VMSpecError):
    def __init__(self, msg: str = "", volume_id: Optional[str] = None):
        if not msg:
            msg = "Volume source must set one of container or host_path"
        if volume_id is not None:
            msg = f"{msg} (volume {volume_id})"
        super().__init__(msg)
        self.volume_id = volume_id


class AmbiguousVolumeSource(VMSpecError):
    def __init__(self, volume_id: Optional[str] = None):
        msg = "Volume source must set only one of container or host_path"
        if volume_id is not None:
            msg = f"{msg} (volume {volume_id})"
        super().__init__(msg)
        self.volume_id = volume_id


class InvalidNetworkInterface(VMSpecError):
    def __init__(self, index: Optional[int], reasons: Sequence[str]):
        where = "Network interface" if index is None else f"Network interface {index}"
        super().__init__(f"{where}: {'; '.join(reasons)}")
        self.index = index
        self.reasons = list(reasons)


class SpecViolations(VMSpecError):
    """All the violations found in a single specification."""

    def __init__(self, errors: List[VMSpecError]):
        super().__init__(
            "%d violation(s): %s" % (len(errors), " | ".join(str(e) for e in errors))
        )
        self.errors = errors


class VersionConflict(VMSpecError):
    retryable = True

    def __init__(self, vmid: str, expected: int, actual: int):
        super().__init__(
            f"Version conflict on {vmid}: expected {expected}, stored {actual}"
        )
        self.vmid = vmid
        self.expected = expected
        self.actual = actual


class MicroVMNotFound(VMSpecError):
    def __init__(self, vmid: str):
        super().__init__(f"No microvm with id {vmid}")
        self.vmid = vmid


class DuplicateVMID(VMSpecError):
    def __init__(self, vmid: str):
        super().__init__(f"Microvm id {vmid} is already (or was) in use")
        self.vmid = vmid


class InvalidStateTransition(VMSpecError):
    def __init__(self, current, target):
        super().__init__(f"Can't go from {current.name} to {target.name}")
        self.current = current
        self.target = target
