"""Checks a :py:class:`~vmspec.models.MicroVMSpec` must pass before a
microvm can be created from it.

Everything here is pure: the functions only read their input (no I/O, no
shared state) and can be called concurrently.
"""
import copy
import logging
import posixpath
from collections import defaultdict
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Iterator, List, Optional, Union

from netaddr import EUI, mac_unix_expanded

from .config import get_config
from .constants import (
    MMDS_ERROR,
    INT32_MAX,
    MMDS_WARN,
    ROOT_MOUNT_POINT,
    VALIDATION_COLLECT,
)
from .errors import (
    AmbiguousVolumeSource,
    DuplicateVolumeID,
    InvalidKernelReference,
    InvalidMountPoint,
    InvalidNetworkInterface,
    InvalidResourceSizing,
    InvalidVolumeSource,
    MissingRootVolume,
    MultipleRootVolumes,
    SpecViolations,
    VMSpecError,
)
from .models import ContainerImage, HostPathType, MicroVMSpec, Volume, VolumeSource
from .schema import is_valid_mac

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContainerBacked:
    """The volume content comes from an OCI image."""

    image: ContainerImage


@dataclass(frozen=True)
class HostPathBacked:
    """The volume content comes from a file/device on the host."""

    path: str
    type: HostPathType


ResolvedVolumeSource = Union[ContainerBacked, HostPathBacked]


def resolve_volume_source(
    source: VolumeSource, volume_id: Optional[str] = None
) -> ResolvedVolumeSource:
    """Tell which backing mechanism a volume source uses.

    Args:
        source: the source to resolve
        volume_id: id of the volume owning the source, only used to give some
            context in the errors

    Returns:
        Either a :py:class:`ContainerBacked` or a :py:class:`HostPathBacked`

    Raises:
        InvalidVolumeSource: no branch is set (or the set one is empty)
        AmbiguousVolumeSource: both branches are set
    """
    container = source.container
    host_path = source.host_path
    if container is not None and host_path is not None:
        raise AmbiguousVolumeSource(volume_id=volume_id)
    if container is not None:
        if not container.image:
            raise InvalidVolumeSource(
                "Container volume source has no image", volume_id=volume_id
            )
        return ContainerBacked(image=container.image)
    if host_path is not None:
        if not host_path.path:
            raise InvalidVolumeSource(
                "Host path volume source has no path", volume_id=volume_id
            )
        return HostPathBacked(path=host_path.path, type=host_path.type)
    raise InvalidVolumeSource(volume_id=volume_id)


def _is_absolute(path: Optional[str]) -> bool:
    return bool(path) and PurePosixPath(path).is_absolute()


def _normalize_mount_point(path: str) -> str:
    # normpath keeps a leading "//", fold it as well
    return "/" + posixpath.normpath(path).lstrip("/")


def _check_sizing(field: str, value, minimum: int) -> Optional[InvalidResourceSizing]:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        return InvalidResourceSizing(field, value, minimum)
    return None


def _check_volume_sizes(volumes: List[Volume]) -> Iterator[InvalidResourceSizing]:
    # None keeps the native size of the source
    for volume in volumes:
        size = volume.size
        if size is None:
            continue
        if (
            isinstance(size, bool)
            or not isinstance(size, int)
            or not 1 <= size <= INT32_MAX
        ):
            yield InvalidResourceSizing(
                "size", size, 1, maximum=INT32_MAX, volume_id=volume.id
            )


def _check_volume_ids(volumes: List[Volume]) -> Iterator[VMSpecError]:
    empties = []
    indexes: Dict[str, List[int]] = defaultdict(list)
    for index, volume in enumerate(volumes):
        if not volume.id:
            empties.append(index)
        else:
            indexes[volume.id].append(index)
    if empties:
        yield DuplicateVolumeID("", empties)
    for volume_id, where in indexes.items():
        if len(where) > 1:
            yield DuplicateVolumeID(volume_id, where)


def _check_mount_points(volumes: List[Volume], strict_root: bool):
    for volume in volumes:
        if not _is_absolute(volume.mount_point):
            yield InvalidMountPoint(volume.id, volume.mount_point)
        elif (
            strict_root
            and volume.is_root
            and _normalize_mount_point(volume.mount_point) != ROOT_MOUNT_POINT
        ):
            yield InvalidMountPoint(
                volume.id,
                volume.mount_point,
                msg=f"Root volume {volume.id} must be mounted on {ROOT_MOUNT_POINT}",
            )


def _check_network_interfaces(spec: MicroVMSpec, mmds_policy: str):
    for index, nic in enumerate(spec.network_interfaces):
        reasons = []
        if not nic.host_device_name:
            reasons.append("host device name is missing")
        if nic.guest_mac is not None and not is_valid_mac(nic.guest_mac):
            reasons.append(f"guest MAC {nic.guest_mac!r} is not a valid MAC address")
        if reasons:
            yield InvalidNetworkInterface(index, reasons)

    mmds = [
        index
        for index, nic in enumerate(spec.network_interfaces)
        if nic.allow_metadata_requests
    ]
    if len(mmds) > 1:
        msg = "interfaces %s all allow metadata requests" % mmds
        if mmds_policy == MMDS_ERROR:
            yield InvalidNetworkInterface(None, [msg])
        elif mmds_policy == MMDS_WARN:
            logger.warning("%s, the provider may only honor one of them", msg)


def _iter_violations(spec: MicroVMSpec) -> Iterator[VMSpecError]:
    config = get_config()

    kernel = spec.kernel
    missing = [name for name in ("image", "filename") if not getattr(kernel, name)]
    if missing:
        yield InvalidKernelReference(missing)

    for field, value, minimum in [
        ("vcpu", spec.vcpu, config["min_vcpu"]),
        ("memory_in_mb", spec.memory_in_mb, config["min_memory_in_mb"]),
    ]:
        error = _check_sizing(field, value, minimum)
        if error is not None:
            yield error

    yield from _check_volume_sizes(spec.volumes)

    yield from _check_volume_ids(spec.volumes)

    roots = spec.root_volumes
    if len(roots) == 0:
        yield MissingRootVolume()
    elif len(roots) > 1:
        yield MultipleRootVolumes([v.id for v in roots])

    yield from _check_mount_points(spec.volumes, config["strict_root_mount_point"])

    for volume in spec.volumes:
        try:
            resolve_volume_source(volume.source, volume_id=volume.id)
        except (InvalidVolumeSource, AmbiguousVolumeSource) as err:
            yield err

    yield from _check_network_interfaces(spec, config["mmds_policy"])


def check_spec(spec: MicroVMSpec) -> List[VMSpecError]:
    """Get all the violations of a specification (empty list if it is valid).

    The violations are given in the order the checks are run: kernel, sizing
    (vcpu, memory, volume sizes), volume ids, root volume, mount points,
    volume sources, network interfaces.
    """
    return list(_iter_violations(spec))


def validate_spec(spec: MicroVMSpec, collect: Optional[bool] = None) -> MicroVMSpec:
    """Validate a specification.

    Args:
        spec: the specification to validate, left untouched
        collect: True to raise all the violations at once, False to stop at
            the first one. Defaults to the ``validation`` config key.

    Returns:
        The very same specification

    Raises:
        VMSpecError: the first violation found (fail fast)
        SpecViolations: all the violations found (collect)
    """
    if collect is None:
        collect = get_config()["validation"] == VALIDATION_COLLECT
    if collect:
        errors = check_spec(spec)
        if errors:
            raise SpecViolations(errors)
    else:
        error = next(_iter_violations(spec), None)
        if error is not None:
            raise error
    logger.debug("Specification validated")
    return spec


def normalize_spec(spec: MicroVMSpec) -> MicroVMSpec:
    """Get a normalized copy of a specification.

    MAC addresses are written as lowercase colon separated pairs and mount
    points are collapsed (``//mnt//data/`` becomes ``/mnt/data``). Values that
    can't be normalized are kept as is for the validation to report them.
    Normalizing twice gives the same result.
    """
    spec = copy.deepcopy(spec)
    for nic in spec.network_interfaces:
        if nic.guest_mac is not None and is_valid_mac(nic.guest_mac):
            nic.guest_mac = str(EUI(nic.guest_mac, dialect=mac_unix_expanded))
    for volume in spec.volumes:
        if _is_absolute(volume.mount_point):
            volume.mount_point = _normalize_mount_point(volume.mount_point)
    return spec
