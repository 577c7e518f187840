# flake8: noqa
import logging
from typing import Any, Dict

from vmspec.config import config_context, get_config, set_config
from vmspec.constants import INITIAL_VERSION
from vmspec.errors import (
    AmbiguousVolumeSource,
    DuplicateVMID,
    DuplicateVolumeID,
    InvalidKernelReference,
    InvalidMountPoint,
    InvalidNetworkInterface,
    InvalidResourceSizing,
    InvalidStateTransition,
    InvalidVMID,
    InvalidVolumeSource,
    MicroVMNotFound,
    MissingRootVolume,
    MultipleRootVolumes,
    SpecViolations,
    VersionConflict,
    VMSpecError,
)
from vmspec.lifecycle import MicroVMState, Submission, submit
from vmspec.models import (
    VMID,
    ContainerImage,
    ContainerVolumeSource,
    HostPathType,
    HostPathVolumeSource,
    Kernel,
    MicroVM,
    MicroVMSpec,
    NetworkInterface,
    Volume,
    VolumeSource,
)
from vmspec.provider import Provider
from vmspec.store import MicroVMStore
from vmspec.validation import (
    ContainerBacked,
    HostPathBacked,
    check_spec,
    normalize_spec,
    resolve_volume_source,
    validate_spec,
)

from .version import __version__


def init_logging(level=logging.INFO, **kwargs):
    """Enable Rich display of log messages.

    kwargs: kwargs passed to RichHandler.
      vmspec chooses some defaults for you
        show_time=False,
    """
    from rich.logging import RichHandler

    default_kwargs: Dict[str, Any] = dict(
        show_time=False,
    )

    default_kwargs.update(**kwargs)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(**default_kwargs)],
    )

    return logging
