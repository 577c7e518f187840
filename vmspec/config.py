"""
Manage the validation settings of vmspec.
"""
import copy
import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

from .constants import (
    DEFAULT_MIN_MEMORY_IN_MB,
    DEFAULT_MIN_VCPU,
    MMDS_POLICIES,
    MMDS_WARN,
    VALIDATION_FAIL_FAST,
    VALIDATION_MODES,
)

logger = logging.getLogger(__name__)

_config = dict(
    validation=VALIDATION_FAIL_FAST,
    min_vcpu=DEFAULT_MIN_VCPU,
    min_memory_in_mb=DEFAULT_MIN_MEMORY_IN_MB,
    strict_root_mount_point=False,
    mmds_policy=MMDS_WARN,
)


def get_config() -> Dict:
    """Get (a copy of) the current config."""
    return copy.deepcopy(_config)


def _set(key: str, value: Optional[Any]):
    if value is not None:
        _config[key] = value


def _check_choice(key: str, value: Optional[str], choices):
    if value is not None and value not in choices:
        raise ValueError(f"{key} must be one of {choices} (got {value!r})")


def _check_minimum(key: str, value: Optional[int]):
    if value is not None and (isinstance(value, bool) or value < 1):
        raise ValueError(f"{key} must be a positive integer (got {value!r})")


def set_config(
    validation: Optional[str] = None,
    min_vcpu: Optional[int] = None,
    min_memory_in_mb: Optional[int] = None,
    strict_root_mount_point: Optional[bool] = None,
    mmds_policy: Optional[str] = None,
):
    """Set a specific config value.

    Values are checked before anything is changed, so a rejected call leaves
    the config untouched.

    Args:
        validation: ``fail_fast`` raises the first violation found,
            ``collect`` raises a single
            :py:class:`~vmspec.errors.SpecViolations` with all of them
        min_vcpu: lowest acceptable number of vcpus (a provider may want
            more than 1)
        min_memory_in_mb: lowest acceptable amount of memory
        strict_root_mount_point: True iff the root volume must be mounted
            on ``/``
        mmds_policy: what to do when more than one network interface allows
            metadata requests: ``warn``, ``error`` or ``ignore``
    """
    _check_choice("validation", validation, VALIDATION_MODES)
    _check_choice("mmds_policy", mmds_policy, MMDS_POLICIES)
    _check_minimum("min_vcpu", min_vcpu)
    _check_minimum("min_memory_in_mb", min_memory_in_mb)

    _set("validation", validation)
    _set("min_vcpu", min_vcpu)
    _set("min_memory_in_mb", min_memory_in_mb)
    _set("strict_root_mount_point", strict_root_mount_point)
    _set("mmds_policy", mmds_policy)

    logger.debug("config = %s", get_config())


@contextmanager
def config_context(**new_config):
    """A context manager to manage a config specific to a portion of code.

    The original config is restored when exiting the context manager.

    Args:
        new_config: any keyword argument supported by
            :py:func:`~vmspec.config.set_config`

    Examples:

        .. code-block:: python

            from vmspec.config import config_context

            ...
            with config_context(validation="collect"):
                # report every violation at once
                ...

            # the config goes back to its previous state here
    """
    old_config = get_config()
    set_config(**new_config)
    try:
        yield
    finally:
        set_config(**old_config)
