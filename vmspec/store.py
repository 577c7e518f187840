"""In-memory storage layer for the microvms.

Mutations follow a compare-and-swap discipline on (id, version): an update
(or a versioned delete) against a stale version is rejected with
:py:class:`~vmspec.errors.VersionConflict`, the caller has to get the current
microvm and apply its change again.
"""
import copy
import json
import threading
from typing import Dict, List, Optional

from .constants import INITIAL_VERSION
from .errors import DuplicateVMID, MicroVMNotFound, VersionConflict
from .lifecycle import MicroVMState, check_transition
from .log import getLogger
from .models import VMID, MicroVM, MicroVMSpec
from .validation import normalize_spec, validate_spec


def _logger(vmid: str):
    return getLogger(__name__, [vmid])


class MicroVMStore:
    """Keeps the microvms registered by the control plane.

    All the methods are thread safe. Microvms are copied in and out of the
    store: modifying a returned microvm never changes what is stored.
    Identifiers of deleted microvms are remembered and never reused.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._microvms: Dict[VMID, MicroVM] = {}
        self._states: Dict[VMID, MicroVMState] = {}

    def _get(self, vmid: str) -> MicroVM:
        microvm = self._microvms.get(VMID(vmid))
        if microvm is None:
            raise MicroVMNotFound(vmid)
        return microvm

    @staticmethod
    def _accept(spec: MicroVMSpec) -> MicroVMSpec:
        # called outside of the lock
        return validate_spec(normalize_spec(spec))

    def create(self, spec: MicroVMSpec, vmid: Optional[str] = None) -> MicroVM:
        """Register a new microvm.

        Args:
            spec: the specification of the microvm, normalized and validated
                before being stored
            vmid: identifier to use, a random one is generated if None

        Returns:
            (A copy of) the stored microvm, at version
            :py:data:`~vmspec.constants.INITIAL_VERSION`

        Raises:
            VMSpecError: the specification is invalid
            DuplicateVMID: vmid is (or was) already used
        """
        spec = self._accept(spec)
        with self._lock:
            if vmid is None:
                _vmid = VMID.generate()
                while _vmid in self._states:
                    _vmid = VMID.generate()
            else:
                _vmid = VMID(vmid)
                if _vmid in self._states:
                    raise DuplicateVMID(_vmid)
            microvm = MicroVM(id=_vmid, version=INITIAL_VERSION, spec=spec)
            self._microvms[_vmid] = microvm
            self._states[_vmid] = check_transition(
                MicroVMState.VALIDATED, MicroVMState.REGISTERED
            )
            _logger(_vmid).info("Registered at version %d", microvm.version)
            _logger(_vmid).debug(json.dumps(microvm.to_dict(), indent=4))
            return copy.deepcopy(microvm)

    def get(self, vmid: str) -> MicroVM:
        """Get (a copy of) a microvm.

        Raises:
            MicroVMNotFound: no such microvm (or it has been deleted)
        """
        with self._lock:
            return copy.deepcopy(self._get(vmid))

    def update(
        self, vmid: str, spec: MicroVMSpec, expected_version: int
    ) -> MicroVM:
        """Replace the specification of a microvm.

        Args:
            vmid: identifier of the microvm
            spec: the new specification
            expected_version: the version the caller based its change on

        Returns:
            (A copy of) the updated microvm, its version bumped by one

        Raises:
            VMSpecError: the specification is invalid
            MicroVMNotFound: no such microvm
            VersionConflict: expected_version isn't the stored version
        """
        spec = self._accept(spec)
        with self._lock:
            current = self._get(vmid)
            if current.version != expected_version:
                _logger(vmid).info(
                    "Rejecting update based on version %d (stored: %d)",
                    expected_version,
                    current.version,
                )
                raise VersionConflict(current.id, expected_version, current.version)
            state = check_transition(self._states[current.id], MicroVMState.UPDATED)
            microvm = MicroVM(id=current.id, version=current.version + 1, spec=spec)
            self._microvms[current.id] = microvm
            self._states[current.id] = state
            _logger(vmid).info("Updated to version %d", microvm.version)
            return copy.deepcopy(microvm)

    def delete(self, vmid: str, expected_version: Optional[int] = None) -> MicroVM:
        """Delete a microvm.

        Args:
            vmid: identifier of the microvm
            expected_version: if set, the deletion only happens if the stored
                version matches

        Returns:
            The deleted microvm

        Raises:
            MicroVMNotFound: no such microvm
            VersionConflict: expected_version is set and isn't the stored version
        """
        with self._lock:
            current = self._get(vmid)
            if expected_version is not None and current.version != expected_version:
                raise VersionConflict(current.id, expected_version, current.version)
            self._states[current.id] = check_transition(
                self._states[current.id], MicroVMState.DELETED
            )
            del self._microvms[current.id]
            _logger(vmid).info("Deleted at version %d", current.version)
            return current

    def state(self, vmid: str) -> MicroVMState:
        with self._lock:
            state = self._states.get(VMID(vmid))
            if state is None:
                raise MicroVMNotFound(vmid)
            return state

    def list(self) -> List[MicroVM]:
        with self._lock:
            return [copy.deepcopy(m) for m in self._microvms.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._microvms)

    def __contains__(self, vmid) -> bool:
        if not isinstance(vmid, str) or not vmid.strip():
            return False
        with self._lock:
            return VMID(vmid) in self._microvms
