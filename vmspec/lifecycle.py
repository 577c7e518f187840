"""States a microvm goes through, from a proposed specification to the
deletion of its record."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Set

from .errors import InvalidStateTransition, VMSpecError
from .models import MicroVMSpec
from .validation import check_spec, normalize_spec

logger = logging.getLogger(__name__)


class MicroVMState(Enum):
    PROPOSED = "proposed"
    VALIDATED = "validated"
    REJECTED = "rejected"
    REGISTERED = "registered"
    UPDATED = "updated"
    DELETED = "deleted"

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]


TRANSITIONS: Dict[MicroVMState, Set[MicroVMState]] = {
    MicroVMState.PROPOSED: {MicroVMState.VALIDATED, MicroVMState.REJECTED},
    MicroVMState.VALIDATED: {MicroVMState.REGISTERED},
    MicroVMState.REJECTED: set(),
    MicroVMState.REGISTERED: {MicroVMState.UPDATED, MicroVMState.DELETED},
    MicroVMState.UPDATED: {MicroVMState.UPDATED, MicroVMState.DELETED},
    MicroVMState.DELETED: set(),
}


def check_transition(current: MicroVMState, target: MicroVMState) -> MicroVMState:
    """Get the target state if it can be reached from the current one.

    Raises:
        InvalidStateTransition: target can't be reached from current
    """
    if target not in TRANSITIONS[current]:
        raise InvalidStateTransition(current, target)
    return target


@dataclass
class Submission:
    """A specification submitted by a client and the outcome of its checks."""

    spec: MicroVMSpec
    state: MicroVMState = MicroVMState.PROPOSED
    errors: List[VMSpecError] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.state == MicroVMState.VALIDATED


def submit(spec: MicroVMSpec) -> Submission:
    """Normalize and validate a specification.

    The submission is VALIDATED and holds the normalized specification, or
    REJECTED and holds the original one along with all its violations.
    """
    submission = Submission(spec=spec)
    normalized = normalize_spec(spec)
    errors = check_spec(normalized)
    if errors:
        submission.state = check_transition(submission.state, MicroVMState.REJECTED)
        submission.errors = errors
        logger.info("Specification rejected: %d violation(s)", len(errors))
    else:
        submission.state = check_transition(submission.state, MicroVMState.VALIDATED)
        submission.spec = normalized
    return submission
