"""State machine validation for task and risk status transitions.

Both lifecycles are one-way:
- Tasks start pending and can be completed
- Risks and active issues start active and can be resolved
No-op transitions (same status) are always allowed.
"""
import logging
from typing import Union

from .models import TaskStatus, RiskStatus

logger = logging.getLogger("affairs-core.state_machine")

Status = Union[TaskStatus, RiskStatus]


class StateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(
        self,
        message: str,
        current_status: Status,
        requested_status: Status,
        allowed_transitions: list[Status]
    ):
        super().__init__(message)
        self.current_status = current_status
        self.requested_status = requested_status
        self.allowed_transitions = allowed_transitions


# Maps current status → list of allowed next statuses
TRANSITION_MATRIX: dict[Status, list[Status]] = {
    TaskStatus.PENDING: [
        TaskStatus.PENDING,     # No-op (allowed)
        TaskStatus.COMPLETED,   # Forward: work done
    ],
    TaskStatus.COMPLETED: [
        TaskStatus.COMPLETED,   # No-op (allowed)
        # Note: completed is terminal - add a new task for follow-up work
    ],
    RiskStatus.ACTIVE: [
        RiskStatus.ACTIVE,      # No-op (allowed)
        RiskStatus.RESOLVED,    # Forward: mitigated or closed
    ],
    RiskStatus.RESOLVED: [
        RiskStatus.RESOLVED,    # No-op (allowed)
        # Note: no reopening path - track a new issue instead
    ],
}


def is_transition_valid(current_status: Status, new_status: Status) -> bool:
    """Check if a status transition is valid."""
    return new_status in TRANSITION_MATRIX.get(current_status, [])


def validate_transition(current_status: Status, new_status: Status) -> None:
    """
    Validate a status transition and raise exception if invalid.

    Args:
        current_status: Current status
        new_status: Requested new status

    Raises:
        StateTransitionError: If the transition is not allowed
    """
    if current_status == new_status:
        logger.debug(f"No-op transition: {current_status.value} → {new_status.value}")
        return

    if not is_transition_valid(current_status, new_status):
        allowed_transitions = get_allowed_transitions(current_status)
        allowed_names = [s.value for s in allowed_transitions]

        error_msg = f"Invalid status transition: {current_status.value} → {new_status.value}."
        if allowed_names:
            error_msg += f" From {current_status.value}, you can only transition to: {', '.join(allowed_names)}."
        else:
            error_msg += f" {current_status.value.capitalize()} is terminal and cannot be reopened."

        logger.warning(f"Blocked transition: {error_msg}")
        raise StateTransitionError(
            message=error_msg,
            current_status=current_status,
            requested_status=new_status,
            allowed_transitions=allowed_transitions
        )

    logger.debug(f"Valid transition: {current_status.value} → {new_status.value}")


def get_allowed_transitions(current_status: Status) -> list[Status]:
    """Get list of allowed transitions from current status, excluding the no-op."""
    return [s for s in TRANSITION_MATRIX.get(current_status, []) if s != current_status]
