"""Issue state machine.

States: open → in-progress → resolved. A resolved issue can be reopened.
"""

from rentflow.core.exceptions import ValidationError

ISSUE_TRANSITIONS: dict[str, set[str]] = {
    "open": {"in-progress", "resolved"},
    "in-progress": {"open", "resolved"},
    "resolved": {"open"},  # Reopened when the problem comes back
}


def assert_issue_transition(current_status: str, new_status: str) -> None:
    """Validate issue state transition."""
    allowed = ISSUE_TRANSITIONS.get(current_status, set())
    if new_status not in allowed:
        raise ValidationError(f"Invalid issue transition: {current_status} → {new_status}")
