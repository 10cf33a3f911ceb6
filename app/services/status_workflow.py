"""
Status Workflow Engine - complaint lifecycle state machine.

DESIGN PRINCIPLES:
- No backward transitions
- resolved only moves to resolved again (a re-resolve replaces the proof)
- open may be resolved directly (field crews sometimes clean up before
  a team is formally assigned)
- in_progress → in_progress is a re-assignment, not a no-op
- All transitions logged in status_history
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional
import logging

from app.core.errors import ConflictError
from app.models.complaint import ComplaintStatus

logger = logging.getLogger(__name__)


class StatusWorkflowEngine:
    """
    State machine for complaint status transitions.
    """

    # Allowed transitions map: {from_status: [to_status, ...]}
    ALLOWED_TRANSITIONS: Dict[ComplaintStatus, List[ComplaintStatus]] = {
        ComplaintStatus.OPEN: [ComplaintStatus.IN_PROGRESS, ComplaintStatus.RESOLVED],
        ComplaintStatus.IN_PROGRESS: [ComplaintStatus.IN_PROGRESS, ComplaintStatus.RESOLVED],
        ComplaintStatus.RESOLVED: [ComplaintStatus.RESOLVED],  # Re-resolve only
    }

    @classmethod
    def is_valid_transition(cls, from_status: str, to_status: str) -> bool:
        """
        Check if a status transition is valid.

        Args:
            from_status: Current status
            to_status: Desired new status

        Returns:
            True if transition is allowed, False otherwise
        """
        try:
            from_enum = ComplaintStatus(from_status)
            to_enum = ComplaintStatus(to_status)
        except ValueError:
            return False

        return to_enum in cls.ALLOWED_TRANSITIONS.get(from_enum, [])

    @classmethod
    def get_allowed_transitions(cls, current_status: str) -> List[str]:
        """Get list of allowed next statuses from current status."""
        try:
            current_enum = ComplaintStatus(current_status)
        except ValueError:
            return []
        return [status.value for status in cls.ALLOWED_TRANSITIONS.get(current_enum, [])]

    @classmethod
    def create_status_history_entry(
        cls,
        from_status: str,
        to_status: str,
        changed_by: str,
        note: Optional[str] = None
    ) -> Dict:
        """
        Create a status history entry for the audit trail.

        Timestamps are set client-side: Firestore rejects server
        timestamps inside array fields.
        """
        return {
            "from": from_status,
            "to": to_status,
            "changed_by": changed_by,
            "timestamp": datetime.now(timezone.utc),
            "note": note or ""
        }

    @classmethod
    def validate_and_transition(
        cls,
        current_status: str,
        new_status: str,
        changed_by: str,
        note: Optional[str] = None
    ) -> Dict:
        """
        Validate transition and create history entry.

        Raises:
            ConflictError: If transition is not allowed
        """
        if not cls.is_valid_transition(current_status, new_status):
            allowed = cls.get_allowed_transitions(current_status)
            logger.warning(f"Rejected status transition {current_status} → {new_status} by {changed_by}")
            raise ConflictError(
                f"Invalid status transition: {current_status} → {new_status}. "
                f"Allowed transitions from {current_status}: {allowed}"
            )

        return cls.create_status_history_entry(
            from_status=current_status,
            to_status=new_status,
            changed_by=changed_by,
            note=note
        )
