"""
Notification events produced by lifecycle transitions.
Ephemeral: never persisted, delivered once through the fan-out.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from enum import Enum


class EventType(str, Enum):
    COMPLAINT_NEW = "complaint:new"
    COMPLAINT_ASSIGNED = "complaint:assigned"
    COMPLAINT_RESOLVED = "complaint:resolved"


class UserNotificationType(str, Enum):
    """Payload `type` of events sent to a single user's channel."""
    COMPLAINT_RESOLVED = "complaint_resolved"
    TASK_RESOLVED = "task_resolved"
    TASK_ASSIGNED = "task_assigned"


def user_topic(user_id: str) -> str:
    """Per-user channel name."""
    return f"user:{user_id}:notification"


class NotificationEvent(BaseModel):
    """
    A typed event with a target scope.

    target=None means broadcast on the channel named by `type`;
    otherwise the event goes to that user's channel only.
    """
    type: str
    target: Optional[str] = Field(None, description="User ID, or None for broadcast")
    payload: Dict[str, Any] = Field(default_factory=dict)

    @property
    def topic(self) -> str:
        if self.target is None:
            return self.type
        return user_topic(self.target)

    @classmethod
    def broadcast(cls, event_type: EventType, payload: Dict[str, Any]) -> "NotificationEvent":
        return cls(type=event_type.value, payload=payload)

    @classmethod
    def to_user(
        cls,
        user_id: str,
        notification_type: UserNotificationType,
        message: str,
        complaint_id: str,
    ) -> "NotificationEvent":
        return cls(
            type=notification_type.value,
            target=user_id,
            payload={
                "type": notification_type.value,
                "message": message,
                "complaintId": complaint_id,
            },
        )
