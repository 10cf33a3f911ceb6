"""
Complaint Lifecycle Coordinator - create, assign and resolve complaints.

Each transition:
1. Validates input and preconditions (nothing is written on failure)
2. Writes the complaint (MUST succeed)
3. Updates secondary aggregates: reporter rewards, team counters
   (best-effort, failures are logged and swallowed)
4. Publishes notification events (fire-and-forget)

CONSISTENCY NOTE:
The complaint write and the team/user counter writes are separate
operations with no transaction around them. A crash or a racing request
between steps 2 and 3 leaves the counters out of step with complaint
state. Team counters are advisory display values, so this is accepted.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional
import logging

from app.core.errors import (
    ConflictError,
    InfrastructureError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from app.core.settings import settings
from app.models.complaint import ComplaintCreate, ComplaintStatus
from app.models.notification import EventType, NotificationEvent, UserNotificationType
from app.models.user import OPERATOR_ROLES, REPORTER_ROLES, Actor, TeamStatus, UserRole
from app.services.notification_fanout import Notifier
from app.services.severity_scoring import severity_score
from app.services.status_workflow import StatusWorkflowEngine
from app.services.stores.base import ComplaintStore, TeamRegistry, UserAccumulator
from app.utils.geocoding import to_geo_point

logger = logging.getLogger(__name__)


class ComplaintLifecycleCoordinator:
    """
    Orchestrates complaint transitions across the complaint store,
    team registry and user accumulator, and emits the resulting events.
    """

    def __init__(
        self,
        complaints: ComplaintStore,
        teams: TeamRegistry,
        users: UserAccumulator,
        notifier: Notifier,
        eco_points_reward: Optional[int] = None,
        page_size: Optional[int] = None,
    ):
        self.complaints = complaints
        self.teams = teams
        self.users = users
        self.notifier = notifier
        self.workflow = StatusWorkflowEngine()
        self.eco_points_reward = settings.ECO_POINTS_REWARD if eco_points_reward is None else eco_points_reward
        self.page_size = settings.COMPLAINT_PAGE_SIZE if page_size is None else page_size

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_complaint(self, actor: Actor, data: ComplaintCreate) -> Dict:
        """
        Create a new complaint in status `open` and reward the reporter.

        Raises:
            ValidationError: Title missing/blank
            PermissionDeniedError: Caller role may not report
            NotFoundError: Caller has no user record
            InfrastructureError: The complaint could not be stored
        """
        title = (data.title or "").strip()
        if not title:
            raise ValidationError("Title is required")

        # The score comes from the label as sent: an unset priority is stored
        # as the default label but scores as "other"
        priority = data.priority or settings.DEFAULT_PRIORITY

        self._require_role(actor, REPORTER_ROLES)

        creator = self.users.get_user(actor.id)
        if creator is None:
            raise NotFoundError(f"User {actor.id} not found")
        if creator.get("role") not in REPORTER_ROLES:
            raise PermissionDeniedError(f"User {actor.id} is not allowed to report complaints")

        now = datetime.now(timezone.utc)
        record = {
            "user_id": actor.id,
            "title": title,
            "description": data.description,
            "image_url": data.image_url,
            "category": data.category or settings.DEFAULT_CATEGORY,
            "priority": priority,
            "severity_score": severity_score(data.priority),
            "location": to_geo_point(data.longitude, data.latitude),
            "status": ComplaintStatus.OPEN.value,
            "assigned_team": None,
            "assigned_by": None,
            "resolved_by": None,
            "proof_image_url": None,
            "status_history": [self.workflow.create_status_history_entry(
                from_status="",
                to_status=ComplaintStatus.OPEN.value,
                changed_by=actor.id,
                note="Complaint created"
            )],
            "created_at": now,
            "updated_at": now,
        }

        try:
            complaint = self.complaints.create(record)
        except Exception as e:
            logger.error(f"Failed to save complaint for user {actor.id}: {e}", exc_info=True)
            raise InfrastructureError(f"Failed to create complaint: {e}")

        logger.info(f"✅ Complaint {complaint['id']} created by {actor.id} (priority={priority})")

        # Reward is bookkeeping: the complaint stays even if this fails
        try:
            self.users.increment(actor.id, eco_points=self.eco_points_reward, complaints_count=1)
        except Exception as e:
            logger.warning(f"⚠️ Failed to award eco-points to {actor.id} for complaint {complaint['id']}: {e}")

        self._emit(NotificationEvent.broadcast(EventType.COMPLAINT_NEW, {
            "id": complaint["id"],
            "title": complaint["title"],
            "userId": actor.id,
            "reporterName": creator.get("name") or "User",
            "category": complaint["category"],
            "priority": complaint["priority"],
        }))

        return complaint

    # ------------------------------------------------------------------
    # Assign
    # ------------------------------------------------------------------

    def assign_complaint(self, actor: Actor, complaint_id: str, team_name: str) -> Dict:
        """
        Hand a complaint to a response team and move it to `in_progress`.

        Re-assigning an in_progress complaint runs the full transition again:
        the new team's active_tasks is incremented and the previous team's
        counter is left as it was.

        Raises:
            PermissionDeniedError: Caller is not admin/staff
            ValidationError: Team name missing
            NotFoundError: Complaint missing or already resolved, team missing
            ConflictError: Team is on break
        """
        self._require_role(actor, OPERATOR_ROLES)

        team_name = (team_name or "").strip()
        if not team_name:
            raise ValidationError("Team is required")

        team = self.teams.get_team(team_name)
        if team is None:
            raise NotFoundError(f"Team {team_name} not found")
        if team.get("status") == TeamStatus.BREAK.value:
            raise ConflictError("Cannot assign to team on break")

        complaint = self.complaints.get(complaint_id)
        if complaint is None or complaint.get("status") == ComplaintStatus.RESOLVED.value:
            raise NotFoundError("Complaint not found")

        history_entry = self.workflow.validate_and_transition(
            current_status=complaint.get("status", ComplaintStatus.OPEN.value),
            new_status=ComplaintStatus.IN_PROGRESS.value,
            changed_by=actor.id,
            note=f"Assigned to {team_name}"
        )

        updated = self._write(complaint_id, {
            "status": ComplaintStatus.IN_PROGRESS.value,
            "assigned_team": team_name,
            "assigned_by": actor.id,
            "status_history": complaint.get("status_history", []) + [history_entry],
            "updated_at": datetime.now(timezone.utc),
        })

        logger.info(f"✅ Complaint {complaint_id} assigned to {team_name} by {actor.id}")

        self._bump_team(team_name, active_delta=1)

        self._emit(NotificationEvent.broadcast(EventType.COMPLAINT_ASSIGNED, {
            "id": complaint_id,
            "team": team_name,
        }))

        try:
            for member_id in team.get("members") or []:
                self._emit(NotificationEvent.to_user(
                    user_id=str(member_id),
                    notification_type=UserNotificationType.TASK_ASSIGNED,
                    message=f"New task assigned to {team_name}: {updated['title']}",
                    complaint_id=complaint_id,
                ))
        except Exception as e:
            logger.warning(f"⚠️ Failed to notify members of {team_name}: {e}")

        return updated

    # ------------------------------------------------------------------
    # Resolve
    # ------------------------------------------------------------------

    def resolve_complaint(self, actor: Actor, complaint_id: str, proof_image_url: Optional[str]) -> Dict:
        """
        Mark a complaint resolved with photographic proof.

        Assignment is not required first: an open complaint can be resolved
        directly. Resolving an already-resolved complaint runs the full
        transition again: the proof is replaced and, when a team is assigned,
        its counters move once more.

        Raises:
            PermissionDeniedError: Caller is not admin/staff
            ValidationError: Proof image missing
            NotFoundError: Complaint missing
        """
        self._require_role(actor, OPERATOR_ROLES)

        proof_image_url = (proof_image_url or "").strip()
        if not proof_image_url:
            raise ValidationError("Proof image is required to resolve the task")

        complaint = self.complaints.get(complaint_id)
        if complaint is None:
            raise NotFoundError("Complaint not found")

        history_entry = self.workflow.validate_and_transition(
            current_status=complaint.get("status", ComplaintStatus.OPEN.value),
            new_status=ComplaintStatus.RESOLVED.value,
            changed_by=actor.id,
            note="Resolved with proof image"
        )

        updated = self._write(complaint_id, {
            "status": ComplaintStatus.RESOLVED.value,
            "proof_image_url": proof_image_url,
            "resolved_by": actor.id,
            "status_history": complaint.get("status_history", []) + [history_entry],
            "updated_at": datetime.now(timezone.utc),
        })

        logger.info(f"✅ Complaint {complaint_id} resolved by {actor.id}")

        team_name = updated.get("assigned_team")
        if team_name:
            self._bump_team(team_name, active_delta=-1, completed_delta=1)

        title = updated["title"]
        creator_id = updated["user_id"]
        message = f'Your complaint "{title}" has been resolved!'

        self._emit(NotificationEvent.broadcast(EventType.COMPLAINT_RESOLVED, {
            "id": complaint_id,
            "title": title,
            "userId": creator_id,
            "message": message,
        }))
        self._emit(NotificationEvent.to_user(
            user_id=creator_id,
            notification_type=UserNotificationType.COMPLAINT_RESOLVED,
            message=message,
            complaint_id=complaint_id,
        ))

        assigned_by = updated.get("assigned_by")
        if assigned_by:
            self._emit(NotificationEvent.to_user(
                user_id=assigned_by,
                notification_type=UserNotificationType.TASK_RESOLVED,
                message=f'Task for complaint "{title}" has been resolved by team {team_name or ""}'.strip(),
                complaint_id=complaint_id,
            ))

        return updated

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_complaints(self, actor: Actor) -> List[Dict]:
        """
        Role-scoped listing, newest first.

        Citizens see only their own complaints; admin/staff see everything.
        userId / assignedBy / resolvedBy are replaced by display summaries.
        """
        self._require_role(actor, REPORTER_ROLES)

        creator_id = actor.id if actor.role == UserRole.CITIZEN.value else None
        records = self.complaints.list(creator_id=creator_id, limit=self.page_size)

        people = self.users.get_users(self._referenced_user_ids(records))
        for record in records:
            for field in ("user_id", "assigned_by", "resolved_by"):
                user_id = record.get(field)
                if user_id and user_id in people:
                    record[field] = self._person_summary(people[user_id])

        logger.info(f"Listed {len(records)} complaints for {actor.role} {actor.id}")
        return records

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_role(actor: Actor, roles: Iterable[str]) -> None:
        if actor.role not in roles:
            raise PermissionDeniedError(f"Role '{actor.role}' is not allowed to perform this action")

    @staticmethod
    def _referenced_user_ids(records: List[Dict]) -> List[str]:
        ids = []
        for record in records:
            for field in ("user_id", "assigned_by", "resolved_by"):
                if record.get(field):
                    ids.append(record[field])
        return ids

    @staticmethod
    def _person_summary(user: Dict) -> Dict:
        return {
            "id": user["id"],
            "name": user.get("name"),
            "email": user.get("email"),
            "role": user.get("role"),
        }

    def _write(self, complaint_id: str, fields: Dict) -> Dict:
        try:
            updated = self.complaints.update(complaint_id, fields)
        except Exception as e:
            logger.error(f"Failed to update complaint {complaint_id}: {e}", exc_info=True)
            raise InfrastructureError(f"Failed to update complaint: {e}")
        if updated is None:
            raise NotFoundError("Complaint not found")
        return updated

    def _bump_team(self, team_name: str, active_delta: int = 0, completed_delta: int = 0) -> None:
        try:
            team = self.teams.increment_counters(team_name, active_delta=active_delta, completed_delta=completed_delta)
        except Exception as e:
            logger.warning(f"⚠️ Failed to update counters for team {team_name}: {e}")
            return
        if team is None:
            logger.warning(f"⚠️ Team {team_name} disappeared before its counters were updated")

    def _emit(self, event: NotificationEvent) -> None:
        try:
            self.notifier.publish(event.topic, event.payload)
        except Exception as e:
            logger.warning(f"⚠️ Failed to publish {event.topic}: {e}")


# Global coordinator instance (singleton pattern)
_coordinator = None


def get_complaint_lifecycle() -> ComplaintLifecycleCoordinator:
    """
    Get or create the coordinator wired to the configured stores
    and the process-wide notification fan-out.
    """
    global _coordinator
    if _coordinator is None:
        from app.services.notification_fanout import get_notification_fanout
        from app.services.stores.registry import get_stores

        stores = get_stores()
        _coordinator = ComplaintLifecycleCoordinator(
            complaints=stores.complaints,
            teams=stores.teams,
            users=stores.users,
            notifier=get_notification_fanout(),
        )
    return _coordinator
