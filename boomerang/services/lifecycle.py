"""
Task Lifecycle Controller.

    pending -> approved -> sent -> delivered
                        -> failed
    pending -> skipped
    pending | approved -> archived      (administrative)
    pending -> dismissed                (administrative)

Callers may only request pending -> approved and pending -> skipped. The
delivery collaborator owns approved -> sent/failed; the expiry sweep owns
archiving.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Optional

from boomerang.models.enums import TaskStatus, Timing, is_contact_facing
from boomerang.models.task import Task
from boomerang.services.errors import (
    BoomerangError, InvalidTransition, NotFound, PersistenceError, ValidationError,
)
from boomerang.services.scheduling import compute_scheduled_for, local_now, to_storage
from boomerang.services.task_store import TaskStore

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    TaskStatus.PENDING: {TaskStatus.APPROVED, TaskStatus.SKIPPED, TaskStatus.ARCHIVED, TaskStatus.DISMISSED},
    TaskStatus.APPROVED: {TaskStatus.SENT, TaskStatus.FAILED, TaskStatus.ARCHIVED},
    TaskStatus.SENT: {TaskStatus.DELIVERED, TaskStatus.FAILED},
}

CALLER_TRANSITIONS = {
    (TaskStatus.PENDING, TaskStatus.APPROVED),
    (TaskStatus.PENDING, TaskStatus.SKIPPED),
}

# Applied when an approval carries no timing and the task has no send time yet
DEFAULT_APPROVAL_TIMING = Timing.END_OF_DAY


@dataclass
class ApprovalOverrides:
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    message: Optional[str] = None
    timing: Optional[Timing] = None
    contact_id: Optional[str] = None


@dataclass
class BulkApproveResult:
    approved_ids: list[str] = field(default_factory=list)
    failed_ids: list[str] = field(default_factory=list)

    @property
    def approved_count(self) -> int:
        return len(self.approved_ids)


def can_transition(current: TaskStatus, new: TaskStatus) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, set())


class TaskLifecycleController:
    def __init__(self, store: TaskStore, clock: Callable[[], datetime] = local_now):
        self.store = store
        self.clock = clock

    def transition(
        self,
        task_id: str,
        owner_id: str,
        new_status: TaskStatus | str,
        overrides: Optional[ApprovalOverrides] = None,
    ) -> Task:
        """Apply a caller-initiated transition.

        Raises NotFound when the task is missing or owned by someone else,
        InvalidTransition for anything but pending -> approved/skipped, and
        ValidationError when an approval would leave a contact-facing task
        without a phone or email.
        """
        try:
            new_status = TaskStatus(new_status)
        except ValueError as e:
            raise InvalidTransition(f"Unknown status '{new_status}'", task_id=task_id) from e

        task = self.store.get_task(task_id, owner_id)
        current = TaskStatus(task.status)

        if (current, new_status) not in CALLER_TRANSITIONS:
            logger.warning(
                f"Rejected transition {current.value} -> {new_status.value} for task {task_id} (owner {owner_id})"
            )
            raise InvalidTransition(
                f"Cannot move task from {current.value} to {new_status.value}",
                task_id=task_id, owner_id=owner_id,
            )

        now = self.clock()
        if new_status is TaskStatus.APPROVED:
            self._apply_approval(task, overrides or ApprovalOverrides(), now)
        task.status = new_status.value

        task = self.store.save_task(task)
        logger.info(f"Task {task_id} {current.value} -> {new_status.value} (owner {owner_id})")
        return task

    def _apply_approval(self, task: Task, overrides: ApprovalOverrides, now: datetime):
        phone = overrides.contact_phone or task.contact_phone
        email = overrides.contact_email or task.contact_email
        if is_contact_facing(task.task_type) and not (phone or email):
            raise ValidationError(
                f"Task {task.id} needs a phone number or email before approval",
                task_id=task.id, owner_id=task.user_id,
            )

        task.contact_phone = phone
        task.contact_email = email
        if overrides.message:
            task.message = overrides.message
        if overrides.contact_id:
            task.contact_id = overrides.contact_id

        if overrides.timing:
            timing = Timing(overrides.timing)
            task.timing = timing.value
            task.scheduled_for = to_storage(compute_scheduled_for(timing, now))
        elif task.scheduled_for is None:
            task.timing = DEFAULT_APPROVAL_TIMING.value
            task.scheduled_for = to_storage(compute_scheduled_for(DEFAULT_APPROVAL_TIMING, now))

        task.approved_at = to_storage(now)

    def bulk_approve(self, task_ids: Iterable[str], owner_id: str) -> BulkApproveResult:
        """Approve every listed task the owner holds in `pending`, one by one.

        Ids that are missing, foreign, not pending, or fail to save are reported
        in `failed_ids`; the others are approved regardless. Each task keeps its
        generated `scheduled_for`; only unscheduled tasks get `end_of_day`, rather
        than every task being moved to today 17:00.
        """
        result = BulkApproveResult()
        for task_id in dict.fromkeys(task_ids):
            try:
                self.transition(task_id, owner_id, TaskStatus.APPROVED)
            except (NotFound, InvalidTransition, ValidationError, PersistenceError) as e:
                logger.info(f"Bulk approve skipped task {task_id} (owner {owner_id}): {e.kind}")
                result.failed_ids.append(task_id)
            else:
                result.approved_ids.append(task_id)
        return result

    def archive_expired(self, now: Optional[datetime] = None) -> int:
        """Administrative sweep: archive pending tasks past their expiry."""
        now = now or self.clock()
        archived = 0
        for task in self.store.list_expired_pending(now):
            if not can_transition(TaskStatus(task.status), TaskStatus.ARCHIVED):
                continue
            task.status = TaskStatus.ARCHIVED.value
            task.archived_at = to_storage(now)
            try:
                self.store.save_task(task)
            except BoomerangError as e:
                logger.error(f"Failed to archive expired task {task.id} (owner {task.user_id}): {e.message}")
                continue
            archived += 1
        if archived:
            logger.info(f"Archived {archived} expired pending task(s)")
        return archived
