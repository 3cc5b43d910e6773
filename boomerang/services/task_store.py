"""
Task Store: Capture and Task persistence scoped by owner.

The store is the single source of truth for task status. Every write commits
on its own, so one rejected row never takes others down with it.
"""
import logging
import os
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from boomerang.models.capture import Capture
from boomerang.models.enums import ProcessingStatus, TaskStatus
from boomerang.models.task import Task
from boomerang.services.errors import NotFound, PersistenceError
from boomerang.services.task_mapping import TaskDraft
from boomerang.services.scheduling import to_storage

logger = logging.getLogger(__name__)

TASK_EXPIRY_DAYS = int(os.getenv("TASK_EXPIRY_DAYS", "7"))


class TaskStore:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, action: str, **context):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Store rejected {action} {context}: {e}")
            raise PersistenceError(f"Failed to {action}", **context) from e

    # ==================== CAPTURES ====================

    def create_capture(self, owner_id: str, transcription: str, duration: Optional[float] = None) -> Capture:
        capture = Capture(
            user_id=owner_id,
            transcription=transcription,
            duration_seconds=duration,
            processing_status=ProcessingStatus.PROCESSING.value,
        )
        self.db.add(capture)
        self._commit("create capture", owner_id=owner_id)
        self.db.refresh(capture)
        return capture

    def finish_capture(
        self,
        capture: Capture,
        status: ProcessingStatus,
        error_kind: Optional[str] = None,
        intent_data: Optional[list] = None,
    ) -> Capture:
        capture.processing_status = status.value
        capture.error_kind = error_kind
        capture.processed_at = datetime.utcnow()
        if intent_data is not None:
            capture.intent_data = intent_data
        self._commit("update capture", owner_id=capture.user_id, capture_id=capture.id)
        return capture

    # ==================== TASKS ====================

    def create_task(self, owner_id: str, capture_id: str, draft: TaskDraft) -> Task:
        created_at = datetime.utcnow()
        task = Task(
            user_id=owner_id,
            capture_id=capture_id,
            task_type=draft.task_type.value,
            status=TaskStatus.PENDING.value,
            contact_id=draft.contact_id,
            contact_name=draft.contact_name,
            contact_phone=draft.contact_phone,
            contact_email=draft.contact_email,
            message=draft.message,
            delivery_method=draft.delivery_method.value,
            timing=draft.timing.value,
            scheduled_for=to_storage(draft.scheduled_for),
            created_at=created_at,
            expires_at=created_at + timedelta(days=TASK_EXPIRY_DAYS),
        )
        self.db.add(task)
        self._commit("create task", owner_id=owner_id, capture_id=capture_id)
        self.db.refresh(task)
        return task

    def get_task(self, task_id: str, owner_id: str) -> Task:
        """Fetch a task owned by `owner_id`. Another owner's task is reported as missing."""
        try:
            task = (
                self.db.query(Task)
                .options(joinedload(Task.capture))
                .filter(Task.id == task_id, Task.user_id == owner_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load task", task_id=task_id, owner_id=owner_id) from e
        if task is None:
            raise NotFound(f"Task {task_id} not found", task_id=task_id, owner_id=owner_id)
        return task

    def list_tasks(self, owner_id: str, statuses: Iterable[TaskStatus], limit: Optional[int] = None) -> list[Task]:
        query = (
            self.db.query(Task)
            .options(joinedload(Task.capture))
            .filter(Task.user_id == owner_id, Task.status.in_([s.value for s in statuses]))
            .order_by(Task.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        try:
            return query.all()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to list tasks", owner_id=owner_id) from e

    def count_approved_since(self, owner_id: str, since: datetime) -> int:
        try:
            return (
                self.db.query(Task)
                .filter(
                    Task.user_id == owner_id,
                    Task.approved_at.isnot(None),
                    Task.approved_at >= to_storage(since),
                )
                .count()
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to count tasks", owner_id=owner_id) from e

    def list_expired_pending(self, now: datetime) -> list[Task]:
        try:
            return (
                self.db.query(Task)
                .filter(
                    Task.status == TaskStatus.PENDING.value,
                    Task.expires_at.isnot(None),
                    Task.expires_at <= to_storage(now),
                )
                .all()
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to list expired tasks") from e

    def save_task(self, task: Task) -> Task:
        self._commit("update task", owner_id=task.user_id, task_id=task.id)
        self.db.refresh(task)
        return task
