from datetime import datetime
from typing import Optional

from pydantic import Field

from boomerang.models.enums import Timing
from boomerang.schemas.common import CamelModel
from boomerang.services.scheduling import from_storage


class TaskOut(CamelModel):
    id: str
    user_id: str
    capture_id: str
    type: str
    status: str
    contact_id: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    delivery_method: str
    message: str
    original_transcription: str
    timing: Optional[str] = None
    scheduled_for: Optional[datetime] = None
    created_at: datetime
    approved_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    dismissed_at: Optional[datetime] = None

    @classmethod
    def from_task(cls, task) -> "TaskOut":
        return cls(
            id=task.id,
            user_id=task.user_id,
            capture_id=task.capture_id,
            type=task.task_type,
            status=task.status,
            contact_id=task.contact_id,
            contact_name=task.contact_name,
            contact_phone=task.contact_phone,
            contact_email=task.contact_email,
            delivery_method=task.delivery_method,
            message=task.message,
            original_transcription=task.original_transcription,
            timing=task.timing,
            scheduled_for=from_storage(task.scheduled_for),
            created_at=from_storage(task.created_at),
            approved_at=from_storage(task.approved_at),
            expires_at=from_storage(task.expires_at),
            archived_at=from_storage(task.archived_at),
            dismissed_at=from_storage(task.dismissed_at),
        )


class TaskStats(CamelModel):
    total: int
    needs_info: int
    completed_today: int


class PendingTasksResponse(CamelModel):
    active: list[TaskOut]
    archived: list[TaskOut]
    stats: TaskStats


class UpdateTaskRequest(CamelModel):
    status: str
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    message: Optional[str] = None
    timing: Optional[Timing] = None
    contact_id: Optional[str] = None


class UpdateTaskResponse(CamelModel):
    success: bool = True
    message: str
    task: TaskOut


class BulkApproveRequest(CamelModel):
    task_ids: list[str] = Field(default_factory=list)


class BulkApproveResponse(CamelModel):
    success: bool = True
    approved_count: int
    failed_ids: list[str]
    message: str
