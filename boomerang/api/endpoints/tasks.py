"""
Pending task listing and lifecycle transitions.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from boomerang.db.session import get_db
from boomerang.models.enums import TaskStatus
from boomerang.schemas.task import (
    BulkApproveRequest, BulkApproveResponse, PendingTasksResponse, TaskOut,
    UpdateTaskRequest, UpdateTaskResponse,
)
from boomerang.services.auth_service import require_owner
from boomerang.services.errors import InvalidTransition, NotFound, PersistenceError, ValidationError
from boomerang.services.lifecycle import ApprovalOverrides, TaskLifecycleController
from boomerang.services.profile_store import ProfileStore
from boomerang.services.scheduling import start_of_local_day
from boomerang.services.task_store import TaskStore
from boomerang.utils.messages import MSG
from boomerang.utils.summary import build_stats

router = APIRouter()
logger = logging.getLogger(__name__)

ARCHIVED_LIMIT = 50
CALLER_STATUSES = (TaskStatus.APPROVED.value, TaskStatus.SKIPPED.value)


def _error(status_code: int, kind: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"error": kind, "message": message})


def _controller(db: Session, owner_id: str) -> TaskLifecycleController:
    """Lifecycle controller on the owner's wall clock."""
    return TaskLifecycleController(TaskStore(db), clock=ProfileStore(db).owner_clock(owner_id))


@router.get("/pending", response_model=PendingTasksResponse)
async def list_pending(owner_id: str = Depends(require_owner), db: Session = Depends(get_db)):
    store = TaskStore(db)
    try:
        active = store.list_tasks(owner_id, [TaskStatus.PENDING])
        archived = store.list_tasks(owner_id, [TaskStatus.ARCHIVED], limit=ARCHIVED_LIMIT)
        now = ProfileStore(db).owner_clock(owner_id)()
        completed_today = store.count_approved_since(owner_id, start_of_local_day(now))
    except PersistenceError as e:
        logger.error(f"Failed to list tasks for owner {owner_id}: {e.message}")
        raise _error(500, e.kind, e.message)

    return PendingTasksResponse(
        active=[TaskOut.from_task(t) for t in active],
        archived=[TaskOut.from_task(t) for t in archived],
        stats=build_stats(active, completed_today),
    )


@router.post("/bulk-approve", response_model=BulkApproveResponse)
async def bulk_approve(
    body: BulkApproveRequest,
    owner_id: str = Depends(require_owner),
    db: Session = Depends(get_db),
):
    if not body.task_ids:
        raise _error(400, ValidationError.kind, MSG.INVALID_TASK_IDS)

    result = _controller(db, owner_id).bulk_approve(body.task_ids, owner_id)
    logger.info(f"Bulk approve for owner {owner_id}: {result.approved_count} ok, {len(result.failed_ids)} failed")
    return BulkApproveResponse(
        approved_count=result.approved_count,
        failed_ids=result.failed_ids,
        message=MSG.BULK_APPROVED.format(count=result.approved_count),
    )


@router.put("/{task_id}", response_model=UpdateTaskResponse)
async def update_task(
    task_id: str,
    body: UpdateTaskRequest,
    owner_id: str = Depends(require_owner),
    db: Session = Depends(get_db),
):
    if body.status not in CALLER_STATUSES:
        raise _error(400, InvalidTransition.kind, MSG.INVALID_STATUS)

    logger.info(f"Updating task {task_id} to status: {body.status} for owner: {owner_id}")
    overrides = ApprovalOverrides(
        contact_phone=body.contact_phone,
        contact_email=body.contact_email,
        message=body.message,
        timing=body.timing,
        contact_id=body.contact_id,
    )

    try:
        task = _controller(db, owner_id).transition(task_id, owner_id, body.status, overrides)
    except NotFound:
        raise _error(404, NotFound.kind, MSG.TASK_NOT_FOUND)
    except InvalidTransition as e:
        raise _error(409, e.kind, e.message)
    except ValidationError as e:
        raise _error(422, e.kind, e.message)
    except PersistenceError as e:
        raise _error(500, e.kind, e.message)

    return UpdateTaskResponse(message=MSG.TASK_UPDATED.format(status=body.status), task=TaskOut.from_task(task))
