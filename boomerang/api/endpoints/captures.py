"""
Capture ingestion: transcription in, pending tasks out.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from boomerang.db.session import get_db
from boomerang.schemas.capture import CaptureRequest, CaptureResponse, SkippedActionOut
from boomerang.schemas.task import TaskOut
from boomerang.services.ai_service import ai_service
from boomerang.services.auth_service import require_owner
from boomerang.services.contact_directory import ContactDirectory
from boomerang.services.errors import AIUnavailable, NoActionableIntent, PersistenceError
from boomerang.services.profile_store import ProfileStore, business_context_for, timezone_for
from boomerang.services.scheduling import local_now
from boomerang.services.task_generator import TaskGenerator
from boomerang.services.task_store import TaskStore
from boomerang.utils.messages import MSG

router = APIRouter()
logger = logging.getLogger(__name__)

FAILURE_MESSAGES = {
    NoActionableIntent.kind: MSG.NO_ACTIONABLE_INTENT,
    AIUnavailable.kind: MSG.AI_UNAVAILABLE,
    PersistenceError.kind: MSG.PERSISTENCE_ERROR,
}


@router.post("", response_model=CaptureResponse)
async def submit_capture(
    body: CaptureRequest,
    owner_id: str = Depends(require_owner),
    db: Session = Depends(get_db),
):
    transcription = (body.transcription or "").strip()
    if not transcription:
        raise HTTPException(status_code=400, detail={"error": "ValidationError", "message": MSG.EMPTY_TRANSCRIPTION})

    profile = ProfileStore(db).load_or_default(owner_id)
    business_context = body.business_context or business_context_for(profile)
    owner_tz = timezone_for(profile)

    store = TaskStore(db)
    generator = TaskGenerator(
        store, ai_service, contacts=ContactDirectory(db), clock=lambda: local_now(owner_tz)
    )

    try:
        capture = store.create_capture(owner_id, transcription, body.duration)
        logger.info(f"Received capture {capture.id} from owner {owner_id} ({len(transcription)} chars)")
        result = await generator.process_capture(capture, business_context)
    except (AIUnavailable, PersistenceError) as e:
        raise HTTPException(
            status_code=500,
            detail={"error": e.kind, "message": FAILURE_MESSAGES.get(e.kind, e.message)},
        )

    message = (
        MSG.TASKS_GENERATED_PARTIAL.format(count=len(result.tasks), skipped=len(result.skipped))
        if result.skipped
        else MSG.TASKS_GENERATED.format(count=len(result.tasks))
    )
    return CaptureResponse(
        capture_id=capture.id,
        tasks_generated=[TaskOut.from_task(t) for t in result.tasks],
        skipped=[SkippedActionOut(**s.to_dict()) for s in result.skipped],
        message=message,
    )
