"""
Task Generator: transcription -> pending tasks.

Drafts are persisted one by one and independently. A draft the store rejects
is logged and skipped; the capture ends `completed` when at least one task was
stored and `failed` otherwise. No capture is ever left `processing`.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from boomerang.models.capture import Capture
from boomerang.models.enums import ProcessingStatus, is_contact_facing
from boomerang.models.task import Task
from boomerang.services.ai_service import AIService, ActionCall
from boomerang.services.contact_directory import ContactDirectory
from boomerang.services.contact_matching import resolve_exact
from boomerang.services.errors import (
    AIUnavailable, NoActionableIntent, PersistenceError, ValidationError,
)
from boomerang.services.scheduling import local_now
from boomerang.services.task_mapping import TaskDraft, map_action_call
from boomerang.services.task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass
class SkippedAction:
    function: str
    kind: str
    reason: str

    def to_dict(self) -> dict:
        return {"function": self.function, "error": self.kind, "reason": self.reason}


@dataclass
class GenerationResult:
    capture: Capture
    tasks: list[Task] = field(default_factory=list)
    skipped: list[SkippedAction] = field(default_factory=list)


class TaskGenerator:
    def __init__(
        self,
        store: TaskStore,
        ai: AIService,
        contacts: Optional[ContactDirectory] = None,
        clock: Callable[[], datetime] = local_now,
        ai_timeout: Optional[float] = None,
    ):
        self.store = store
        self.ai = ai
        self.contacts = contacts
        self.clock = clock
        self.ai_timeout = ai_timeout

    def map_calls(self, calls: list[ActionCall], now: datetime) -> tuple[list[TaskDraft], list[SkippedAction]]:
        """Map every call independently; rejected calls are collected, not raised."""
        drafts, skipped = [], []
        for call in calls:
            try:
                drafts.append(map_action_call(call, now))
            except ValidationError as e:
                logger.warning(f"Skipping model call {call.name}: {e.message}")
                skipped.append(SkippedAction(call.name, e.kind, e.message))
        return drafts, skipped

    async def generate(self, transcription: str, business_context: Optional[str] = None) -> list[TaskDraft]:
        """Turn a transcription into task drafts.

        Raises AIUnavailable if the model cannot be reached and
        NoActionableIntent if none of its calls is usable.
        """
        drafts, _, _ = await self._generate(transcription, business_context)
        return drafts

    async def _generate(self, transcription: str, business_context: Optional[str]):
        now = self.clock()
        calls = await self.ai.propose_actions(
            transcription, business_context, timeout=self.ai_timeout, now=now
        )
        drafts, skipped = self.map_calls(calls, now)
        if not drafts:
            raise NoActionableIntent(f"None of the {len(calls)} model call(s) was usable")
        return drafts, skipped, calls

    def _resolve_contact(self, draft: TaskDraft, directory: list) -> TaskDraft:
        if not is_contact_facing(draft.task_type) or not draft.contact_name:
            return draft
        contact = resolve_exact(draft.contact_name, directory)
        return draft.with_contact(contact) if contact else draft

    def _directory(self, owner_id: str) -> list:
        if self.contacts is None:
            return []
        try:
            return self.contacts.list_contacts(owner_id)
        except PersistenceError as e:
            logger.warning(f"Contact lookup failed for owner {owner_id}, leaving drafts unresolved: {e}")
            return []

    async def process_capture(self, capture: Capture, business_context: Optional[str] = None) -> GenerationResult:
        owner_id = capture.user_id
        result = GenerationResult(capture=capture)

        try:
            drafts, skipped, calls = await self._generate(capture.transcription, business_context)
        except AIUnavailable as e:
            logger.error(f"Generation failed for capture {capture.id} (owner {owner_id}): {e.kind}: {e.message}")
            self.store.finish_capture(capture, ProcessingStatus.FAILED, error_kind=e.kind)
            raise

        result.skipped.extend(skipped)
        directory = self._directory(owner_id)

        for draft in drafts:
            draft = self._resolve_contact(draft, directory)
            try:
                result.tasks.append(self.store.create_task(owner_id, capture.id, draft))
            except PersistenceError as e:
                logger.error(
                    f"Dropping {draft.task_type.value} draft for capture {capture.id} (owner {owner_id}): {e.message}"
                )
                result.skipped.append(SkippedAction(draft.source_function, e.kind, e.message))

        intent_data = [c.to_dict() for c in calls]
        if result.tasks:
            self.store.finish_capture(capture, ProcessingStatus.COMPLETED, intent_data=intent_data)
            logger.info(f"Capture {capture.id}: stored {len(result.tasks)} task(s), skipped {len(result.skipped)}")
            return result

        self.store.finish_capture(
            capture, ProcessingStatus.FAILED, error_kind=PersistenceError.kind, intent_data=intent_data
        )
        raise PersistenceError(
            f"No task from capture {capture.id} could be stored", capture_id=capture.id, owner_id=owner_id
        )
