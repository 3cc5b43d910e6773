"""
Drives the review flow against the API.

Nothing reaches the server until the owner approves or skips the task under
review; walking away mid-task leaves the task `pending`.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from boomerang.client.api_client import ApiError, TaskApiClient
from boomerang.client.review_flow import (
    InvalidReviewEvent, MessagePreview, ReviewState, ReviewStep, TaskResolved,
    approval_overrides, build_preview, build_review_state, reduce,
)
from boomerang.client.task_cache import CacheMiss, TaskCache
from boomerang.models.enums import TaskStatus
from boomerang.services.scheduling import local_now
from boomerang.utils.messages import MSG

logger = logging.getLogger(__name__)

# 404: gone or reassigned, 409: no longer pending
STALE_TASK_STATUSES = (404, 409)


class ReviewSession:
    def __init__(self, api: TaskApiClient, cache: TaskCache, clock: Callable[[], datetime] = local_now):
        self.api = api
        self.cache = cache
        self.clock = clock
        self.pending_tasks: list[dict] = []
        self.contacts: list[dict] = []
        self.state = ReviewState()
        self.from_cache = False
        self.last_error: Optional[ApiError] = None
        # Contacts created for a task whose approval has not gone through yet
        self._created_contacts: dict[str, dict] = {}

    async def load_pending_tasks(self) -> list[dict]:
        """Fetch pending tasks, falling back to the cached snapshot if the fetch fails.

        Raises the fetch error only when there is no snapshot either.
        """
        try:
            response = await self.api.list_pending()
        except ApiError as e:
            self.last_error = e
            logger.error(f"Failed to load pending tasks: {e.kind}: {e.message}")
            try:
                tasks = self.cache.load()
            except CacheMiss:
                raise e
            logger.info(f"Returning {len(tasks)} cached tasks as fallback")
            self.pending_tasks = tasks
            self.from_cache = True
            return tasks

        tasks = response.get("active", [])
        self.pending_tasks = tasks
        self.from_cache = False
        self.last_error = None
        self._refresh_cache()
        logger.info(f"Loaded {len(tasks)} pending tasks")
        return tasks

    async def _load_contacts(self) -> list[dict]:
        try:
            return await self.api.list_contacts()
        except ApiError as e:
            logger.warning(f"Contact directory unavailable, every named contact will need confirming: {e.kind}")
            return []

    async def start(self) -> ReviewState:
        await self.load_pending_tasks()
        self.contacts = await self._load_contacts()
        self.state = build_review_state(self.pending_tasks, self.contacts)
        return self.state

    def dispatch(self, event) -> ReviewState:
        self.state = reduce(self.state, event)
        return self.state

    def preview(self, now: Optional[datetime] = None) -> MessagePreview:
        return build_preview(self.state, now or self.clock())

    async def approve(self) -> dict:
        """Approve the current task with everything collected during review."""
        state = self._require_preview()
        task = state.current_task
        overrides = approval_overrides(state)

        if state.selection.create_new:
            contact = self._created_contacts.get(task.id)
            if contact is None:
                phone, email = overrides["contactPhone"], overrides["contactEmail"]
                contact = await self.api.create_contact(task.contact_name, phone=phone, email=email)
                self._created_contacts[task.id] = contact
                self.contacts.append(contact)
            overrides["contactId"] = contact["id"]

        updated = await self._submit(task.id, TaskStatus.APPROVED, overrides)
        self._created_contacts.pop(task.id, None)
        logger.info(f"Approved task {task.id}")
        return updated

    async def skip(self) -> dict:
        state = self._require_preview()
        task = state.current_task
        updated = await self._submit(task.id, TaskStatus.SKIPPED)
        logger.info(f"Skipped task {task.id}")
        return updated

    async def _submit(self, task_id: str, status: TaskStatus, overrides: Optional[dict] = None) -> dict:
        """Send the decision. A task the server no longer holds as pending is dropped locally too."""
        try:
            updated = await self.api.update_task(task_id, status.value, **(overrides or {}))
        except ApiError as e:
            if e.status_code in STALE_TASK_STATUSES:
                logger.warning(f"Task {task_id} was already resolved elsewhere ({e.kind}), dropping it")
                self._created_contacts.pop(task_id, None)
                self._resolve(task_id)
            raise
        self._resolve(task_id)
        return updated

    def _require_preview(self) -> ReviewState:
        if self.state.step is not ReviewStep.MESSAGE_PREVIEW or self.state.current_task is None:
            raise InvalidReviewEvent(MSG.NO_CURRENT_TASK)
        return self.state

    def _resolve(self, task_id: str):
        self.pending_tasks = [t for t in self.pending_tasks if t.get("id") != task_id]
        self._refresh_cache()
        self.state = reduce(self.state, TaskResolved(task_id))

    def _refresh_cache(self):
        try:
            self.cache.save(self.pending_tasks)
        except OSError as e:
            logger.error(f"Failed to cache tasks: {e}")
