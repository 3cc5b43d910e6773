"""
Review flow state machine.

The whole flow is one immutable `ReviewState` value (current step, the task
groups, a cursor on the task under review, the owner's selections for that
task, and the ids already resolved). `reduce(state, event)` is the only way to
move it forward; entering a task always starts from a fresh `Selection`, so
nothing picked for one task can leak into the next.

    GROUP_SUMMARY --SelectGroup--> CONTACT_DISAMBIGUATION (ambiguous contact)
                                   CONTACT_DETAILS        (otherwise)
    CONTACT_DISAMBIGUATION --Continue--> CONTACT_DETAILS
    CONTACT_DETAILS        --Continue--> TIMING_SELECTION
    TIMING_SELECTION       --Continue--> MESSAGE_PREVIEW
    MESSAGE_PREVIEW    --TaskResolved--> next task | next group | GROUP_SUMMARY
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from boomerang.models.enums import TaskType, Timing, is_contact_facing
from boomerang.services.contact_matching import rank_candidates, resolve_exact, has_contact_method
from boomerang.services.errors import ValidationError
from boomerang.services.scheduling import compute_scheduled_for
from boomerang.utils.messages import MSG


class ReviewStep(str, Enum):
    GROUP_SUMMARY = "group_summary"
    CONTACT_DISAMBIGUATION = "contact_disambiguation"
    CONTACT_DETAILS = "contact_details"
    TIMING_SELECTION = "timing_selection"
    MESSAGE_PREVIEW = "message_preview"


class GroupCategory(str, Enum):
    FOLLOW_UP = "follow_up"
    REMINDER = "reminder"
    NOTE = "note"

    @property
    def display_name(self) -> str:
        return {
            GroupCategory.FOLLOW_UP: MSG.GROUP_FOLLOW_UP,
            GroupCategory.REMINDER: MSG.GROUP_REMINDER,
            GroupCategory.NOTE: MSG.GROUP_NOTE,
        }[self]


class ReviewTiming(str, Enum):
    TOMORROW_AM = "tomorrow_am"
    TOMORROW_PM = "tomorrow_pm"
    IN_TWO_DAYS = "in_two_days"

    @property
    def backend_timing(self) -> Timing:
        return BACKEND_TIMING[self]

    @property
    def label(self) -> str:
        return {
            ReviewTiming.TOMORROW_AM: MSG.TIMING_TOMORROW_AM,
            ReviewTiming.TOMORROW_PM: MSG.TIMING_TOMORROW_PM,
            ReviewTiming.IN_TWO_DAYS: MSG.TIMING_IN_TWO_DAYS,
        }[self]


BACKEND_TIMING = {
    ReviewTiming.TOMORROW_AM: Timing.TOMORROW,
    ReviewTiming.TOMORROW_PM: Timing.TOMORROW_AFTERNOON,
    ReviewTiming.IN_TWO_DAYS: Timing.IN_TWO_DAYS,
}

CATEGORY_BY_TYPE = {
    TaskType.FOLLOW_UP_SMS: GroupCategory.FOLLOW_UP,
    TaskType.EMAIL_SEND_REPLY: GroupCategory.FOLLOW_UP,
    TaskType.CAMPAIGN: GroupCategory.FOLLOW_UP,
    TaskType.REMINDER: GroupCategory.REMINDER,
    TaskType.REMINDER_CALL: GroupCategory.REMINDER,
    TaskType.CONTACT_CRUD: GroupCategory.NOTE,
}

GROUP_ORDER = (GroupCategory.FOLLOW_UP, GroupCategory.REMINDER, GroupCategory.NOTE)


class ReviewGateError(ValidationError):
    """A step's requirement is not met; the flow stays where it is."""
    kind = "ReviewGate"


class InvalidReviewEvent(ValidationError):
    kind = "InvalidReviewEvent"


# ==================== PROJECTIONS ====================

def _task_type(task: dict) -> Optional[TaskType]:
    try:
        return TaskType(task.get("type"))
    except ValueError:
        return None


@dataclass(frozen=True)
class ReviewTask:
    task: dict
    is_ambiguous: bool = False
    candidates: tuple = ()
    resolved_contact: Optional[dict] = None

    @property
    def id(self) -> str:
        return self.task["id"]

    @property
    def contact_name(self) -> str:
        return self.task.get("contactName") or ""

    @property
    def message(self) -> str:
        return self.task.get("message") or ""

    @property
    def needs_contact_method(self) -> bool:
        task_type = _task_type(self.task)
        return task_type is not None and is_contact_facing(task_type)


@dataclass(frozen=True)
class TaskGroup:
    category: GroupCategory
    tasks: tuple[ReviewTask, ...] = ()


def make_review_task(task: dict, contacts: list[dict]) -> ReviewTask:
    """Wrap a wire task with its ambiguity flag and ranked candidates."""
    review = ReviewTask(task=task)
    if not review.needs_contact_method:
        return review

    if task.get("contactId"):
        known = next((c for c in contacts if c.get("id") == task["contactId"]), None)
        return replace(review, resolved_contact=known)

    exact = resolve_exact(review.contact_name, contacts)
    if exact is not None:
        return replace(review, resolved_contact=exact)

    return replace(
        review,
        is_ambiguous=True,
        candidates=tuple(rank_candidates(review.contact_name, contacts)),
    )


def group_tasks(tasks: list[dict], contacts: list[dict]) -> tuple[TaskGroup, ...]:
    buckets = {category: [] for category in GROUP_ORDER}
    for task in tasks:
        category = CATEGORY_BY_TYPE.get(_task_type(task), GroupCategory.NOTE)
        buckets[category].append(make_review_task(task, contacts))
    return tuple(TaskGroup(category, tuple(buckets[category])) for category in GROUP_ORDER)


# ==================== STATE ====================

@dataclass(frozen=True)
class Selection:
    selected_contact: Optional[dict] = None
    create_new: bool = False
    phone: str = ""
    email: str = ""
    timing: Optional[ReviewTiming] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class Cursor:
    group_index: int
    task_index: int


@dataclass(frozen=True)
class ReviewState:
    step: ReviewStep = ReviewStep.GROUP_SUMMARY
    groups: tuple[TaskGroup, ...] = ()
    cursor: Optional[Cursor] = None
    selection: Selection = field(default_factory=Selection)
    resolved: frozenset = frozenset()

    @property
    def current_task(self) -> Optional[ReviewTask]:
        if self.cursor is None:
            return None
        return self.groups[self.cursor.group_index].tasks[self.cursor.task_index]

    def remaining(self, category: GroupCategory) -> list[ReviewTask]:
        group = next((g for g in self.groups if g.category is category), None)
        if group is None:
            return []
        return [t for t in group.tasks if t.id not in self.resolved]

    @property
    def is_complete(self) -> bool:
        return all(not self.remaining(g.category) for g in self.groups)


def build_review_state(tasks: list[dict], contacts: list[dict]) -> ReviewState:
    return ReviewState(groups=group_tasks(tasks, contacts))


# ==================== EVENTS ====================

@dataclass(frozen=True)
class SelectGroup:
    category: GroupCategory


@dataclass(frozen=True)
class ChooseContact:
    contact_id: str


@dataclass(frozen=True)
class ChooseCreateNew:
    pass


@dataclass(frozen=True)
class EnterContactDetails:
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class ChooseTiming:
    timing: ReviewTiming


@dataclass(frozen=True)
class EditMessage:
    message: str


@dataclass(frozen=True)
class Continue:
    pass


@dataclass(frozen=True)
class TaskResolved:
    task_id: str


@dataclass(frozen=True)
class BackToSummary:
    pass


# ==================== DERIVED VALUES ====================

def contact_defaults(state: ReviewState) -> tuple[Optional[str], Optional[str]]:
    """Phone and email on file for the current task's recipient."""
    task = state.current_task
    if task is None:
        return None, None
    sel = state.selection
    contact = None if sel.create_new else (sel.selected_contact or task.resolved_contact)
    sources = [contact or {}, {"phone": task.task.get("contactPhone"), "email": task.task.get("contactEmail")}]
    phone = next((s.get("phone") for s in sources if s.get("phone")), None)
    email = next((s.get("email") for s in sources if s.get("email")), None)
    return phone, email


def effective_contact(state: ReviewState) -> tuple[Optional[str], Optional[str]]:
    default_phone, default_email = contact_defaults(state)
    phone = state.selection.phone.strip() or default_phone
    email = state.selection.email.strip() or default_email
    return phone, email


def recipient_name(state: ReviewState) -> str:
    task = state.current_task
    if task is None:
        return ""
    if not task.needs_contact_method:
        return MSG.RECIPIENT_SELF if _task_type(task.task) is TaskType.REMINDER else task.contact_name
    contact = None if state.selection.create_new else (state.selection.selected_contact or task.resolved_contact)
    return (contact or {}).get("name") or task.contact_name


@dataclass(frozen=True)
class MessagePreview:
    recipient: str
    message: str
    phone: Optional[str]
    email: Optional[str]
    send_at: datetime
    timing_label: str

    @property
    def send_at_display(self) -> str:
        return MSG.SEND_AT.format(
            day=f"{self.send_at:%A, %b} {self.send_at.day}",
            time=self.send_at.strftime("%I:%M %p").lstrip("0"),
        )


def build_preview(state: ReviewState, now: datetime) -> MessagePreview:
    task = state.current_task
    if task is None or state.selection.timing is None:
        raise InvalidReviewEvent(MSG.NO_CURRENT_TASK)
    phone, email = effective_contact(state)
    return MessagePreview(
        recipient=recipient_name(state),
        message=state.selection.message or task.message,
        phone=phone,
        email=email,
        send_at=compute_scheduled_for(state.selection.timing.backend_timing, now),
        timing_label=state.selection.timing.label,
    )


def approval_overrides(state: ReviewState) -> dict:
    """Overrides sent with the approval, keyed as the API expects them."""
    task = state.current_task
    if task is None or state.selection.timing is None:
        raise InvalidReviewEvent(MSG.NO_CURRENT_TASK)
    phone, email = effective_contact(state)
    sel = state.selection
    contact = None if sel.create_new else (sel.selected_contact or task.resolved_contact)
    return {
        "contactPhone": phone,
        "contactEmail": email,
        "message": sel.message if sel.message and sel.message != task.message else None,
        "timing": sel.timing.backend_timing.value,
        "contactId": contact.get("id") if contact else None,
    }


# ==================== REDUCER ====================

def _enter_task(state: ReviewState, group_index: int, task_index: int) -> ReviewState:
    task = state.groups[group_index].tasks[task_index]
    selection = Selection()
    step = ReviewStep.CONTACT_DETAILS
    if task.is_ambiguous:
        step = ReviewStep.CONTACT_DISAMBIGUATION
        first = task.candidates[0] if task.candidates else None
        if first is not None and has_contact_method(first):
            selection = Selection(selected_contact=first)
    return replace(state, step=step, cursor=Cursor(group_index, task_index), selection=selection)


def _to_summary(state: ReviewState) -> ReviewState:
    return replace(state, step=ReviewStep.GROUP_SUMMARY, cursor=None, selection=Selection())


def _next_unresolved(state: ReviewState, group_index: int, start: int) -> Optional[int]:
    tasks = state.groups[group_index].tasks
    for index in range(start, len(tasks)):
        if tasks[index].id not in state.resolved:
            return index
    return None


def _require_step(state: ReviewState, *steps: ReviewStep):
    if state.step not in steps:
        raise InvalidReviewEvent(f"Not allowed during {state.step.value}")


def _select_group(state: ReviewState, event: SelectGroup) -> ReviewState:
    _require_step(state, ReviewStep.GROUP_SUMMARY)
    group_index = next((i for i, g in enumerate(state.groups) if g.category is event.category), None)
    if group_index is None:
        raise InvalidReviewEvent(f"No group {event.category.value}")
    task_index = _next_unresolved(state, group_index, 0)
    if task_index is None:
        raise InvalidReviewEvent(f"Group {event.category.value} has nothing left to review")
    return _enter_task(state, group_index, task_index)


def _choose_contact(state: ReviewState, event: ChooseContact) -> ReviewState:
    _require_step(state, ReviewStep.CONTACT_DISAMBIGUATION)
    contact = next((c for c in state.current_task.candidates if c.get("id") == event.contact_id), None)
    if contact is None:
        raise InvalidReviewEvent(f"Contact {event.contact_id} is not a candidate")
    return replace(state, selection=replace(state.selection, selected_contact=contact, create_new=False))


def _choose_create_new(state: ReviewState, event: ChooseCreateNew) -> ReviewState:
    _require_step(state, ReviewStep.CONTACT_DISAMBIGUATION)
    return replace(state, selection=replace(state.selection, selected_contact=None, create_new=True))


def _enter_contact_details(state: ReviewState, event: EnterContactDetails) -> ReviewState:
    _require_step(state, ReviewStep.CONTACT_DETAILS)
    selection = state.selection
    if event.phone is not None:
        selection = replace(selection, phone=event.phone)
    if event.email is not None:
        selection = replace(selection, email=event.email)
    return replace(state, selection=selection)


def _choose_timing(state: ReviewState, event: ChooseTiming) -> ReviewState:
    _require_step(state, ReviewStep.TIMING_SELECTION)
    return replace(state, selection=replace(state.selection, timing=ReviewTiming(event.timing)))


def _edit_message(state: ReviewState, event: EditMessage) -> ReviewState:
    _require_step(state, ReviewStep.MESSAGE_PREVIEW)
    return replace(state, selection=replace(state.selection, message=event.message))


def _continue(state: ReviewState, event: Continue) -> ReviewState:
    step, sel = state.step, state.selection

    if step is ReviewStep.CONTACT_DISAMBIGUATION:
        if sel.selected_contact is None and not sel.create_new:
            raise ReviewGateError(MSG.PICK_CONTACT)
        return replace(state, step=ReviewStep.CONTACT_DETAILS)

    if step is ReviewStep.CONTACT_DETAILS:
        phone, email = effective_contact(state)
        if state.current_task.needs_contact_method and not (phone or email):
            raise ReviewGateError(MSG.NEED_CONTACT_METHOD)
        return replace(state, step=ReviewStep.TIMING_SELECTION)

    if step is ReviewStep.TIMING_SELECTION:
        if sel.timing is None:
            raise ReviewGateError(MSG.PICK_TIMING)
        return replace(state, step=ReviewStep.MESSAGE_PREVIEW)

    raise InvalidReviewEvent(f"Nothing to continue from {step.value}")


def _task_resolved(state: ReviewState, event: TaskResolved) -> ReviewState:
    _require_step(state, ReviewStep.MESSAGE_PREVIEW)
    if state.current_task.id != event.task_id:
        raise InvalidReviewEvent(f"Task {event.task_id} is not the task under review")

    state = replace(state, resolved=state.resolved | {event.task_id})
    group_index = state.cursor.group_index

    task_index = _next_unresolved(state, group_index, state.cursor.task_index + 1)
    if task_index is not None:
        return _enter_task(state, group_index, task_index)

    for next_group in range(group_index + 1, len(state.groups)):
        task_index = _next_unresolved(state, next_group, 0)
        if task_index is not None:
            return _enter_task(state, next_group, task_index)

    return _to_summary(state)


def _back_to_summary(state: ReviewState, event: BackToSummary) -> ReviewState:
    return _to_summary(state)


_HANDLERS = {
    SelectGroup: _select_group,
    ChooseContact: _choose_contact,
    ChooseCreateNew: _choose_create_new,
    EnterContactDetails: _enter_contact_details,
    ChooseTiming: _choose_timing,
    EditMessage: _edit_message,
    Continue: _continue,
    TaskResolved: _task_resolved,
    BackToSummary: _back_to_summary,
}


def reduce(state: ReviewState, event) -> ReviewState:
    """Apply one event. Raises ReviewGateError/InvalidReviewEvent and leaves `state` untouched."""
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise InvalidReviewEvent(f"Unknown event {type(event).__name__}")
    return handler(state, event)
