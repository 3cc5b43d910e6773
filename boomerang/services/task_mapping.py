"""
Model function call -> TaskDraft.

The model is an untrusted source of structured input: every argument is
checked against the schema it was offered before a draft is produced.
"""
import json
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from boomerang.models.enums import (
    AI_TIMINGS, DeliveryMethod, TaskType, Timing, delivery_method_for, is_contact_facing,
)
from boomerang.services.ai_service import ActionCall
from boomerang.services.errors import InvalidActionCall, UnknownAction
from boomerang.services.scheduling import compute_scheduled_for

OWNER_CONTACT_NAME = "Business Owner"

FUNCTION_TASK_TYPES = {
    "create_contact": TaskType.CONTACT_CRUD,
    "send_sms": TaskType.FOLLOW_UP_SMS,
    "send_email": TaskType.EMAIL_SEND_REPLY,
    "create_reminder": TaskType.REMINDER,
    "make_phone_call": TaskType.REMINDER_CALL,
    "create_note": TaskType.CONTACT_CRUD,
}

MAX_MESSAGE_LENGTH = 2000


@dataclass(frozen=True)
class TaskDraft:
    task_type: TaskType
    delivery_method: DeliveryMethod
    message: str
    timing: Timing
    scheduled_for: datetime
    source_function: str
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    contact_id: Optional[str] = None

    def with_contact(self, contact) -> "TaskDraft":
        """Attach a resolved directory contact, keeping anything the model supplied."""
        return replace(
            self,
            contact_id=contact.id,
            contact_name=self.contact_name or contact.name,
            contact_phone=self.contact_phone or contact.phone,
            contact_email=self.contact_email or contact.email,
        )


def parse_arguments(call: ActionCall) -> dict:
    try:
        args = json.loads(call.arguments) if call.arguments else {}
    except (TypeError, ValueError) as e:
        raise InvalidActionCall(f"{call.name}: arguments are not valid JSON", function=call.name) from e
    if not isinstance(args, dict):
        raise InvalidActionCall(f"{call.name}: arguments must be an object", function=call.name)
    return args


def _text(args: dict, key: str, function: str, required: bool = False) -> Optional[str]:
    value = args.get(key)
    if value is None:
        if required:
            raise InvalidActionCall(f"{function}: missing '{key}'", function=function)
        return None
    if not isinstance(value, str):
        raise InvalidActionCall(f"{function}: '{key}' must be a string", function=function)
    value = value.strip()
    if not value:
        if required:
            raise InvalidActionCall(f"{function}: '{key}' is empty", function=function)
        return None
    return value


def _timing(args: dict, function: str) -> Timing:
    raw = args.get("timing")
    if raw is None:
        return Timing.IMMEDIATE
    try:
        timing = Timing(raw)
    except ValueError as e:
        raise InvalidActionCall(f"{function}: unknown timing '{raw}'", function=function) from e
    if timing not in AI_TIMINGS:
        raise InvalidActionCall(f"{function}: timing '{raw}' is not offered to the model", function=function)
    return timing


def _contact_message(args: dict, fn: str) -> str:
    name = _text(args, "name", fn, required=True)
    details = [
        f"{label}: {value}"
        for label, value in (
            ("Phone", _text(args, "phone", fn)),
            ("Email", _text(args, "email", fn)),
            ("Relationship", _text(args, "relationship", fn)),
            ("Notes", _text(args, "notes", fn)),
        )
        if value
    ]
    return "\n".join([f"Add contact: {name}", *details])


def map_action_call(call: ActionCall, now: datetime) -> TaskDraft:
    """Convert one function call into a draft with a computed send time.

    Raises UnknownAction for names outside the six schemas and
    InvalidActionCall when the arguments do not match the schema.
    """
    fn = call.name
    task_type = FUNCTION_TASK_TYPES.get(fn)
    if task_type is None:
        raise UnknownAction(f"Unknown function '{fn}'", function=fn)

    args = parse_arguments(call)
    timing = _timing(args, fn)
    phone = email = None

    if fn == "create_contact":
        contact = _text(args, "name", fn, required=True)
        phone = _text(args, "phone", fn)
        email = _text(args, "email", fn)
        message = _contact_message(args, fn)
    elif fn == "send_sms":
        contact = _text(args, "contact_name", fn, required=True)
        phone = _text(args, "contact_phone", fn)
        message = _text(args, "message", fn, required=True)
    elif fn == "send_email":
        contact = _text(args, "contact_name", fn, required=True)
        email = _text(args, "contact_email", fn)
        body = _text(args, "message", fn, required=True)
        subject = _text(args, "subject", fn)
        message = f"Subject: {subject}\n\n{body}" if subject else body
    elif fn == "create_reminder":
        contact = _text(args, "contact_name", fn) or OWNER_CONTACT_NAME
        message = _text(args, "message", fn, required=True)
    elif fn == "make_phone_call":
        contact = _text(args, "contact_name", fn, required=True)
        phone = _text(args, "contact_phone", fn)
        message = _text(args, "purpose", fn, required=True)
    else:  # create_note
        contact = _text(args, "contact_name", fn)
        message = _text(args, "content", fn, required=True)

    if is_contact_facing(task_type) and not contact:
        raise InvalidActionCall(f"{fn}: contact-facing task without a contact", function=fn)

    return TaskDraft(
        task_type=task_type,
        delivery_method=delivery_method_for(task_type),
        message=message[:MAX_MESSAGE_LENGTH],
        timing=timing,
        scheduled_for=compute_scheduled_for(timing, now),
        source_function=fn,
        contact_name=contact,
        contact_phone=phone,
        contact_email=email,
    )
