"""
Function-calling schemas offered to the model.

Strict mode requires every property to be listed in `required`; optional
values are expressed as a nullable type instead.
"""
from boomerang.models.enums import AI_TIMINGS

TIMING_VALUES = [t.value for t in AI_TIMINGS]

_TIMING = {
    "type": "string",
    "enum": TIMING_VALUES,
    "description": "When the action should happen: immediate, end_of_day (5 PM), tomorrow (9 AM) or next_week.",
}


def _nullable(description: str) -> dict:
    return {"type": ["string", "null"], "description": description}


def _function(name: str, description: str, properties: dict) -> dict:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "strict": True,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": list(properties),
                "additionalProperties": False,
            },
        },
    }


ACTION_TOOLS = [
    _function(
        "create_contact",
        "Add a new person or company the owner mentioned to the contact list.",
        {
            "name": {"type": "string", "description": "Full name of the contact"},
            "phone": _nullable("Phone number if mentioned"),
            "email": _nullable("Email address if mentioned"),
            "relationship": {
                "type": ["string", "null"],
                "enum": ["client", "prospect", "vendor", "employee", None],
                "description": "How the contact relates to the business",
            },
            "notes": _nullable("Anything worth remembering about the contact"),
        },
    ),
    _function(
        "send_sms",
        "Text message to a client or contact, e.g. a thank-you or follow-up.",
        {
            "contact_name": {"type": "string", "description": "Who receives the text"},
            "contact_phone": _nullable("Phone number if mentioned"),
            "message": {"type": "string", "description": "Ready-to-send SMS text written as the owner"},
            "timing": _TIMING,
        },
    ),
    _function(
        "send_email",
        "Email to a client or contact, e.g. an estimate, invoice or reply.",
        {
            "contact_name": {"type": "string", "description": "Who receives the email"},
            "contact_email": _nullable("Email address if mentioned"),
            "subject": _nullable("Short subject line"),
            "message": {"type": "string", "description": "Ready-to-send email body written as the owner"},
            "timing": _TIMING,
        },
    ),
    _function(
        "create_reminder",
        "Personal reminder or to-do for the business owner ('remind me to ...').",
        {
            "message": {"type": "string", "description": "What the owner needs to do"},
            "contact_name": _nullable("Person the reminder is about, if any"),
            "timing": _TIMING,
        },
    ),
    _function(
        "make_phone_call",
        "Reminder for the owner to call someone.",
        {
            "contact_name": {"type": "string", "description": "Who to call"},
            "contact_phone": _nullable("Phone number if mentioned"),
            "purpose": {"type": "string", "description": "What the call is about"},
            "timing": _TIMING,
        },
    ),
    _function(
        "create_note",
        "Plain note to keep on file, optionally about a contact.",
        {
            "content": {"type": "string", "description": "The note text"},
            "contact_name": _nullable("Contact the note is about, if any"),
        },
    ),
]

ACTION_NAMES = tuple(tool["function"]["name"] for tool in ACTION_TOOLS)
