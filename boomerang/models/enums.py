"""Closed vocabularies shared by the store, the generator and the review client."""
from enum import Enum


class ProcessingStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskType(str, Enum):
    FOLLOW_UP_SMS = "follow_up_sms"
    REMINDER = "reminder"
    REMINDER_CALL = "reminder_call"
    CAMPAIGN = "campaign"
    CONTACT_CRUD = "contact_crud"
    EMAIL_SEND_REPLY = "email_send_reply"


class TaskStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"
    SKIPPED = "skipped"
    ARCHIVED = "archived"
    DISMISSED = "dismissed"


class DeliveryMethod(str, Enum):
    SMS = "sms"
    EMAIL = "email"
    PHONE = "phone"
    INTERNAL = "internal"


class Timing(str, Enum):
    IMMEDIATE = "immediate"
    END_OF_DAY = "end_of_day"
    TOMORROW = "tomorrow"
    NEXT_WEEK = "next_week"
    # Only produced by the review flow's timing buckets
    TOMORROW_AFTERNOON = "tomorrow_afternoon"
    IN_TWO_DAYS = "in_two_days"


# Timings the model is allowed to emit
AI_TIMINGS = (Timing.IMMEDIATE, Timing.END_OF_DAY, Timing.TOMORROW, Timing.NEXT_WEEK)

DELIVERY_BY_TYPE = {
    TaskType.FOLLOW_UP_SMS: DeliveryMethod.SMS,
    TaskType.CAMPAIGN: DeliveryMethod.SMS,
    TaskType.EMAIL_SEND_REPLY: DeliveryMethod.EMAIL,
    TaskType.REMINDER_CALL: DeliveryMethod.PHONE,
    TaskType.REMINDER: DeliveryMethod.INTERNAL,
    TaskType.CONTACT_CRUD: DeliveryMethod.INTERNAL,
}


def delivery_method_for(task_type: TaskType) -> DeliveryMethod:
    return DELIVERY_BY_TYPE[TaskType(task_type)]


def is_contact_facing(task_type: TaskType) -> bool:
    """Tasks that reach a person outside the business need a contact."""
    return delivery_method_for(task_type) is not DeliveryMethod.INTERNAL
