"""Shared stats builder for the pending-tasks listing."""
from boomerang.models.enums import is_contact_facing


def needs_info(task) -> bool:
    """A contact-facing task that cannot be sent until someone adds a phone or email."""
    return is_contact_facing(task.task_type) and not (task.contact_phone or task.contact_email)


def build_stats(active: list, completed_today: int) -> dict:
    """Build the stats block for the pending listing.
    Returns {"total", "needsInfo", "completedToday"}.
    """
    return {
        "total": len(active),
        "needsInfo": sum(1 for t in active if needs_info(t)),
        "completedToday": completed_today,
    }
