"""
Centralized user-facing message strings for the Boomerang API and review client.

Usage:
    from boomerang.utils.messages import MSG

    response = MSG.TASKS_GENERATED.format(count=2)
"""


class Messages:
    """All user-facing English messages."""

    # ==================== AUTH / VALIDATION ====================
    UNAUTHORIZED = "Missing or invalid bearer token"
    EMPTY_TRANSCRIPTION = "Transcription must not be empty"
    INVALID_STATUS = "Status must be 'approved' or 'skipped'"
    INVALID_TASK_IDS = "taskIds must be a non-empty list"
    TASK_NOT_FOUND = "Task not found"
    UNKNOWN_CRON_TYPE = "Unknown type: {type}. Use 'expire'"

    # ==================== CAPTURE ====================
    TASKS_GENERATED = "Generated {count} tasks from transcription"
    TASKS_GENERATED_PARTIAL = "Generated {count} tasks from transcription ({skipped} skipped)"
    AI_UNAVAILABLE = "Could not reach the assistant. Please resubmit the capture."
    NO_ACTIONABLE_INTENT = "No actionable task was found in this capture."
    PERSISTENCE_ERROR = "Tasks could not be saved. Please resubmit the capture."

    # ==================== TASKS ====================
    TASK_UPDATED = "Task {status} successfully"
    BULK_APPROVED = "Successfully approved {count} tasks"
    EXPIRED_ARCHIVED = "Archived {count} expired tasks"

    # ==================== PROFILE ====================
    PROFILE_RETRIEVED = "Profile retrieved successfully"
    PROFILE_UPDATED = "Profile updated successfully"

    # ==================== REVIEW FLOW ====================
    GROUP_FOLLOW_UP = "Follow-ups"
    GROUP_REMINDER = "Reminders"
    GROUP_NOTE = "Notes"
    PICK_CONTACT = "Choose a contact or create a new one before continuing"
    NEED_CONTACT_METHOD = "Enter a phone number or email to continue"
    PICK_TIMING = "Choose when to send before continuing"
    NO_CURRENT_TASK = "No task is being reviewed"
    RECIPIENT_SELF = "You"

    # ==================== TIMING LABELS ====================
    TIMING_TOMORROW_AM = "Tomorrow AM"
    TIMING_TOMORROW_PM = "Tomorrow PM"
    TIMING_IN_TWO_DAYS = "In 2 days"
    SEND_AT = "{day} at {time}"


# Singleton instance for easy import
MSG = Messages()
