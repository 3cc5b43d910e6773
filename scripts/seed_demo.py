"""Seed (or remove with --remove) a demo owner's contacts, captures and pending tasks."""
import sys

from boomerang.db.session import SessionLocal
from boomerang.models import Capture, Contact, OwnerProfile, Task
from boomerang.models.enums import ProcessingStatus, TaskType, Timing, delivery_method_for
from boomerang.services.contact_directory import ContactDirectory
from boomerang.services.profile_store import ProfileStore
from boomerang.services.scheduling import compute_scheduled_for, local_now
from boomerang.services.task_mapping import TaskDraft
from boomerang.services.task_store import TaskStore

DEMO_OWNER_ID = "550e8400-e29b-41d4-a716-446655440000"

DEMO_PROFILE = {
    "business_name": "Mike's Construction",
    "business_type": "General Contracting",
    "business_description": "Full-service construction and renovation company specializing in home renovations, "
                            "kitchen remodels, and custom builds.",
    "phone_number": "+15551234567",
    "timezone": "America/New_York",
}

DEMO_CONTACTS = [
    {"name": "Sarah Johnson", "phone": "+15551234567", "email": "sarah@example.com",
     "relationship": "client", "notes": "Kitchen renovation project - budget $25k"},
    {"name": "Mike Davis", "phone": "+15559876543",
     "relationship": "prospect", "notes": "Interested in deck project for spring"},
    {"name": "Lisa Chen", "phone": "+15555555555", "email": "lisa.chen@email.com",
     "relationship": "client", "notes": "Bathroom remodel completed - potential referral source"},
    {"name": "Robert Wilson", "phone": "+15557778888",
     "relationship": "vendor", "notes": "Drywall supplier - good pricing and reliability"},
]

# (transcription, task type, contact name, timing, message)
DEMO_CAPTURES = [
    ("Call Sarah about kitchen estimate tomorrow morning. She wants to increase the budget to include new appliances.",
     TaskType.FOLLOW_UP_SMS, "Sarah Johnson", Timing.TOMORROW,
     "Hi Sarah! Thanks for our conversation about expanding the kitchen project budget. I'll prepare a revised "
     "estimate including the new appliances and send it over tomorrow morning."),
    ("Remind Mike Davis about deck project timeline. Spring booking is filling up fast.",
     TaskType.REMINDER_CALL, "Mike Davis", Timing.END_OF_DAY,
     "Remind Mike about the deck project timeline. Spring bookings are filling up quickly."),
    ("Follow up with Lisa for referrals. She loved the bathroom work and mentioned her neighbor might need help.",
     TaskType.CAMPAIGN, "Lisa Chen", Timing.NEXT_WEEK,
     "Hi Lisa! Hope you're still loving your new bathroom! If you know anyone else who might need renovation "
     "work, I'd really appreciate the referral."),
    ("Order drywall from Robert for the Johnson kitchen project. Need delivery by Thursday.",
     TaskType.REMINDER, "Business Owner", Timing.END_OF_DAY,
     "Order drywall from Robert Wilson for the Johnson kitchen, delivery by Thursday."),
]


def remove_demo_data(db):
    for model in (Task, Capture, Contact, OwnerProfile):
        deleted = db.query(model).filter(model.user_id == DEMO_OWNER_ID).delete()
        print(f"Removed {deleted} {model.__tablename__}")
    db.commit()


def seed_demo_data(db):
    ProfileStore(db).update_profile(DEMO_OWNER_ID, **DEMO_PROFILE)
    print(f"Created profile for {DEMO_PROFILE['business_name']}")

    now = local_now()
    directory = ContactDirectory(db)
    store = TaskStore(db)

    contacts = {}
    for data in DEMO_CONTACTS:
        contact = directory.create_contact(DEMO_OWNER_ID, **data)
        contacts[contact.name] = contact
    print(f"Created {len(contacts)} contacts")

    for transcription, task_type, contact_name, timing, message in DEMO_CAPTURES:
        capture = store.create_capture(DEMO_OWNER_ID, transcription)
        draft = TaskDraft(
            task_type=task_type,
            delivery_method=delivery_method_for(task_type),
            message=message,
            timing=timing,
            scheduled_for=compute_scheduled_for(timing, now),
            source_function="seed_demo",
            contact_name=contact_name,
        )
        contact = contacts.get(contact_name)
        store.create_task(DEMO_OWNER_ID, capture.id, draft.with_contact(contact) if contact else draft)
        store.finish_capture(capture, ProcessingStatus.COMPLETED)
    print(f"Created {len(DEMO_CAPTURES)} captures with pending tasks")


if __name__ == "__main__":
    if SessionLocal is None:
        print("DATABASE_URL is not set.")
        sys.exit(1)
    db = SessionLocal()
    try:
        if "--remove" in sys.argv:
            remove_demo_data(db)
        else:
            print("Seeding demo data...")
            seed_demo_data(db)
            print(f"Demo owner: {DEMO_OWNER_ID}")
    finally:
        db.close()
