"""
Owner profile: business context for the assistant and the owner's timezone.

Owners without a profile row (or with an empty one) fall back to
DEFAULT_BUSINESS_CONTEXT and APP_TIMEZONE.
"""
import logging
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from boomerang.models.owner_profile import OwnerProfile
from boomerang.services.errors import PersistenceError, ValidationError
from boomerang.services.scheduling import LOCAL_TZ, local_now

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("business_name", "business_type", "business_description", "phone_number", "timezone")


def parse_timezone(name: Optional[str]) -> Optional[ZoneInfo]:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Unknown timezone '{name}'", timezone=name) from e


def business_context_for(profile: Optional[OwnerProfile]) -> Optional[str]:
    """Describe the business for the system prompt, e.g.
    "Mike's Construction (General Contracting): Full-service renovation company".
    """
    if profile is None:
        return None
    heading = profile.business_name or ""
    if profile.business_type:
        heading = f"{heading} ({profile.business_type})" if heading else profile.business_type
    if profile.business_description:
        return f"{heading}: {profile.business_description}" if heading else profile.business_description
    return heading or None


def timezone_for(profile: Optional[OwnerProfile]) -> ZoneInfo:
    if profile is None or not profile.timezone:
        return LOCAL_TZ
    try:
        return parse_timezone(profile.timezone)
    except ValidationError:
        logger.warning(f"Owner {profile.user_id} has an unknown timezone '{profile.timezone}', using {LOCAL_TZ.key}")
        return LOCAL_TZ


class ProfileStore:
    def __init__(self, db: Session):
        self.db = db

    def get_profile(self, owner_id: str) -> Optional[OwnerProfile]:
        try:
            return self.db.query(OwnerProfile).filter(OwnerProfile.user_id == owner_id).first()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load profile", owner_id=owner_id) from e

    def update_profile(self, owner_id: str, **changes) -> OwnerProfile:
        """Create or update the owner's profile. Only keys present in `changes` are written."""
        unknown = set(changes) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown profile fields: {sorted(unknown)}", owner_id=owner_id)
        if changes.get("timezone"):
            parse_timezone(changes["timezone"])

        profile = self.get_profile(owner_id)
        if profile is None:
            profile = OwnerProfile(user_id=owner_id)
            self.db.add(profile)
        for key, value in changes.items():
            setattr(profile, key, value)

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save profile for owner {owner_id}: {e}")
            raise PersistenceError("Failed to save profile", owner_id=owner_id) from e
        self.db.refresh(profile)
        logger.info(f"Updated profile for owner {owner_id}: {sorted(changes)}")
        return profile

    def load_or_default(self, owner_id: str) -> Optional[OwnerProfile]:
        """Profile for request handling; a store failure degrades to the env defaults."""
        try:
            return self.get_profile(owner_id)
        except PersistenceError as e:
            logger.warning(f"Profile lookup failed for owner {owner_id}, using defaults: {e.message}")
            return None

    def owner_clock(self, owner_id: str) -> Callable[[], datetime]:
        tz = timezone_for(self.load_or_default(owner_id))
        return lambda: local_now(tz)
