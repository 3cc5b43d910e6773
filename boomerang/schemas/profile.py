from datetime import datetime
from typing import Optional

from boomerang.schemas.common import CamelModel
from boomerang.services.scheduling import LOCAL_TZ, from_storage


class ProfileOut(CamelModel):
    user_id: str
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_description: Optional[str] = None
    phone_number: Optional[str] = None
    timezone: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_profile(cls, owner_id: str, profile) -> "ProfileOut":
        """Owners without a stored profile get an empty one on the default timezone."""
        if profile is None:
            return cls(user_id=owner_id, timezone=LOCAL_TZ.key)
        return cls(
            user_id=profile.user_id,
            business_name=profile.business_name,
            business_type=profile.business_type,
            business_description=profile.business_description,
            phone_number=profile.phone_number,
            timezone=profile.timezone or LOCAL_TZ.key,
            created_at=from_storage(profile.created_at),
            updated_at=from_storage(profile.updated_at),
        )


class ProfileUpdate(CamelModel):
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_description: Optional[str] = None
    phone_number: Optional[str] = None
    timezone: Optional[str] = None


class ProfileResponse(CamelModel):
    success: bool = True
    user: ProfileOut
    message: str
