"""
Owner profile endpoints: business details and timezone.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from boomerang.db.session import get_db
from boomerang.schemas.profile import ProfileOut, ProfileResponse, ProfileUpdate
from boomerang.services.auth_service import require_owner
from boomerang.services.errors import PersistenceError, ValidationError
from boomerang.services.profile_store import ProfileStore
from boomerang.utils.messages import MSG

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=ProfileResponse)
async def get_profile(owner_id: str = Depends(require_owner), db: Session = Depends(get_db)):
    try:
        profile = ProfileStore(db).get_profile(owner_id)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=e.to_dict())
    return ProfileResponse(user=ProfileOut.from_profile(owner_id, profile), message=MSG.PROFILE_RETRIEVED)


@router.put("", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdate,
    owner_id: str = Depends(require_owner),
    db: Session = Depends(get_db),
):
    changes = body.model_dump(exclude_unset=True)
    try:
        profile = ProfileStore(db).update_profile(owner_id, **changes)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=e.to_dict())
    return ProfileResponse(user=ProfileOut.from_profile(owner_id, profile), message=MSG.PROFILE_UPDATED)
