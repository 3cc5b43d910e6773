"""Tests for the owner profile - store, prompt context and the profile endpoints."""
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy.exc import OperationalError

from boomerang.models import OwnerProfile
from boomerang.services.errors import PersistenceError, ValidationError
from boomerang.services.profile_store import ProfileStore, business_context_for, timezone_for
from boomerang.services.scheduling import LOCAL_TZ

PROFILE = {
    "business_name": "Mike's Construction",
    "business_type": "General Contracting",
    "business_description": "Full-service renovation company",
    "timezone": "America/Chicago",
}


@pytest.fixture
def profiles(db):
    return ProfileStore(db)


class TestProfileStore:
    def test_update_creates_then_patches(self, profiles):
        profiles.update_profile("owner-1", **PROFILE)
        profile = profiles.update_profile("owner-1", business_type="Remodeling")

        assert profile.business_name == "Mike's Construction"
        assert profile.business_type == "Remodeling"
        assert profile.timezone == "America/Chicago"

    def test_missing_profile_is_none(self, profiles):
        assert profiles.get_profile("owner-1") is None

    def test_profiles_are_per_owner(self, profiles):
        profiles.update_profile("owner-1", **PROFILE)
        assert profiles.get_profile("owner-2") is None

    def test_unknown_timezone_rejected(self, profiles):
        with pytest.raises(ValidationError):
            profiles.update_profile("owner-1", timezone="Mars/Olympus_Mons")
        assert profiles.get_profile("owner-1") is None

    def test_unknown_field_rejected(self, profiles):
        with pytest.raises(ValidationError):
            profiles.update_profile("owner-1", user_id="owner-2")

    def test_lookup_failure_degrades_to_defaults(self, profiles):
        with patch.object(profiles, "get_profile", side_effect=PersistenceError("db down")):
            assert profiles.load_or_default("owner-1") is None
            assert profiles.owner_clock("owner-1")().tzinfo == LOCAL_TZ

    def test_owner_clock_uses_profile_timezone(self, profiles):
        profiles.update_profile("owner-1", timezone="Asia/Tokyo")
        assert profiles.owner_clock("owner-1")().tzinfo == ZoneInfo("Asia/Tokyo")

    def test_commit_failure_rolls_back(self, profiles, db):
        with patch.object(db, "commit", side_effect=OperationalError("UPDATE", {}, Exception("locked"))):
            with pytest.raises(PersistenceError):
                profiles.update_profile("owner-1", business_name="Acme")


class TestBusinessContext:
    def test_full_profile(self):
        profile = OwnerProfile(user_id="owner-1", **PROFILE)
        assert business_context_for(profile) == (
            "Mike's Construction (General Contracting): Full-service renovation company"
        )

    def test_name_only(self):
        assert business_context_for(OwnerProfile(user_id="owner-1", business_name="Acme")) == "Acme"

    def test_empty_profile_falls_back(self):
        assert business_context_for(OwnerProfile(user_id="owner-1")) is None
        assert business_context_for(None) is None

    def test_bad_stored_timezone_falls_back(self):
        assert timezone_for(OwnerProfile(user_id="owner-1", timezone="Nowhere/Else")) == LOCAL_TZ
        assert timezone_for(None) == LOCAL_TZ


class TestProfileApi:
    def test_get_without_profile(self, client, auth):
        resp = client.get("/api/v1/user/profile", headers=auth)

        assert resp.status_code == 200
        user = resp.json()["user"]
        assert user["userId"] == "owner-1"
        assert user["businessName"] is None
        assert user["timezone"] == LOCAL_TZ.key

    def test_put_then_get(self, client, auth):
        resp = client.put(
            "/api/v1/user/profile",
            json={"businessName": "Mike's Construction", "timezone": "America/Denver"},
            headers=auth,
        )
        assert resp.status_code == 200
        assert resp.json()["message"] == "Profile updated successfully"

        user = client.get("/api/v1/user/profile", headers=auth).json()["user"]
        assert user["businessName"] == "Mike's Construction"
        assert user["timezone"] == "America/Denver"

    def test_put_bad_timezone(self, client, auth):
        resp = client.put("/api/v1/user/profile", json={"timezone": "Not/AZone"}, headers=auth)
        assert resp.status_code == 422
        assert resp.json()["detail"]["error"] == "ValidationError"

    def test_owner_scoping(self, client, auth):
        client.put("/api/v1/user/profile", json={"businessName": "Mike's Construction"}, headers=auth)

        other = client.get("/api/v1/user/profile", headers={"Authorization": "Bearer tok-owner-2"})
        assert other.json()["user"]["userId"] == "owner-2"
        assert other.json()["user"]["businessName"] is None

    def test_unauthorized(self, client):
        assert client.get("/api/v1/user/profile").status_code == 401
