"""Tests for auth_service.py - bearer token to owner resolution."""
import importlib
from unittest.mock import patch

import pytest
from fastapi import HTTPException


def reload_auth():
    import boomerang.services.auth_service as auth_mod
    importlib.reload(auth_mod)
    return auth_mod


class TestResolveOwner:
    """Test token map parsing and lookup."""

    @patch.dict("os.environ", {"API_TOKENS": "tok_a:owner-a, tok_b:owner-b"})
    def test_known_tokens(self):
        auth_mod = reload_auth()
        assert auth_mod.resolve_owner("tok_a") == "owner-a"
        assert auth_mod.resolve_owner("tok_b") == "owner-b"

    @patch.dict("os.environ", {"API_TOKENS": "tok_a:owner-a"})
    def test_unknown_token(self):
        auth_mod = reload_auth()
        assert auth_mod.resolve_owner("tok_x") is None
        assert auth_mod.resolve_owner(None) is None

    @patch.dict("os.environ", {"API_TOKENS": "broken,:nobody,tok_a:"})
    def test_malformed_pairs_ignored(self):
        auth_mod = reload_auth()
        assert auth_mod.API_TOKENS == {}

    @patch.dict("os.environ", {}, clear=True)
    def test_missing_env_denies_all(self):
        auth_mod = reload_auth()
        assert auth_mod.resolve_owner("anything") is None


class TestBearerToken:
    def test_parses_header(self):
        from boomerang.services.auth_service import bearer_token
        assert bearer_token("Bearer tok_a") == "tok_a"

    def test_rejects_other_schemes(self):
        from boomerang.services.auth_service import bearer_token
        assert bearer_token("Basic abc") is None
        assert bearer_token(None) is None
        assert bearer_token("Bearer ") is None


class TestRequireOwner:
    @pytest.mark.asyncio
    @patch.dict("os.environ", {"API_TOKENS": "tok_a:owner-a"})
    async def test_returns_owner(self):
        auth_mod = reload_auth()
        assert await auth_mod.require_owner("Bearer tok_a") == "owner-a"

    @pytest.mark.asyncio
    @patch.dict("os.environ", {"API_TOKENS": "tok_a:owner-a"})
    async def test_401(self):
        auth_mod = reload_auth()
        with pytest.raises(HTTPException) as exc_info:
            await auth_mod.require_owner("Bearer wrong")
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"] == "Unauthorized"
