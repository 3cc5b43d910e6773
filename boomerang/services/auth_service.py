import os
from typing import Optional
from fastapi import Header, HTTPException

from boomerang.utils.messages import MSG


def _parse_tokens(raw: str) -> dict[str, str]:
    tokens = {}
    for pair in raw.split(","):
        token, sep, owner_id = pair.strip().partition(":")
        if sep and token and owner_id:
            tokens[token] = owner_id
    return tokens


# For MVP, bearer tokens are mapped to owner ids through an environment variable
# Example: API_TOKENS=tok_abc:owner-1,tok_def:owner-2
API_TOKENS = _parse_tokens(os.getenv("API_TOKENS", ""))


def resolve_owner(token: Optional[str]) -> Optional[str]:
    """Return the owner id a bearer token belongs to, or None."""
    if not token:
        return None
    return API_TOKENS.get(token)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):].strip() or None


async def require_owner(authorization: Optional[str] = Header(None)) -> str:
    """FastAPI dependency: the authenticated owner id, or 401."""
    owner_id = resolve_owner(bearer_token(authorization))
    if owner_id is None:
        raise HTTPException(status_code=401, detail={"error": "Unauthorized", "message": MSG.UNAUTHORIZED})
    return owner_id
