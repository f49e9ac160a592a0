"""
Generation Rate Limits

Callers on the shared API key get the free-tier limit; callers who send their
own key in ``x-api-key`` get the higher own-key limit. Limits are tracked per
user (the token subject), falling back to the client address.
"""

import base64
import hashlib
import json

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from panelcraft.core.config import settings

OWN_KEY_TIER = "own-key"
FREE_TIER = "free"


def _token_subject(token: str) -> str:
    """`sub` claim of a JWT without verifying it; a hash of the token otherwise."""
    try:
        payload = token.split(".")[1]
        payload += "=" * (-len(payload) % 4)
        subject = json.loads(base64.urlsafe_b64decode(payload)).get("sub")
        if subject:
            return str(subject)
    except (IndexError, ValueError, AttributeError):
        pass
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:32]


def rate_limit_key(request: Request) -> str:
    tier = OWN_KEY_TIER if request.headers.get("x-api-key") else FREE_TIER
    authorization = request.headers.get("authorization", "")
    if authorization.startswith("Bearer "):
        identity = _token_subject(authorization[len("Bearer "):])
    else:
        identity = get_remote_address(request)
    return f"{tier}:{identity}"


def generation_limit(key: str) -> str:
    """Limit string for a rate-limit key produced by `rate_limit_key`."""
    if key.startswith(f"{OWN_KEY_TIER}:"):
        return settings.own_key_limit
    return settings.free_tier_limit


limiter = Limiter(key_func=rate_limit_key, enabled=settings.rate_limit_enabled)
