"""
API test fixtures.

The app runs against the in-memory fakes from the top-level conftest, with
authentication replaced by a fixed user.
"""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from panelcraft.api import deps
from panelcraft.api.limits import limiter
from panelcraft.api.main import app


class AuthState:
    """Mutable current user; None means unauthenticated."""

    def __init__(self, user_id="user-1"):
        self.user_id = user_id


@pytest.fixture
def auth():
    return AuthState()


@pytest.fixture
def client(repository, image_gateway, text_gateway, storage, ocr_gateway, auth):
    async def current_user():
        if auth.user_id is None:
            raise HTTPException(status_code=401, detail="Authentication required")
        return auth.user_id

    async def optional_user():
        return auth.user_id

    app.dependency_overrides.update({
        deps.get_repository: lambda: repository,
        deps.get_storage: lambda: storage,
        deps.get_image_gateway: lambda: image_gateway,
        deps.get_text_gateway: lambda: text_gateway,
        deps.get_ocr_gateway: lambda: ocr_gateway,
        deps.get_current_user_id: current_user,
        deps.get_optional_user_id: optional_user,
    })
    limiter_enabled = limiter.enabled
    limiter.enabled = False

    with TestClient(app) as test_client:
        yield test_client

    limiter.enabled = limiter_enabled
    limiter.reset()
    app.dependency_overrides.clear()
