"""
api/routes/v1/auth.py -- Public auth metadata endpoints.

Routes:
  GET /api/v1/auth/providers -- list enabled external identity providers
  GET /api/v1/auth/screens   -- list screens with their fields and links

Both are public and read-only: the screens call them before any session
exists to decide which buttons and fields to render.
"""

from __future__ import annotations

from fastapi import APIRouter

from api.models import ProviderInfo
from auth.providers import get_enabled_providers
from auth.screens import SCREEN_LINKS
from core.models import Screen
from core.validation import get_schema

router = APIRouter()


@router.get("/auth/providers", response_model=list[ProviderInfo])
async def list_providers() -> list[ProviderInfo]:
    """Return the configured identity providers.

    Returns an empty list when every provider toggle is off.
    """
    return [ProviderInfo(**p) for p in get_enabled_providers()]


@router.get("/auth/screens")
async def list_screens() -> list[dict]:
    """Return each screen's field names, defaults, and navigation links."""
    screens = []
    for screen in Screen:
        schema = get_schema(screen)
        screens.append(
            {
                "screen": screen.value,
                "fields": [{"name": f.name, "default": f.default, "required": f.required} for f in schema.fields],
                "scores_password": schema.scores_password,
                "links": SCREEN_LINKS[screen],
            }
        )
    return screens
