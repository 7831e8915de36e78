"""
auth/providers.py -- External identity provider catalogue.

The sign-in and sign-up screens offer "continue with ..." buttons. To the
form engine each button is an opaque alternate submit path; this module only
decides which ones are offered. A provider is listed when its toggle in
core.config.Settings is on -- the screens render buttons from
get_enabled_providers() and controllers refuse anything not listed, so a
crafted provider name can never reach the backend.

Supported providers:
  google    -- GOOGLE_SIGN_IN_ENABLED
  microsoft -- MICROSOFT_SIGN_IN_ENABLED

Layer rule: no imports from api/ or cache/. Import from core/ is allowed.
"""

from __future__ import annotations

from typing import Optional

from core.config import Settings, get_settings

# name -> (display label, settings toggle attribute)
_PROVIDERS: dict[str, tuple[str, str]] = {
    "google": ("Google", "google_sign_in_enabled"),
    "microsoft": ("Microsoft", "microsoft_sign_in_enabled"),
}


def get_enabled_providers(settings: Optional[Settings] = None) -> list[dict]:
    """Return metadata for every enabled provider, in display order.

    Returns list of {"name": str, "label": str} dicts.
    """
    cfg = settings or get_settings()
    return [
        {"name": name, "label": label} for name, (label, toggle) in _PROVIDERS.items() if getattr(cfg, toggle)
    ]


def is_enabled(name: str, settings: Optional[Settings] = None) -> bool:
    return any(p["name"] == name for p in get_enabled_providers(settings))
