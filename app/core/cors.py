from __future__ import annotations

from app.core.config import settings


def cors_allowed_origins() -> list[str]:
    return list(settings.cors_allowed_origins)


def cors_allow_credentials() -> bool:
    # browsers reject credentialed requests against a wildcard origin
    return "*" not in settings.cors_allowed_origins
