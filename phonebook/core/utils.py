"""
Utility helpers shared across services.
"""

from typing import Optional

from .config import get_settings


def absolute_url(path: str, base: Optional[str] = None) -> str:
    """
    Turn a relative path into an absolute URL using PUBLIC_BASE_URL.
    """
    settings = get_settings()
    base_url = (base or settings.public_base_url).rstrip("/")
    if not path:
        return base_url + "/"
    if path.startswith("http://") or path.startswith("https://"):
        return path
    if not path.startswith("/"):
        path = "/" + path
    return base_url + path


def normalize_email(email: str | None) -> str:
    """Lowercase form of an address, used as the user's identity key."""
    return (email or "").strip().lower()
