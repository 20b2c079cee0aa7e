"""
Shared validators for input sanitization.
"""

import re
from urllib.parse import urlparse
from typing import Optional

from shared.config.constants import Limits

# Internal hosts that must never appear in image URLs (SSRF prevention)
BLOCKED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "10.",
    "192.168.",
    "169.254.",  # Link-local and cloud metadata
    "[::1]",
    "metadata.google",
]
BLOCKED_HOSTS += [f"172.{n}." for n in range(16, 32)]

BLOCKED_SCHEMES = {"javascript", "data", "file", "ftp", "mailto", "tel"}

MAX_URL_LENGTH = 2048

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_COLOR_NAME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9-]{0,31}$")


def validate_image_url(url: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a menu image URL.

    Root-relative paths ("/images/latte.png") are accepted as-is for
    images served by the storefront itself.

    Returns:
        The stripped URL, or None for empty input

    Raises:
        ValueError: If the URL is malformed or points at an internal host
    """
    if url is None:
        return None

    url = url.strip()
    if not url:
        return None

    if len(url) > MAX_URL_LENGTH:
        raise ValueError(f"URL too long (max {MAX_URL_LENGTH} characters)")

    if url.startswith("/") and not url.startswith("//"):
        return url

    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme in BLOCKED_SCHEMES:
        raise ValueError(f"URL scheme not allowed: {scheme}")
    if scheme not in ("http", "https"):
        raise ValueError("Only HTTP/HTTPS URLs are allowed")

    host = parsed.netloc.lower()
    if not host:
        raise ValueError("URL has no host")

    for blocked in BLOCKED_HOSTS:
        if host.startswith(blocked) or host == blocked.rstrip("."):
            raise ValueError("Internal URLs are not allowed")

    return url


def validate_badges(badges: Optional[list[dict]]) -> Optional[list[dict]]:
    """
    Validate the badge list of a menu item.

    Each badge is {"label": str, "color": str}; color is a hex code or a
    plain color name. An empty list is stored as None.
    """
    if badges is None:
        return None
    if len(badges) > Limits.MAX_BADGES:
        raise ValueError(f"At most {Limits.MAX_BADGES} badges are allowed")

    cleaned = []
    for badge in badges:
        label = str(badge.get("label", "")).strip()
        color = str(badge.get("color", "")).strip()
        if not label:
            raise ValueError("Badge label is required")
        if len(label) > 32:
            raise ValueError("Badge label too long (max 32 characters)")
        if not (_HEX_COLOR_RE.match(color) or _COLOR_NAME_RE.match(color)):
            raise ValueError(f"Invalid badge color: {color!r}")
        cleaned.append({"label": label, "color": color})

    return cleaned or None


def require_text(value: Optional[str], field: str, max_length: int = Limits.MAX_NAME_LENGTH) -> str:
    """Trim a required free-text field and reject blanks."""
    text = (value or "").strip()
    if not text:
        raise ValueError(f"{field} is required")
    if len(text) > max_length:
        raise ValueError(f"{field} too long (max {max_length} characters)")
    return text


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively; store them lower-cased."""
    return email.strip().lower()
