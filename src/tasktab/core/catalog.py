"""Background catalog helpers.

The catalog is the default pool followed by the user's custom pool;
catalog indices are positions in that concatenation.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import Background

FULL_SIZE_PARAMS = "w=1920&h=1080"
THUMBNAIL_PARAMS = "w=300&h=200"


def resized_image_url(url: str) -> str:
    """Return url sized for a full-screen background.

    URLs that already carry a width parameter are returned unchanged.
    """
    if "&w=" in url or "?w=" in url:
        return url
    base, sep, query = url.partition("?")
    params = f"{FULL_SIZE_PARAMS}&fit=crop&q=80"
    if sep:
        return f"{base}?{query}&{params}"
    return f"{base}?{params}"


def thumbnail_url(url: str) -> str:
    return resized_image_url(url).replace(FULL_SIZE_PARAMS, THUMBNAIL_PARAMS)


def build_catalog(
    default_pool: Sequence[Background], custom_pool: Sequence[Background]
) -> list[Background]:
    return [*default_pool, *custom_pool]
