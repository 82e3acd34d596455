# eventcatalog_openapi/core/versions.py
from __future__ import annotations

from typing import Optional

from packaging.version import InvalidVersion, Version


def is_newer(candidate: str, current: str) -> Optional[bool]:
    """
    Strict greater-than between two version strings.
    Returns None when either side cannot be parsed (no opinion).
    """
    try:
        return Version(candidate) > Version(current)
    except InvalidVersion:
        return None
