"""Lock key validation and lock file path helpers.

Lock files live in one directory per environment::

    <root>/<prefix>-<environment>/<key>

Keys and environment names are embedded verbatim as path segments, so
they are validated rather than silently rewritten. ``sanitize_key`` is
available for callers that want to derive a key from arbitrary text.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from fsmutex.exceptions import InvalidLockKeyError

_RESERVED_SEGMENTS = {".", ".."}


def sanitize_key(value: Any) -> str:
    """Turn arbitrary text into a usable lock key.

    Replaces any characters that are not alphanumeric, dot, underscore,
    or hyphen with underscores.

    Example:
        >>> sanitize_key("reports/daily")
        'reports_daily'
        >>> sanitize_key("foo bar@baz")
        'foo_bar_baz'
    """
    cleaned = re.sub(r"[^0-9A-Za-z._-]", "_", str(value))
    if not cleaned or cleaned in _RESERVED_SEGMENTS:
        cleaned = "_" + cleaned.replace(".", "_")
    return cleaned


def is_safe_segment(value: str) -> bool:
    """Return True if ``value`` can be used as exactly one path segment."""
    if not isinstance(value, str) or not value:
        return False
    if value in _RESERVED_SEGMENTS:
        return False
    if "\x00" in value or "/" in value:
        return False
    if os.sep in value or (os.altsep and os.altsep in value):
        return False
    return True


def validate_key(key: str) -> str:
    """Return ``key`` unchanged or raise InvalidLockKeyError."""
    if not is_safe_segment(key):
        raise InvalidLockKeyError(
            "Lock key must be a non-empty single path segment", key=key
        )
    return key


def lock_directory(root_dir: Path, prefix: str, environment: str) -> Path:
    """Directory shared by every lock of one environment."""
    return Path(root_dir) / f"{prefix}-{environment}"


def lock_file_path(directory: Path, key: str) -> Path:
    """Path of the lock file for ``key`` inside ``directory``."""
    return Path(directory) / validate_key(key)
