"""
PathClassifier - Decides which tier (light or max) an uploaded file belongs to.

Uploads arrive either with an explicit ``light/`` or ``max/`` folder in their
relative path, or with the tier folded into a flattened filename such as
``Party__light_2025-11-08_0042.jpg``. Both encodings classify the same way.
"""

import re
from typing import Tuple

LIGHT = 'light'
MAX = 'max'
UNKNOWN = 'unknown'

FALLBACK_NAME = 'photo'

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE = re.compile(r'\s+')
_NAME_TOKENS = (
    (LIGHT, re.compile(r'[_\-.\s]light[_\-.\s]', re.IGNORECASE)),
    (MAX, re.compile(r'[_\-.\s]max[_\-.\s]', re.IGNORECASE)),
)


def split_path(relative_path: str) -> list:
    """Split an upload path into its non-empty segments."""
    return [part for part in relative_path.replace('\\', '/').split('/') if part]


def clean_component(name: str) -> str:
    """Replace unsafe characters and normalize whitespace in one name."""
    return _WHITESPACE.sub(' ', _UNSAFE_CHARS.sub('_', name)).strip()


def sanitize_filename(filename: str) -> str:
    """
    Clean the last path segment of an upload for use on disk.

    Replaces characters that are invalid on common filesystems with '_',
    collapses whitespace and falls back to a placeholder stem when nothing
    is left.
    """
    parts = split_path(filename)
    name = parts[-1] if parts else ''

    base, dot, ext = name.rpartition('.')
    if not dot:
        base, ext = name, ''

    base = clean_component(base)
    ext = clean_component(ext)
    if not base.strip('.'):
        base = FALLBACK_NAME
    return f"{base}.{ext}" if ext else base


def classify(relative_path: str) -> Tuple[str, str]:
    """
    Classify an uploaded file by its name or relative path.

    Args:
        relative_path: Name of the file part, possibly 'light/img.jpg'

    Returns:
        Tuple of (tier, clean_filename) where tier is 'light', 'max' or 'unknown'
    """
    parts = split_path(relative_path)
    clean_name = sanitize_filename(relative_path)

    for part in parts:
        lower = part.strip().lower()
        if lower in (LIGHT, MAX):
            return lower, clean_name

    final = parts[-1] if parts else ''
    for tier, pattern in _NAME_TOKENS:
        if pattern.search(final):
            return tier, clean_name

    return UNKNOWN, clean_name
