"""
String normalization helpers for labels read from spreadsheets.
"""
import re
from typing import Any, Optional

__all__ = ['normalize_label', 'normalize_team']

_WHITESPACE = re.compile(r'\s+')


def normalize_label(label: Any) -> str:
    """Normalize a species label for case-insensitive lookup.

    Strips surrounding whitespace, lowercases, and collapses internal runs
    of whitespace around separators, so ``' Cedar / Larch '`` and
    ``'cedar/larch'`` compare equal.

    Args:
        label: Raw label value

    Returns:
        Normalized label string
    """
    if label is None:
        return ''
    text = _WHITESPACE.sub(' ', str(label).strip().lower())
    return re.sub(r'\s*([/-])\s*', r'\1', text)


def normalize_team(team: Any) -> Optional[str]:
    """Strip a team name; blank names become None."""
    if team is None:
        return None
    text = str(team).strip()
    return text or None
