"""
Utility functions for treecarbon.

This module provides common utilities used throughout the codebase.
"""

from .string_utils import normalize_label, normalize_team

__all__ = [
    "normalize_label",
    "normalize_team",
]
