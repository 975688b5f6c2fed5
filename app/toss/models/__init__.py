"""Data models for toss.

This module exports the core data structures used throughout the application.
"""

from toss.models.entry import Entry, ObjectKind, make_bin_name, sanitize_bin_name

__all__ = [
    "Entry",
    "ObjectKind",
    "make_bin_name",
    "sanitize_bin_name",
]
