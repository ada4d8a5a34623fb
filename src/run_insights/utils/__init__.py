"""Utility helpers."""

from .dates import to_local_naive
from .formatting import format_distance, format_pace, format_time, parse_time

__all__ = [
    "format_distance",
    "format_pace",
    "format_time",
    "parse_time",
    "to_local_naive",
]
