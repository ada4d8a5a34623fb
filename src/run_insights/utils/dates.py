"""Date helpers."""

from datetime import datetime
from typing import Optional


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Drop the timezone from a wall-clock timestamp.

    Activity start times, goal dates and the evaluation clock are all local
    wall-clock times. Sync sources sometimes tag them with a UTC offset (e.g.
    Strava's ``start_date_local`` ends in ``Z``) even though the digits are
    already local, so the offset is discarded rather than converted.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.replace(tzinfo=None)
