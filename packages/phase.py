"""
Time-derived lifecycle phase of a package (and of the bookings that reference it).

The phase is never stored. A trip is `active` on the closed interval
[start_date, end_date]; `upcoming` before it and `completed` after it.
"""
from datetime import datetime
from typing import Optional

from database.documents import to_utc_naive, utcnow

UPCOMING = "upcoming"
ACTIVE = "active"
COMPLETED = "completed"
PHASES = (UPCOMING, ACTIVE, COMPLETED)


def derive_phase(start_date: datetime, end_date: datetime, now: Optional[datetime] = None) -> str:
    now = to_utc_naive(now) if now is not None else utcnow()
    start_date, end_date = to_utc_naive(start_date), to_utc_naive(end_date)
    if now < start_date:
        return UPCOMING
    if now > end_date:
        return COMPLETED
    return ACTIVE


def package_phase(package: Optional[dict], now: Optional[datetime] = None) -> Optional[str]:
    if not package or not package.get("start_date") or not package.get("end_date"):
        return None
    return derive_phase(package["start_date"], package["end_date"], now)


def phase_criteria(phase: str, now: datetime) -> dict:
    """MongoDB match criteria selecting packages in `phase` at `now`."""
    now = to_utc_naive(now)
    if phase == UPCOMING:
        return {"start_date": {"$gt": now}}
    if phase == ACTIVE:
        return {"start_date": {"$lte": now}, "end_date": {"$gte": now}}
    if phase == COMPLETED:
        return {"end_date": {"$lt": now}}
    raise ValueError(f"Unknown phase '{phase}'")
