"""
Dashboard aggregations over packages, bookings and users.
"""
from datetime import datetime
from typing import List, Optional

import config
from database.documents import serialize_doc, utcnow
from database.query_builder import Page, total_pages
from packages.phase import ACTIVE, COMPLETED, UPCOMING, phase_criteria


async def package_stats(db, now: Optional[datetime] = None) -> dict:
    """Count packages per phase, using the same boundaries as `derive_phase`."""
    now = now or utcnow()
    packages = db["packages"]
    stats = {"total": await packages.count_documents({})}
    for phase in (ACTIVE, UPCOMING, COMPLETED):
        stats[phase] = await packages.count_documents(phase_criteria(phase, now))
    return stats


def booking_stats_pipeline(include_cancelled: bool = True) -> List[dict]:
    pipeline = []
    if not include_cancelled:
        pipeline.append({"$match": {"status": {"$ne": "cancelled"}}})
    pipeline += [
        {"$group": {
            "_id": "$package_id",
            "booking_count": {"$sum": 1},
            "total_revenue": {"$sum": "$total_price"},
        }},
        # Bookings whose package was deleted drop out here
        {"$lookup": {"from": "packages", "localField": "_id", "foreignField": "_id", "as": "package"}},
        {"$unwind": "$package"},
        {"$sort": {"booking_count": -1, "_id": 1}},
    ]
    return pipeline


def _format_booking_stat(row: dict) -> dict:
    package = row["package"]
    return {
        "package_id": str(row["_id"]),
        "package_name": package.get("from_location"),
        "route": {
            "from_location": package.get("from_location"),
            "to_location": package.get("to_location"),
        },
        "date_range": {
            "start_date": package.get("start_date"),
            "end_date": package.get("end_date"),
        },
        "booking_count": row["booking_count"],
        "total_revenue": row["total_revenue"],
    }


async def booking_stats_by_package(db, include_cancelled: Optional[bool] = None) -> List[dict]:
    """Booking count and revenue per package, most booked first.

    Cancelled bookings count toward revenue unless `include_cancelled` is False.
    """
    if include_cancelled is None:
        include_cancelled = config.REVENUE_INCLUDES_CANCELLED
    cursor = db["bookings"].aggregate(booking_stats_pipeline(include_cancelled))
    rows = await cursor.to_list(length=None)
    return [_format_booking_stat(row) for row in rows]


async def booking_counts_for(db, user_ids: list) -> dict:
    pipeline = [
        {"$match": {"user_id": {"$in": user_ids}}},
        {"$group": {"_id": "$user_id", "count": {"$sum": 1}}},
    ]
    rows = await db["bookings"].aggregate(pipeline).to_list(length=None)
    return {row["_id"]: row["count"] for row in rows}


async def users_with_booking_counts(db, page: int, limit: int) -> Page:
    skip = (page - 1) * limit
    users = await db["users"].find(
        {}, {"password": 0}, sort=[("created_at", -1), ("_id", 1)], skip=skip, limit=limit
    ).to_list(length=limit)
    total = await db["users"].count_documents({})

    counts = await booking_counts_for(db, [user["_id"] for user in users])
    items = []
    for user in users:
        item = serialize_doc(user)
        item["booking_count"] = counts.get(user["_id"], 0)
        items.append(item)

    return Page(items=items, total=total, current=page, pages=total_pages(total, limit))
