# bookings/bookings.py

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo import ReturnDocument

from auth.dependencies import get_current_user, is_admin, require_admin
from bookings.pricing import compute_total_price
from bookings.workflow import BOOKING_STATUSES, INITIAL_STATUS, can_transition
from database.connection import get_database
from database.documents import parse_object_id, serialize_doc
from database.query_builder import ListQuery, paginate, pagination_payload, parse_pagination
from models.booking import BookingCreate, BookingResponse, BookingStatusUpdate
from packages.phase import PHASES, package_phase
from reports.stats import booking_stats_by_package

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])

PACKAGE_SUMMARY_FIELDS = {"from_location": 1, "to_location": 1, "start_date": 1, "end_date": 1, "base_price": 1}
USER_SUMMARY_FIELDS = {"name": 1, "email": 1}


async def attach_packages(db, bookings: List[dict], now: Optional[datetime] = None) -> List[dict]:
    """Embed a package summary and the derived `current_status` in each serialized booking."""
    package_ids = list({parse_object_id(b["package_id"]) for b in bookings})
    packages = await db["packages"].find(
        {"_id": {"$in": package_ids}}, PACKAGE_SUMMARY_FIELDS
    ).to_list(length=None)
    by_id = {str(p["_id"]): p for p in packages}

    now = now or datetime.utcnow()
    for booking in bookings:
        package = by_id.get(booking["package_id"])
        booking["package"] = serialize_doc(package)
        booking["current_status"] = package_phase(package, now)
    return bookings


async def attach_users(db, bookings: List[dict]) -> List[dict]:
    user_ids = list({parse_object_id(b["user_id"]) for b in bookings})
    users = await db["users"].find({"_id": {"$in": user_ids}}, USER_SUMMARY_FIELDS).to_list(length=None)
    by_id = {str(u["_id"]): serialize_doc(u) for u in users}
    for booking in bookings:
        booking["user"] = by_id.get(booking["user_id"])
    return bookings


@router.post("/", status_code=201)
async def create_booking(booking: BookingCreate, db=Depends(get_database),
                         current_user: dict = Depends(get_current_user)):
    package = await db["packages"].find_one({"_id": parse_object_id(booking.package_id, "package")})
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")

    selected_options = booking.selected_options.model_dump()
    total_price = compute_total_price(package, selected_options)
    if booking.total_price is not None and booking.total_price != total_price:
        logger.warning(
            "Ignoring client total %.2f for package %s, computed %.2f",
            booking.total_price, booking.package_id, total_price,
        )

    booking_doc = {
        "user_id": current_user["_id"],
        "package_id": package["_id"],
        "selected_options": selected_options,
        "total_price": total_price,
        "status": INITIAL_STATUS,
        "booking_date": datetime.utcnow(),
    }
    result = await db["bookings"].insert_one(booking_doc)
    booking_doc["_id"] = result.inserted_id
    logger.info("Booking %s created for package %s by user %s",
                result.inserted_id, package["_id"], current_user["id"])

    data = serialize_doc(booking_doc)
    data["package"] = serialize_doc(package)
    data["current_status"] = package_phase(package)
    return {"success": True, "data": BookingResponse(**data)}


@router.get("/admin")
async def get_all_bookings(page: Optional[str] = None, limit: Optional[str] = None,
                           db=Depends(get_database), admin: dict = Depends(require_admin)):
    """All bookings across users, newest first."""
    page_number, page_size, skip = parse_pagination(page, limit)
    query = ListQuery(sort=[("booking_date", -1), ("_id", -1)], page=page_number, limit=page_size, skip=skip)
    result = await paginate(db["bookings"], query)
    await attach_packages(db, result.items)
    await attach_users(db, result.items)
    return pagination_payload(result)


@router.get("/stats/by-package")
async def get_booking_stats_by_package(include_cancelled: Optional[bool] = None,
                                       db=Depends(get_database), admin: dict = Depends(require_admin)):
    stats = await booking_stats_by_package(db, include_cancelled)
    return {"success": True, "count": len(stats), "data": stats}


@router.get("/user")
async def get_user_bookings(status: Optional[str] = None, db=Depends(get_database),
                            current_user: dict = Depends(get_current_user)):
    """The caller's own bookings, optionally narrowed to one trip phase."""
    docs = await db["bookings"].find(
        {"user_id": current_user["_id"]}, sort=[("booking_date", -1)]
    ).to_list(length=None)
    bookings = await attach_packages(db, [serialize_doc(doc) for doc in docs])

    if status in PHASES:
        bookings = [b for b in bookings if b["current_status"] == status]

    return {"success": True, "count": len(bookings), "data": bookings}


@router.patch("/{booking_id}/status")
async def update_booking_status(booking_id: str, update: BookingStatusUpdate,
                                db=Depends(get_database), admin: dict = Depends(require_admin)):
    if update.status not in BOOKING_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    object_id = parse_object_id(booking_id, "booking")
    booking = await db["bookings"].find_one({"_id": object_id})
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    if not can_transition(booking["status"], update.status):
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change booking status from '{booking['status']}' to '{update.status}'.",
        )

    updated = await db["bookings"].find_one_and_update(
        {"_id": object_id},
        {"$set": {"status": update.status}},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Booking not found")
    logger.info("Booking %s status %s -> %s by admin %s",
                booking_id, booking["status"], update.status, admin["id"])

    data = await attach_packages(db, [serialize_doc(updated)])
    return {"success": True, "data": data[0]}


@router.get("/{booking_id}")
async def get_booking(booking_id: str, db=Depends(get_database),
                      current_user: dict = Depends(get_current_user)):
    booking = await db["bookings"].find_one({"_id": parse_object_id(booking_id, "booking")})
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    if booking["user_id"] != current_user["_id"] and not is_admin(current_user):
        raise HTTPException(status_code=403, detail="Not authorized to access this booking")

    data = await attach_packages(db, [serialize_doc(booking)])
    return {"success": True, "data": data[0]}
