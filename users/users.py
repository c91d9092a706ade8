import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo import ReturnDocument

from auth.dependencies import get_current_user, require_admin
from bookings.bookings import attach_packages
from database.connection import get_database
from database.documents import parse_object_id, serialize_doc
from database.query_builder import pagination_payload, parse_pagination
from models.user import UserProfileUpdate, UserResponse
from reports.stats import users_with_booking_counts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/profile")
async def get_profile(current_user: dict = Depends(get_current_user)):
    return {"success": True, "data": UserResponse(**serialize_doc(current_user))}


@router.put("/profile")
async def update_profile(changes: UserProfileUpdate, db=Depends(get_database),
                         current_user: dict = Depends(get_current_user)):
    """Only name, address and profile picture can be changed here."""
    updates = changes.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        return {"success": True, "data": UserResponse(**serialize_doc(current_user))}

    user = await db["users"].find_one_and_update(
        {"_id": current_user["_id"]},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("User %s updated profile fields %s", current_user["id"], sorted(updates))
    return {"success": True, "data": UserResponse(**serialize_doc(user))}


@router.get("/")
async def get_users(page: Optional[str] = None, limit: Optional[str] = None,
                    db=Depends(get_database), admin: dict = Depends(require_admin)):
    page_number, page_size, _ = parse_pagination(page, limit)
    result = await users_with_booking_counts(db, page_number, page_size)
    return pagination_payload(result)


@router.get("/{user_id}")
async def get_user_with_bookings(user_id: str, db=Depends(get_database),
                                 admin: dict = Depends(require_admin)):
    object_id = parse_object_id(user_id, "user")
    user = await db["users"].find_one({"_id": object_id}, {"password": 0})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    docs = await db["bookings"].find({"user_id": object_id}, sort=[("booking_date", -1)]).to_list(length=None)
    bookings = await attach_packages(db, [serialize_doc(doc) for doc in docs])
    return {"success": True, "data": {"user": UserResponse(**serialize_doc(user)), "bookings": bookings}}
