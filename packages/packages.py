# packages/packages.py

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pymongo import ReturnDocument

from auth.dependencies import require_admin
from database.connection import get_database
from database.documents import parse_object_id, serialize_doc, to_millis
from database.query_builder import build_query, paginate, pagination_payload
from models.package import PackageCreate, PackageResponse, PackageUpdate
from packages.phase import package_phase
from reports.stats import package_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/packages", tags=["packages"])


def to_response(doc: dict, now: Optional[datetime] = None) -> PackageResponse:
    return PackageResponse(**serialize_doc(doc), phase=package_phase(doc, now))


@router.get("/")
async def get_packages(
    db=Depends(get_database),
    from_location: Optional[str] = Query(None, alias="fromLocation"),
    to_location: Optional[str] = Query(None, alias="toLocation"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    sort: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
):
    """Public package listing with location/date filters, sorting and pagination."""
    query = build_query(
        {
            "fromLocation": from_location,
            "toLocation": to_location,
            "startDate": start_date,
            "endDate": end_date,
        },
        page=page,
        limit=limit,
        sort=sort,
    )
    result = await paginate(db["packages"], query)
    now = datetime.utcnow()
    for item in result.items:
        item["phase"] = package_phase(item, now)
    return pagination_payload(result)


@router.get("/stats/overview")
async def get_package_stats(db=Depends(get_database), admin: dict = Depends(require_admin)):
    return {"success": True, "data": await package_stats(db)}


@router.get("/{package_id}")
async def get_package(package_id: str, db=Depends(get_database)):
    package = await db["packages"].find_one({"_id": parse_object_id(package_id, "package")})
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")
    return {"success": True, "data": to_response(package)}


@router.post("/", status_code=201)
async def create_package(package: PackageCreate, db=Depends(get_database),
                         admin: dict = Depends(require_admin)):
    package_doc = package.model_dump()
    package_doc["created_at"] = package_doc["updated_at"] = datetime.utcnow()

    result = await db["packages"].insert_one(package_doc)
    package_doc["_id"] = result.inserted_id
    logger.info("Package %s created by %s", result.inserted_id, admin["id"])
    return {"success": True, "data": to_response(package_doc)}


@router.put("/{package_id}")
async def update_package(package_id: str, changes: PackageUpdate, db=Depends(get_database),
                         admin: dict = Depends(require_admin)):
    object_id = parse_object_id(package_id, "package")
    package = await db["packages"].find_one({"_id": object_id})
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")

    updates = changes.model_dump(exclude_unset=True, exclude_none=True)
    start = updates.get("start_date", package["start_date"])
    end = updates.get("end_date", package["end_date"])
    if end <= start:
        raise HTTPException(status_code=400, detail="End date must be after start date")

    dates_changed = (to_millis(start) != to_millis(package["start_date"])
                     or to_millis(end) != to_millis(package["end_date"]))
    if dates_changed and await db["bookings"].find_one({"package_id": object_id}):
        raise HTTPException(status_code=400, detail="Cannot change the dates of a package that has bookings")

    updates["updated_at"] = datetime.utcnow()
    updated = await db["packages"].find_one_and_update(
        {"_id": object_id},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Package not found")
    logger.info("Package %s updated by %s", package_id, admin["id"])
    return {"success": True, "data": to_response(updated)}


@router.delete("/{package_id}")
async def delete_package(package_id: str, db=Depends(get_database),
                         admin: dict = Depends(require_admin)):
    result = await db["packages"].delete_one({"_id": parse_object_id(package_id, "package")})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Package not found")
    logger.info("Package %s deleted by %s", package_id, admin["id"])
    return {"success": True, "data": {}}
