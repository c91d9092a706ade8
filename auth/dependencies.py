# auth/dependencies.py

from bson import ObjectId
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer

from auth.jwt_handler import verify_token
from database.connection import get_database

security = HTTPBearer(auto_error=False)


async def get_token_payload(request: Request) -> dict:
    """Decode the bearer token into its payload."""
    credentials = await security(request)
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authorized to access this route")

    payload = verify_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise HTTPException(status_code=401, detail="Invalid token.")
    return payload


async def get_current_user(payload: dict = Depends(get_token_payload), db=Depends(get_database)) -> dict:
    """Load the authenticated user. The role always comes from the stored user, not the token."""
    user_id = payload.get("sub")
    if not ObjectId.is_valid(user_id):
        raise HTTPException(status_code=401, detail="Invalid token.")

    user = await db["users"].find_one({"_id": ObjectId(user_id)})
    if not user:
        raise HTTPException(status_code=401, detail="User not found.")
    user["id"] = str(user["_id"])
    return user


def is_admin(user: dict) -> bool:
    return user.get("role") == "admin"


async def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    if not is_admin(current_user):
        raise HTTPException(status_code=403, detail="Access forbidden: Admin role required.")
    return current_user
