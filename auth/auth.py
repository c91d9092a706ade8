import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from pymongo.errors import DuplicateKeyError

from auth.dependencies import get_current_user
from auth.google_oauth import GoogleAuthError, fetch_google_profile
from auth.jwt_handler import create_access_token
from auth.password_handler import hash_password, verify_password
from database.connection import get_database
from database.documents import serialize_doc
from models.user import GoogleLogin, UserCreate, UserLogin, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def token_response(user: dict, status_code: int = 200) -> JSONResponse:
    user_id = str(user["_id"])
    body = {
        "success": True,
        "token": create_access_token(user_id, role=user.get("role", "user")),
        "user": UserResponse(**serialize_doc(user)).model_dump(),
    }
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@router.post("/register", status_code=201)
async def register(user: UserCreate, db=Depends(get_database)):
    email = user.email.lower()
    if await db["users"].find_one({"email": email}):
        raise HTTPException(status_code=400, detail="User already exists")

    user_doc = {
        "name": user.name,
        "email": email,
        "password": hash_password(user.password),
        "role": "user",
        "created_at": datetime.utcnow(),
    }
    try:
        result = await db["users"].insert_one(user_doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exists")
    user_doc["_id"] = result.inserted_id
    logger.info("Registered user %s", user_doc["_id"])
    return token_response(user_doc, status_code=201)


@router.post("/login")
async def login(credentials: UserLogin, db=Depends(get_database)):
    if not credentials.email or not credentials.password:
        raise HTTPException(status_code=400, detail="Please provide email and password")

    user = await db["users"].find_one({"email": credentials.email.strip().lower()})
    if not user or not verify_password(credentials.password, user.get("password")):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return token_response(user)


@router.post("/google")
async def google_login(payload: GoogleLogin, db=Depends(get_database)):
    if not payload.id_token and not payload.access_token:
        raise HTTPException(status_code=400, detail="Invalid Google authentication data")
    try:
        profile = await fetch_google_profile(payload.id_token, payload.access_token)
    except GoogleAuthError as e:
        raise HTTPException(status_code=401, detail=str(e))

    user = await db["users"].find_one({"email": profile.email})
    if not user:
        user = {
            "name": profile.name,
            "email": profile.email,
            "google_id": profile.google_id,
            "profile_picture": profile.picture,
            "role": "user",
            "created_at": datetime.utcnow(),
        }
        result = await db["users"].insert_one(user)
        user["_id"] = result.inserted_id
        logger.info("Created user %s from Google sign-in", user["_id"])
    elif not user.get("google_id"):
        # Link the Google identity to the existing email account
        updates = {"google_id": profile.google_id}
        if not user.get("profile_picture") and profile.picture:
            updates["profile_picture"] = profile.picture
        await db["users"].update_one({"_id": user["_id"]}, {"$set": updates})
        user.update(updates)
        logger.info("Linked Google account to user %s", user["_id"])

    return token_response(user)


@router.get("/me")
async def get_me(current_user: dict = Depends(get_current_user)):
    return {"success": True, "data": UserResponse(**serialize_doc(current_user))}
