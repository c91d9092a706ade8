"""
Google sign-in: turn an ID token or an OAuth access token into a profile.
"""
import logging
from typing import Optional

import requests
from fastapi.concurrency import run_in_threadpool
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token
from pydantic import BaseModel

import config

logger = logging.getLogger(__name__)

USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


class GoogleAuthError(Exception):
    """The provider rejected the credential or returned an unusable profile."""


class GoogleProfile(BaseModel):
    google_id: str
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None


def _profile_from_claims(claims: dict) -> GoogleProfile:
    if not claims.get("sub") or not claims.get("email"):
        raise GoogleAuthError("Google profile is missing an id or email")
    return GoogleProfile(
        google_id=claims["sub"],
        email=claims["email"].lower(),
        name=claims.get("name") or claims["email"].split("@")[0],
        picture=claims.get("picture"),
    )


def verify_id_token(token: str) -> GoogleProfile:
    if not config.GOOGLE_CLIENT_ID:
        raise GoogleAuthError("Google sign-in is not configured")
    try:
        claims = google_id_token.verify_oauth2_token(
            token, google_requests.Request(), config.GOOGLE_CLIENT_ID
        )
    except ValueError as e:
        raise GoogleAuthError(str(e)) from e
    return _profile_from_claims(claims)


def fetch_userinfo(access_token: str) -> GoogleProfile:
    try:
        response = requests.get(
            USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=10,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning("Google userinfo lookup failed: %s", e)
        raise GoogleAuthError("Could not verify Google access token") from e
    return _profile_from_claims(response.json())


async def fetch_google_profile(id_token: Optional[str] = None,
                               access_token: Optional[str] = None) -> GoogleProfile:
    """Verify whichever credential the client sent. Network calls run off the event loop."""
    if id_token:
        return await run_in_threadpool(verify_id_token, id_token)
    if access_token:
        return await run_in_threadpool(fetch_userinfo, access_token)
    raise GoogleAuthError("Invalid Google authentication data")
