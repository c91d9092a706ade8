from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional
from datetime import datetime


class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class UserBase(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr


class UserCreate(UserBase):
    password: str = Field(min_length=6)


class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class GoogleLogin(BaseModel):
    id_token: Optional[str] = None
    access_token: Optional[str] = None


class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    address: Optional[Address] = None
    profile_picture: Optional[str] = None


class UserResponse(UserBase):
    id: str
    role: Literal["user", "admin"] = "user"
    profile_picture: Optional[str] = None
    address: Optional[Address] = None
    google_id: Optional[str] = None
    created_at: Optional[datetime] = None
    booking_count: Optional[int] = None
