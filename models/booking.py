from pydantic import BaseModel
from typing import Literal, Optional
from datetime import datetime

from models.package import PackageSummary

BookingStatus = Literal["accepted", "cancelled", "completed"]
Phase = Literal["upcoming", "active", "completed"]


class SelectedOptions(BaseModel):
    food: bool = False
    accommodation: bool = False


class BookingCreate(BaseModel):
    package_id: str
    selected_options: SelectedOptions = SelectedOptions()
    # Advisory only; the server always recomputes the price.
    total_price: Optional[float] = None


class BookingStatusUpdate(BaseModel):
    status: str


class BookingUser(BaseModel):
    id: str
    name: str
    email: str


class BookingResponse(BaseModel):
    id: str
    user_id: str
    package_id: str
    selected_options: SelectedOptions
    total_price: float
    status: BookingStatus
    # Temporal phase of the referenced package; independent of `status`.
    current_status: Optional[Phase] = None
    booking_date: datetime
    package: Optional[PackageSummary] = None
    user: Optional[BookingUser] = None
