from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime

from database.documents import to_millis


class IncludedServices(BaseModel):
    food: bool = False
    accommodation: bool = False


class PackageBase(BaseModel):
    from_location: str = Field(min_length=1)
    to_location: str = Field(min_length=1)
    start_date: datetime
    end_date: datetime
    base_price: float = Field(ge=0)
    included_services: IncludedServices = IncludedServices()
    food_price: float = Field(default=0, ge=0)
    accommodation_price: float = Field(default=0, ge=0)
    description: Optional[str] = None
    image: Optional[str] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: datetime) -> datetime:
        return to_millis(value)


class PackageCreate(PackageBase):
    @model_validator(mode="after")
    def check_date_range(self):
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class PackageUpdate(BaseModel):
    from_location: Optional[str] = Field(default=None, min_length=1)
    to_location: Optional[str] = Field(default=None, min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    base_price: Optional[float] = Field(default=None, ge=0)
    included_services: Optional[IncludedServices] = None
    food_price: Optional[float] = Field(default=None, ge=0)
    accommodation_price: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    image: Optional[str] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_millis(value)


class PackageResponse(PackageBase):
    id: str
    phase: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PackageSummary(BaseModel):
    id: str
    from_location: str
    to_location: str
    start_date: datetime
    end_date: datetime
    base_price: float
