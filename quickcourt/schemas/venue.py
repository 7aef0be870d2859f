from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from quickcourt.models.enums import SportType, VenueType

MAX_VENUE_IMAGES = 10
# Columns an update may change but never clear; coordinates stay nullable
REQUIRED_VENUE_FIELDS = ("name", "description", "address", "venue_type", "sports", "amenities", "images")

class ImageRef(BaseModel):
    url: str
    public_id: str

class Address(BaseModel):
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field("India", max_length=100)

def _unique_sports(v):
    if v is None:
        return v
    if not v:
        raise ValueError("At least one sport is required")
    return list(dict.fromkeys(v))

class VenueBase(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10, max_length=1000)
    address: Address
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    venue_type: VenueType = VenueType.OUTDOOR
    sports: List[SportType]
    amenities: List[str] = []
    images: List[ImageRef] = Field([], max_length=MAX_VENUE_IMAGES)

    @field_validator("sports")
    @classmethod
    def validate_sports(cls, v):
        return _unique_sports(v)

class VenueCreate(VenueBase):
    pass

class VenueUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=1000)
    address: Optional[Address] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    venue_type: Optional[VenueType] = None
    sports: Optional[List[SportType]] = None
    amenities: Optional[List[str]] = None
    images: Optional[List[ImageRef]] = Field(None, max_length=MAX_VENUE_IMAGES)

    @field_validator("sports")
    @classmethod
    def validate_sports(cls, v):
        return _unique_sports(v)

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data):
        if isinstance(data, dict):
            cleared = sorted(f for f in REQUIRED_VENUE_FIELDS if f in data and data[f] is None)
            if cleared:
                raise ValueError(f"These fields cannot be null: {', '.join(cleared)}")
        return data

class VenueResponse(VenueBase):
    id: int
    owner_id: int
    status: str
    rejection_reason: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class VenueListItem(VenueResponse):
    starting_price: Optional[Decimal] = None
    court_count: int = 0

class VenueListResponse(BaseModel):
    venues: List[VenueListItem]
    total: int
    page: int
    limit: int
    total_pages: int

class VenueReject(BaseModel):
    reason: str = Field("", max_length=500)

class VenueActiveUpdate(BaseModel):
    is_active: bool
