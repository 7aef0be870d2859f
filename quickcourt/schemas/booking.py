from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime, time
from decimal import Decimal

from quickcourt.models.enums import MAX_SLOTS_PER_BOOKING
from quickcourt.schemas.user import UserSummary

class BookingCreate(BaseModel):
    court_id: int
    booking_date: date
    start_time: time
    number_of_slots: int = Field(1, ge=1, le=MAX_SLOTS_PER_BOOKING)
    end_time: Optional[time] = Field(None, description="Optional; must match start + slots x slot duration")

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v):
        if v.second or v.microsecond:
            raise ValueError("Start time must be given as HH:MM")
        return v

class BookingCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)

class VenueSummary(BaseModel):
    id: int
    name: str
    city: str

    class Config:
        from_attributes = True

class CourtSummary(BaseModel):
    id: int
    name: str
    sport_type: str

    class Config:
        from_attributes = True

class BookingResponse(BaseModel):
    id: int
    user_id: int
    venue_id: int
    court_id: int
    booking_date: date
    start_time: time
    end_time: time
    number_of_slots: int
    slot_duration: int
    total_amount: Decimal
    status: str
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    payment_simulated: bool
    created_at: Optional[datetime] = None
    venue: Optional[VenueSummary] = None
    court: Optional[CourtSummary] = None
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True

class BookingListResponse(BaseModel):
    bookings: List[BookingResponse]
    total: int
    page: int
    limit: int
    total_pages: int

class UserBookingStats(BaseModel):
    total_bookings: int
    venues_visited: int
    upcoming: int
    completed: int
    cancelled: int
    total_amount_spent: Decimal
    member_since: Optional[datetime] = None
    recent_bookings: List[BookingResponse]
