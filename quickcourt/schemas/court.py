from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import date, datetime, time
from decimal import Decimal

from quickcourt.models.enums import DayOfWeek, SportType, UnavailabilityReason, SLOT_DURATIONS
from quickcourt.services.slots import MINUTES_PER_DAY, day_end_minutes

def _on_half_hour(v: time) -> time:
    if v.minute not in (0, 30) or v.second or v.microsecond:
        raise ValueError("Times must be on the hour or half hour (e.g. 10:00, 10:30)")
    return v

class SlotConfigurationBase(BaseModel):
    day_of_week: DayOfWeek
    is_open: bool = True
    start_time: time = time(10, 0)
    slot_duration: int = Field(1, ge=1, le=4)
    number_of_slots: int = Field(11, ge=1, le=24)
    price: Decimal = Field(..., ge=0, decimal_places=2)

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v):
        return _on_half_hour(v)

    @field_validator("slot_duration")
    @classmethod
    def validate_slot_duration(cls, v):
        if v not in SLOT_DURATIONS:
            raise ValueError(f"Slot duration must be one of {SLOT_DURATIONS} hours")
        return v

    @model_validator(mode="after")
    def validate_open_day(self):
        if self.is_open:
            if self.price <= 0:
                raise ValueError("Price must be greater than 0 on open days")
            if day_end_minutes(self.start_time, self.slot_duration, self.number_of_slots) >= MINUTES_PER_DAY:
                raise ValueError("The last slot must end before midnight")
        return self

class SlotConfigurationIn(SlotConfigurationBase):
    pass

class SlotConfigurationResponse(SlotConfigurationBase):
    id: int

    class Config:
        from_attributes = True

def _seven_days(v):
    if v is None:
        return v
    days = {c.day_of_week for c in v}
    if len(v) != 7 or len(days) != 7:
        raise ValueError("Configuration for all 7 days of the week is required")
    return v

class CourtCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    sport_type: SportType
    description: Optional[str] = Field(None, max_length=500)
    default_price: Decimal = Field(Decimal("500"), gt=0, decimal_places=2)
    slot_configurations: Optional[List[SlotConfigurationIn]] = None

    @field_validator("slot_configurations")
    @classmethod
    def validate_slot_configurations(cls, v):
        return _seven_days(v)

class CourtUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    sport_type: Optional[SportType] = None
    description: Optional[str] = Field(None, max_length=500)
    default_price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    slot_configurations: Optional[List[SlotConfigurationIn]] = None
    is_active: Optional[bool] = None

    @field_validator("slot_configurations")
    @classmethod
    def validate_slot_configurations(cls, v):
        return _seven_days(v)

class CourtResponse(BaseModel):
    id: int
    venue_id: int
    name: str
    sport_type: str
    description: Optional[str] = None
    default_price: Decimal
    is_active: bool
    slot_configurations: List[SlotConfigurationResponse] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AvailableSlot(BaseModel):
    start_time: time
    end_time: time
    price: Decimal
    is_available: bool

class DayAvailability(BaseModel):
    date: date
    day_of_week: DayOfWeek
    is_open: bool
    slots: List[AvailableSlot]

class CourtAvailabilityResponse(BaseModel):
    court_id: int
    venue_id: int
    days: List[DayAvailability]

class UnavailabilityCreate(BaseModel):
    start_datetime: datetime
    end_datetime: datetime
    reason: UnavailabilityReason
    description: Optional[str] = Field(None, max_length=500)
    is_recurring: bool = False
    recurring_days: List[DayOfWeek] = []

    @model_validator(mode="after")
    def validate_window(self):
        if self.end_datetime <= self.start_datetime:
            raise ValueError("End must be after start")
        if self.is_recurring:
            if not self.recurring_days:
                raise ValueError("Recurring unavailability needs at least one day")
            if self.end_datetime.time() <= self.start_datetime.time():
                raise ValueError("Recurring unavailability must start and end on the same day")
        return self

class UnavailabilityResponse(BaseModel):
    id: int
    court_id: int
    venue_id: int
    start_datetime: datetime
    end_datetime: datetime
    reason: str
    description: Optional[str] = None
    is_recurring: bool
    recurring_days: List[str] = []
    created_by: Optional[int] = None

    class Config:
        from_attributes = True
