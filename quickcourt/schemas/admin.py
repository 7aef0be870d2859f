from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime

class AdminSettingsResponse(BaseModel):
    commission_percentage: Decimal
    min_booking_advance_hours: int
    max_booking_advance_days: int
    cancellation_min_hours: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AdminSettingsUpdate(BaseModel):
    commission_percentage: Optional[Decimal] = Field(None, ge=0, le=100, decimal_places=2)
    min_booking_advance_hours: Optional[int] = Field(None, ge=0, le=168)
    max_booking_advance_days: Optional[int] = Field(None, ge=1, le=365)
    cancellation_min_hours: Optional[int] = Field(None, ge=0, le=168)
