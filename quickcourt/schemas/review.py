from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import date, datetime, time

from quickcourt.schemas.user import UserSummary

class ReviewCreate(BaseModel):
    venue_id: int
    booking_id: int
    # Range is checked by the review service so the error carries a domain message
    rating: int
    comment: str = Field(..., min_length=10, max_length=1000)

class ReviewUpdate(BaseModel):
    rating: Optional[int] = None
    comment: Optional[str] = Field(None, min_length=10, max_length=1000)

class ReviewResponse(BaseModel):
    id: int
    user_id: int
    venue_id: int
    booking_id: int
    rating: int
    comment: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True

class RatingStats(BaseModel):
    average_rating: float
    total_reviews: int
    rating_distribution: Dict[int, int]

class VenueReviewsResponse(BaseModel):
    reviews: List[ReviewResponse]
    stats: RatingStats
    total: int
    page: int
    limit: int
    total_pages: int

class EligibleBooking(BaseModel):
    id: int
    booking_date: date
    start_time: time
    end_time: time
    court_id: int

    class Config:
        from_attributes = True

class CanReviewResponse(BaseModel):
    can_review: bool
    reason: Optional[str] = None
    eligible_bookings: List[EligibleBooking] = []
