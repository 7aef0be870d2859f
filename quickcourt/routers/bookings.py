from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from quickcourt.core.security import get_current_user, require_roles
from quickcourt.database import get_db
from quickcourt.models.enums import BookingStatus, UserRole
from quickcourt.models.user import User
from quickcourt.schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    UserBookingStats,
)
from quickcourt.services import booking_service, dashboard

router = APIRouter()

def to_list_response(result: dict) -> BookingListResponse:
    return BookingListResponse(
        bookings=result["items"],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        total_pages=result["total_pages"],
    )

@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Book one to four consecutive slots of a court.

    Payment is simulated: the booking is confirmed immediately.
    """
    booking = booking_service.create_booking(db, current_user, payload)
    return booking_service.get_booking_or_404(db, booking.id)

@router.get("/user", response_model=BookingListResponse)
def list_my_bookings(
    status: Optional[BookingStatus] = None,
    time_filter: Optional[str] = Query(None, pattern="^(upcoming|past|today)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = booking_service.list_user_bookings(
        db, current_user, status.value if status else None, time_filter, page, limit
    )
    return to_list_response(result)

@router.get("/user/stats", response_model=UserBookingStats)
def my_booking_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return dashboard.user_stats(db, current_user)

@router.get("/owner", response_model=BookingListResponse)
def list_owner_bookings(
    status: Optional[BookingStatus] = None,
    time_filter: Optional[str] = Query(None, pattern="^(upcoming|past|today)$"),
    venue_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_roles(UserRole.FACILITY_OWNER)),
    db: Session = Depends(get_db),
):
    result = booking_service.list_owner_bookings(
        db, current_user, status.value if status else None, time_filter, venue_id, page, limit
    )
    return to_list_response(result)

@router.get("/owner/stats")
def owner_stats(
    current_user: User = Depends(require_roles(UserRole.FACILITY_OWNER)),
    db: Session = Depends(get_db),
):
    return dashboard.owner_stats(db, current_user)

@router.get("/owner/charts")
def owner_charts(
    current_user: User = Depends(require_roles(UserRole.FACILITY_OWNER)),
    db: Session = Depends(get_db),
):
    return dashboard.owner_charts(db, current_user)

@router.get("/venue/{venue_id}", response_model=BookingListResponse)
def list_venue_bookings(
    venue_id: int,
    court_id: Optional[int] = None,
    booking_date: Optional[date] = None,
    status: Optional[BookingStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_roles(UserRole.FACILITY_OWNER, UserRole.ADMIN)),
    db: Session = Depends(get_db),
):
    result = booking_service.list_venue_bookings(
        db, current_user, venue_id, court_id, booking_date,
        status.value if status else None, page, limit,
    )
    return to_list_response(result)

@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return booking_service.get_booking_for(db, current_user, booking_id)

@router.put("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    payload: BookingCancel,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    booking_service.cancel_booking(db, current_user, booking_id, payload.reason)
    return booking_service.get_booking_or_404(db, booking_id)
