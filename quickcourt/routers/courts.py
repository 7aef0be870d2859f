from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from quickcourt.core.security import get_current_user_optional, require_roles
from quickcourt.database import get_db
from quickcourt.models.enums import UserRole
from quickcourt.models.user import User
from quickcourt.schemas.court import (
    CourtAvailabilityResponse,
    CourtCreate,
    CourtResponse,
    CourtUpdate,
    UnavailabilityCreate,
    UnavailabilityResponse,
)
from quickcourt.services import court_service, venue_service
from quickcourt.services.court_service import MAX_AVAILABILITY_DAYS

router = APIRouter()

manage_courts = require_roles(UserRole.FACILITY_OWNER, UserRole.ADMIN)

@router.get("/venues/{venue_id}/courts", response_model=List[CourtResponse])
def list_courts(
    venue_id: int,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    venue = venue_service.get_visible_venue(db, venue_id, current_user)
    include_inactive = venue_service.can_manage_venue(venue, current_user)
    return court_service.list_courts(db, venue.id, include_inactive=include_inactive)

@router.post("/venues/{venue_id}/courts", response_model=CourtResponse, status_code=status.HTTP_201_CREATED)
def create_court(
    venue_id: int,
    payload: CourtCreate,
    current_user: User = Depends(manage_courts),
    db: Session = Depends(get_db),
):
    return court_service.create_court(db, current_user, venue_id, payload)

@router.get("/venues/{venue_id}/courts/{court_id}", response_model=CourtResponse)
def get_court(
    venue_id: int,
    court_id: int,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    venue_service.get_visible_venue(db, venue_id, current_user)
    return court_service.get_court_or_404(db, court_id, venue_id)

@router.put("/venues/{venue_id}/courts/{court_id}", response_model=CourtResponse)
def update_court(
    venue_id: int,
    court_id: int,
    payload: CourtUpdate,
    current_user: User = Depends(manage_courts),
    db: Session = Depends(get_db),
):
    return court_service.update_court(db, current_user, venue_id, court_id, payload)

@router.delete("/venues/{venue_id}/courts/{court_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_court(
    venue_id: int,
    court_id: int,
    current_user: User = Depends(manage_courts),
    db: Session = Depends(get_db),
):
    court_service.delete_court(db, current_user, venue_id, court_id)
    return None

@router.post(
    "/venues/{venue_id}/courts/{court_id}/unavailability",
    response_model=UnavailabilityResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_unavailability(
    venue_id: int,
    court_id: int,
    payload: UnavailabilityCreate,
    current_user: User = Depends(manage_courts),
    db: Session = Depends(get_db),
):
    return court_service.add_unavailability(db, current_user, venue_id, court_id, payload)

@router.delete(
    "/venues/{venue_id}/courts/{court_id}/unavailability/{unavailability_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_unavailability(
    venue_id: int,
    court_id: int,
    unavailability_id: int,
    current_user: User = Depends(manage_courts),
    db: Session = Depends(get_db),
):
    court_service.delete_unavailability(db, current_user, venue_id, court_id, unavailability_id)
    return None

@router.get("/courts/{court_id}/availability", response_model=CourtAvailabilityResponse)
def get_availability(
    court_id: int,
    start_date: Optional[date] = None,
    days: int = Query(3, ge=1, le=MAX_AVAILABILITY_DAYS),
    db: Session = Depends(get_db),
):
    """Every configured slot for the requested days, flagged available or not."""
    return court_service.get_availability(db, court_id, start_date, days)
