from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from decimal import Decimal

from quickcourt.core.security import get_current_user_optional, require_roles
from quickcourt.database import get_db
from quickcourt.models.enums import SportType, UserRole, VenueType
from quickcourt.models.user import User
from quickcourt.schemas.venue import (
    VenueCreate,
    VenueListItem,
    VenueListResponse,
    VenueResponse,
    VenueUpdate,
)
from quickcourt.services import venue_service

router = APIRouter()

def to_list_item(entry: dict) -> VenueListItem:
    base = VenueResponse.model_validate(entry["venue"]).model_dump()
    return VenueListItem(**base, starting_price=entry["starting_price"], court_count=entry["court_count"])

def to_list_response(result: dict) -> VenueListResponse:
    return VenueListResponse(
        venues=[to_list_item(entry) for entry in result["items"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        total_pages=result["total_pages"],
    )

@router.get("", response_model=VenueListResponse)
def list_venues(
    search: Optional[str] = None,
    sports: Optional[List[SportType]] = Query(None),
    city: Optional[str] = None,
    venue_type: Optional[VenueType] = None,
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Public catalogue of approved venues."""
    result = venue_service.list_public_venues(
        db,
        search=search,
        sports=[s.value for s in sports] if sports else None,
        city=city,
        venue_type=venue_type.value if venue_type else None,
        min_price=min_price,
        max_price=max_price,
        page=page,
        limit=limit,
    )
    return to_list_response(result)

@router.get("/approved", response_model=List[VenueListItem])
def list_approved_venues(db: Session = Depends(get_db)):
    # Unpaginated: every approved, active venue
    return [to_list_item(entry) for entry in venue_service.public_venue_listing(db)]

@router.get("/my", response_model=List[VenueListItem])
def list_my_venues(
    current_user: User = Depends(require_roles(UserRole.FACILITY_OWNER)),
    db: Session = Depends(get_db),
):
    return [to_list_item(entry) for entry in venue_service.list_owner_venues(db, current_user)]

@router.post("", response_model=VenueResponse, status_code=status.HTTP_201_CREATED)
def create_venue(
    payload: VenueCreate,
    current_user: User = Depends(require_roles(UserRole.FACILITY_OWNER)),
    db: Session = Depends(get_db),
):
    return venue_service.create_venue(db, current_user, payload)

@router.get("/{venue_id}", response_model=VenueResponse)
def get_venue(
    venue_id: int,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    return venue_service.get_visible_venue(db, venue_id, current_user)

@router.put("/{venue_id}", response_model=VenueResponse)
def update_venue(
    venue_id: int,
    payload: VenueUpdate,
    current_user: User = Depends(require_roles(UserRole.FACILITY_OWNER)),
    db: Session = Depends(get_db),
):
    return venue_service.update_venue(db, current_user, venue_id, payload)

@router.delete("/{venue_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_venue(
    venue_id: int,
    current_user: User = Depends(require_roles(UserRole.FACILITY_OWNER)),
    db: Session = Depends(get_db),
):
    venue_service.delete_venue(db, current_user, venue_id)
    return None
