import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import Optional

from quickcourt.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from quickcourt.core.security import require_roles
from quickcourt.database import get_db
from quickcourt.models.enums import UserRole, VenueStatus
from quickcourt.models.user import User
from quickcourt.routers.bookings import to_list_response as to_booking_list
from quickcourt.routers.venues import to_list_response as to_venue_list
from quickcourt.schemas.admin import AdminSettingsResponse, AdminSettingsUpdate
from quickcourt.schemas.booking import BookingListResponse
from quickcourt.schemas.court import CourtResponse
from quickcourt.schemas.user import RoleUpdate, UserListResponse, UserResponse
from quickcourt.schemas.venue import VenueActiveUpdate, VenueListResponse, VenueReject, VenueResponse
from quickcourt.services import booking_service, court_service, dashboard, platform_settings, venue_service
from quickcourt.services.pagination import paginate_query

logger = logging.getLogger(__name__)

# Every route in this module is admin only
router = APIRouter(dependencies=[Depends(require_roles(UserRole.ADMIN))])

current_admin = require_roles(UserRole.ADMIN)

@router.get("/stats")
def get_stats(db: Session = Depends(get_db)):
    return dashboard.admin_stats(db)

@router.get("/venues", response_model=VenueListResponse)
def list_venues(
    status: Optional[VenueStatus] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    result = venue_service.list_admin_venues(db, status.value if status else None, search, page, limit)
    return to_venue_list(result)

@router.get("/venues/{venue_id}")
def get_venue(venue_id: int, db: Session = Depends(get_db)):
    venue = venue_service.get_venue_or_404(db, venue_id)
    courts = court_service.list_courts(db, venue.id, include_inactive=True)
    return {
        "venue": VenueResponse.model_validate(venue),
        "owner": UserResponse.model_validate(venue.owner),
        "courts": [CourtResponse.model_validate(c) for c in courts],
    }

@router.put("/venues/{venue_id}/approve", response_model=VenueResponse)
def approve_venue(venue_id: int, db: Session = Depends(get_db)):
    return venue_service.approve_venue(db, venue_id)

@router.put("/venues/{venue_id}/reject", response_model=VenueResponse)
def reject_venue(venue_id: int, payload: VenueReject, db: Session = Depends(get_db)):
    return venue_service.reject_venue(db, venue_id, payload.reason)

@router.put("/venues/{venue_id}/toggle-active", response_model=VenueResponse)
def toggle_venue_active(venue_id: int, payload: VenueActiveUpdate, db: Session = Depends(get_db)):
    return venue_service.set_venue_active(db, venue_id, payload.is_active)

@router.get("/users", response_model=UserListResponse)
def list_users(
    role: Optional[UserRole] = None,
    status: Optional[str] = Query(None, pattern="^(active|inactive)$"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    query = db.query(User)
    if role:
        query = query.filter(User.role == role.value)
    if status:
        query = query.filter(User.is_active.is_(status == "active"))
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            User.email.ilike(pattern),
            User.first_name.ilike(pattern),
            User.last_name.ilike(pattern),
        ))
    result = paginate_query(query.order_by(User.created_at.desc(), User.id.desc()), page, limit)
    return UserListResponse(
        users=result["items"],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        total_pages=result["total_pages"],
    )

def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user

@router.put("/users/{user_id}/toggle-status", response_model=UserResponse)
def toggle_user_status(user_id: int, db: Session = Depends(get_db)):
    user = _get_user(db, user_id)
    if user.role == UserRole.ADMIN.value:
        raise AuthorizationError("Admin accounts cannot be deactivated")
    user.is_active = not user.is_active
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.id} {'activated' if user.is_active else 'deactivated'}")
    return user

@router.put("/users/{user_id}/role", response_model=UserResponse)
def change_user_role(
    user_id: int,
    payload: RoleUpdate,
    current_user: User = Depends(current_admin),
    db: Session = Depends(get_db),
):
    user = _get_user(db, user_id)
    if user.id == current_user.id:
        raise ConflictError("Admins cannot change their own role")
    user.role = payload.role.value
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.id} role changed to {user.role}")
    return user

@router.get("/users/{user_id}/bookings", response_model=BookingListResponse)
def user_booking_history(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return to_booking_list(booking_service.list_user_booking_history(db, user_id, page, limit))

@router.get("/settings", response_model=AdminSettingsResponse)
def get_settings(db: Session = Depends(get_db)):
    return platform_settings.get_admin_settings(db)

@router.put("/settings", response_model=AdminSettingsResponse)
def update_settings(payload: AdminSettingsUpdate, db: Session = Depends(get_db)):
    return platform_settings.update_admin_settings(db, payload)
