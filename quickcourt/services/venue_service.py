import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from quickcourt.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from quickcourt.models.court import Court
from quickcourt.models.enums import UserRole, VenueStatus
from quickcourt.models.user import User
from quickcourt.models.venue import Venue
from quickcourt.schemas.venue import REQUIRED_VENUE_FIELDS, VenueCreate, VenueUpdate
from quickcourt.services.pagination import paginate_list, paginate_query

logger = logging.getLogger(__name__)


def _venue_columns(data: dict) -> dict:
    """Flattens the nested address and serialises enum members for the JSON columns."""
    address = data.pop("address", None)
    if address:
        data.update(address)
    if data.get("sports") is not None:
        data["sports"] = [getattr(s, "value", s) for s in data["sports"]]
    if data.get("venue_type") is not None:
        data["venue_type"] = getattr(data["venue_type"], "value", data["venue_type"])
    return data


def get_venue_or_404(db: Session, venue_id: int) -> Venue:
    venue = db.query(Venue).filter(Venue.id == venue_id).first()
    if not venue:
        raise NotFoundError("Venue not found")
    return venue


def can_manage_venue(venue: Venue, user: Optional[User]) -> bool:
    if user is None:
        return False
    return user.role == UserRole.ADMIN.value or venue.owner_id == user.id


def ensure_owner(venue: Venue, user: User):
    if venue.owner_id != user.id:
        raise AuthorizationError("You do not own this venue")


def get_visible_venue(db: Session, venue_id: int, viewer: Optional[User]) -> Venue:
    """
    Approved, active venues are public. Everything else is only visible to
    its owner and to admins, and looks missing to anyone else.
    """
    venue = get_venue_or_404(db, venue_id)
    if can_manage_venue(venue, viewer):
        return venue
    if not venue.is_bookable:
        raise NotFoundError("Venue not found")
    return venue


def create_venue(db: Session, owner: User, payload: VenueCreate) -> Venue:
    venue = Venue(
        owner_id=owner.id,
        status=VenueStatus.PENDING.value,
        **_venue_columns(payload.model_dump(mode="json")),
    )
    db.add(venue)
    db.commit()
    db.refresh(venue)
    logger.info(f"Venue {venue.id} submitted for approval by user {owner.id}")
    return venue


def update_venue(db: Session, owner: User, venue_id: int, payload: VenueUpdate) -> Venue:
    venue = get_venue_or_404(db, venue_id)
    ensure_owner(venue, owner)
    if not venue.is_active:
        raise NotFoundError("Venue not found")
    if venue.status != VenueStatus.PENDING.value:
        raise ConflictError(f"Venue can only be edited while pending (current status: {venue.status})")

    for field, value in _venue_columns(payload.model_dump(mode="json", exclude_unset=True)).items():
        if value is None and field in REQUIRED_VENUE_FIELDS:
            continue
        setattr(venue, field, value)

    db.commit()
    db.refresh(venue)
    return venue


def delete_venue(db: Session, owner: User, venue_id: int):
    venue = get_venue_or_404(db, venue_id)
    ensure_owner(venue, owner)
    venue.is_active = False
    db.commit()
    logger.info(f"Venue {venue.id} deactivated by its owner")


def approve_venue(db: Session, venue_id: int) -> Venue:
    venue = get_venue_or_404(db, venue_id)
    venue.approve()
    db.commit()
    db.refresh(venue)
    logger.info(f"Venue {venue.id} approved")
    return venue


def reject_venue(db: Session, venue_id: int, reason: str) -> Venue:
    venue = get_venue_or_404(db, venue_id)
    venue.reject(reason)
    db.commit()
    db.refresh(venue)
    logger.info(f"Venue {venue.id} rejected: {venue.rejection_reason}")
    return venue


def set_venue_active(db: Session, venue_id: int, is_active: bool) -> Venue:
    venue = get_venue_or_404(db, venue_id)
    if venue.status != VenueStatus.APPROVED.value:
        raise ConflictError("Only approved venues can be activated or deactivated")
    venue.is_active = is_active
    db.commit()
    db.refresh(venue)
    logger.info(f"Venue {venue.id} {'reactivated' if is_active else 'deactivated'}")
    return venue


def court_summaries(db: Session, venue_ids: List[int]) -> dict:
    """venue_id -> (starting price, number of active courts)"""
    if not venue_ids:
        return {}
    rows = db.query(
        Court.venue_id,
        func.min(Court.default_price),
        func.count(Court.id),
    ).filter(
        Court.venue_id.in_(venue_ids),
        Court.is_active.is_(True),
    ).group_by(Court.venue_id).all()
    return {venue_id: (Decimal(price) if price is not None else None, count) for venue_id, price, count in rows}


def with_listing_info(db: Session, venues: List[Venue]) -> List[dict]:
    summaries = court_summaries(db, [v.id for v in venues])
    items = []
    for venue in venues:
        starting_price, court_count = summaries.get(venue.id, (None, 0))
        items.append({"venue": venue, "starting_price": starting_price, "court_count": court_count})
    return items


def public_venue_listing(
    db: Session,
    search: Optional[str] = None,
    sports: Optional[List[str]] = None,
    city: Optional[str] = None,
    venue_type: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
) -> List[dict]:
    """Approved, active venues with listing info, newest first."""
    query = db.query(Venue).filter(
        Venue.status == VenueStatus.APPROVED.value,
        Venue.is_active.is_(True),
    )
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Venue.name.ilike(pattern), Venue.description.ilike(pattern)))
    if city:
        query = query.filter(Venue.city.ilike(f"%{city}%"))
    if venue_type:
        query = query.filter(Venue.venue_type == venue_type)

    venues = query.order_by(Venue.created_at.desc(), Venue.id.desc()).all()

    # Sports live in a JSON column and prices in courts; both are filtered here
    if sports:
        wanted = set(sports)
        venues = [v for v in venues if wanted.intersection(v.sports or [])]

    items = with_listing_info(db, venues)
    if min_price is not None:
        items = [i for i in items if i["starting_price"] is not None and i["starting_price"] >= min_price]
    if max_price is not None:
        items = [i for i in items if i["starting_price"] is not None and i["starting_price"] <= max_price]
    return items


def list_public_venues(
    db: Session,
    search: Optional[str] = None,
    sports: Optional[List[str]] = None,
    city: Optional[str] = None,
    venue_type: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    page: int = 1,
    limit: int = 12,
) -> dict:
    items = public_venue_listing(db, search, sports, city, venue_type, min_price, max_price)
    return paginate_list(items, page, limit)


def list_owner_venues(db: Session, owner: User) -> List[dict]:
    venues = db.query(Venue).filter(
        Venue.owner_id == owner.id,
        Venue.is_active.is_(True),
    ).order_by(Venue.created_at.desc(), Venue.id.desc()).all()
    return with_listing_info(db, venues)


def list_admin_venues(
    db: Session,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    query = db.query(Venue)
    if status:
        query = query.filter(Venue.status == status)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Venue.name.ilike(pattern), Venue.city.ilike(pattern)))
    result = paginate_query(query.order_by(Venue.created_at.desc(), Venue.id.desc()), page, limit)
    result["items"] = with_listing_info(db, result["items"])
    return result
