import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from quickcourt.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from quickcourt.models.booking import Booking
from quickcourt.models.court import Court, CourtSlotConfiguration
from quickcourt.models.court_unavailability import CourtUnavailability
from quickcourt.models.enums import BookingStatus, DayOfWeek
from quickcourt.models.user import User
from quickcourt.models.venue import Venue
from quickcourt.schemas.court import CourtCreate, CourtUpdate, UnavailabilityCreate
from quickcourt.services import slots
from quickcourt.services.venue_service import can_manage_venue, get_venue_or_404

logger = logging.getLogger(__name__)

MAX_AVAILABILITY_DAYS = 7


def ensure_can_manage(venue: Venue, user: User):
    if not can_manage_venue(venue, user):
        raise AuthorizationError("Only the venue owner or an admin can manage its courts")


def get_court_or_404(db: Session, court_id: int, venue_id: Optional[int] = None) -> Court:
    query = db.query(Court).filter(Court.id == court_id)
    if venue_id is not None:
        query = query.filter(Court.venue_id == venue_id)
    court = query.first()
    if not court:
        raise NotFoundError("Court not found")
    return court


def _ensure_sport_offered(venue: Venue, sport_type: str):
    if sport_type not in (venue.sports or []):
        raise ValidationError(f"Sport '{sport_type}' is not offered at this venue")


def _build_configurations(configs, default_price) -> List[CourtSlotConfiguration]:
    if configs is None:
        rows = slots.default_slot_configurations(default_price)
    else:
        rows = [c.model_dump() for c in configs]
    return [
        CourtSlotConfiguration(
            day_of_week=getattr(row["day_of_week"], "value", row["day_of_week"]),
            is_open=row["is_open"],
            start_time=row["start_time"],
            slot_duration=row["slot_duration"],
            number_of_slots=row["number_of_slots"],
            price=row["price"],
        )
        for row in rows
    ]


def _replace_configurations(court: Court, configs):
    # Rows are updated in place: (court_id, day_of_week) is unique and the
    # flush would insert the new rows before deleting the old ones
    existing = {c.day_of_week: c for c in court.slot_configurations}
    for new in _build_configurations(configs, court.default_price):
        current = existing.get(new.day_of_week)
        if current is None:
            court.slot_configurations.append(new)
            continue
        current.is_open = new.is_open
        current.start_time = new.start_time
        current.slot_duration = new.slot_duration
        current.number_of_slots = new.number_of_slots
        current.price = new.price


def list_courts(db: Session, venue_id: int, include_inactive: bool = False) -> List[Court]:
    query = db.query(Court).filter(Court.venue_id == venue_id)
    if not include_inactive:
        query = query.filter(Court.is_active.is_(True))
    return query.order_by(Court.id).all()


def create_court(db: Session, actor: User, venue_id: int, payload: CourtCreate) -> Court:
    venue = get_venue_or_404(db, venue_id)
    ensure_can_manage(venue, actor)
    _ensure_sport_offered(venue, payload.sport_type.value)

    court = Court(
        venue_id=venue.id,
        name=payload.name,
        sport_type=payload.sport_type.value,
        description=payload.description,
        default_price=payload.default_price,
    )
    court.slot_configurations = _build_configurations(payload.slot_configurations, payload.default_price)
    db.add(court)
    db.commit()
    db.refresh(court)
    logger.info(f"Court {court.id} created for venue {venue.id}")
    return court


def update_court(db: Session, actor: User, venue_id: int, court_id: int, payload: CourtUpdate) -> Court:
    venue = get_venue_or_404(db, venue_id)
    ensure_can_manage(venue, actor)
    court = get_court_or_404(db, court_id, venue_id)

    data = payload.model_dump(exclude_unset=True)
    if data.get("sport_type") is not None:
        _ensure_sport_offered(venue, data["sport_type"].value)
        data["sport_type"] = data["sport_type"].value
    if "slot_configurations" in data:
        data.pop("slot_configurations")
        if payload.slot_configurations is not None:
            _replace_configurations(court, payload.slot_configurations)

    for field, value in data.items():
        if value is not None:
            setattr(court, field, value)

    db.commit()
    db.refresh(court)
    return court


def delete_court(db: Session, actor: User, venue_id: int, court_id: int):
    venue = get_venue_or_404(db, venue_id)
    ensure_can_manage(venue, actor)
    court = get_court_or_404(db, court_id, venue_id)
    court.is_active = False
    db.commit()
    logger.info(f"Court {court.id} deactivated")


def bookings_on(db: Session, court_id: int, on: date) -> List[Booking]:
    return db.query(Booking).filter(
        Booking.court_id == court_id,
        Booking.booking_date == on,
        Booking.status != BookingStatus.CANCELLED.value,
    ).all()


def day_availability(db: Session, court: Court, on: date) -> dict:
    day = DayOfWeek.from_date(on)
    config = court.config_for(day)
    day_slots = slots.day_slots(config)
    if day_slots:
        slots.mark_availability(day_slots, on, bookings_on(db, court.id, on), court.unavailabilities)
    return {
        "date": on,
        "day_of_week": day,
        "is_open": bool(config and config.is_open),
        "slots": day_slots,
    }


def get_availability(db: Session, court_id: int, start_date: Optional[date] = None, days: int = 3) -> dict:
    court = get_court_or_404(db, court_id)
    if not court.is_active or not court.venue.is_bookable:
        raise NotFoundError("Court not found")
    if days < 1 or days > MAX_AVAILABILITY_DAYS:
        raise ValidationError(f"days must be between 1 and {MAX_AVAILABILITY_DAYS}")

    start_date = start_date or datetime.now().date()
    return {
        "court_id": court.id,
        "venue_id": court.venue_id,
        "days": [day_availability(db, court, on) for on in slots.date_range(start_date, days)],
    }


def add_unavailability(
    db: Session, actor: User, venue_id: int, court_id: int, payload: UnavailabilityCreate
) -> CourtUnavailability:
    venue = get_venue_or_404(db, venue_id)
    ensure_can_manage(venue, actor)
    court = get_court_or_404(db, court_id, venue_id)

    block = CourtUnavailability(
        court_id=court.id,
        venue_id=venue.id,
        start_datetime=payload.start_datetime,
        end_datetime=payload.end_datetime,
        reason=payload.reason.value,
        description=payload.description,
        created_by=actor.id,
        is_recurring=payload.is_recurring,
        recurring_days=[d.value for d in payload.recurring_days],
    )
    db.add(block)
    db.commit()
    db.refresh(block)
    logger.info(f"Unavailability {block.id} added to court {court.id} ({block.reason})")
    return block


def delete_unavailability(db: Session, actor: User, venue_id: int, court_id: int, unavailability_id: int):
    venue = get_venue_or_404(db, venue_id)
    ensure_can_manage(venue, actor)
    block = db.query(CourtUnavailability).filter(
        CourtUnavailability.id == unavailability_id,
        CourtUnavailability.court_id == court_id,
        CourtUnavailability.venue_id == venue_id,
    ).first()
    if not block:
        raise NotFoundError("Unavailability not found")
    db.delete(block)
    db.commit()
