"""
Booking lifecycle: reservation with an atomic slot-conflict check,
cancellation, and lazy completion of bookings whose time has passed.

Every function takes an optional ``now`` so callers and tests control the
clock. Datetimes are naive and in the venue's local time.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from quickcourt.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from quickcourt.models.booking import Booking, BookingSlot
from quickcourt.models.court import Court
from quickcourt.models.enums import BookingStatus, DayOfWeek, UserRole, MAX_SLOTS_PER_BOOKING
from quickcourt.models.user import User
from quickcourt.models.venue import Venue
from quickcourt.schemas.booking import BookingCreate
from quickcourt.services import slots
from quickcourt.services.pagination import paginate_query
from quickcourt.services.platform_settings import get_admin_settings
from quickcourt.services.venue_service import get_venue_or_404, can_manage_venue

logger = logging.getLogger(__name__)

TIME_FILTERS = ("upcoming", "past", "today")


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now()


def complete_elapsed_bookings(db: Session, now: Optional[datetime] = None) -> int:
    """Marks every confirmed booking whose end has passed as completed."""
    now = _now(now)
    candidates = db.query(Booking).filter(
        Booking.status == BookingStatus.CONFIRMED.value,
        Booking.booking_date <= now.date(),
    ).all()

    completed = 0
    for booking in candidates:
        if booking.end_datetime <= now:
            booking.complete(now)
            completed += 1

    if completed:
        db.commit()
        logger.info(f"Marked {completed} elapsed bookings as completed")
    return completed


def find_overlapping_bookings(db: Session, court_id: int, booking_date, start_time, end_time) -> List[Booking]:
    return db.query(Booking).filter(
        Booking.court_id == court_id,
        Booking.booking_date == booking_date,
        Booking.status != BookingStatus.CANCELLED.value,
        Booking.start_time < end_time,
        Booking.end_time > start_time,
    ).all()


def create_booking(db: Session, user: User, payload: BookingCreate, now: Optional[datetime] = None) -> Booking:
    now = _now(now)

    if user.role != UserRole.USER.value:
        raise AuthorizationError("Only players can book courts")
    if not 1 <= payload.number_of_slots <= MAX_SLOTS_PER_BOOKING:
        raise ValidationError(f"Number of slots must be between 1 and {MAX_SLOTS_PER_BOOKING}")

    court = db.query(Court).filter(Court.id == payload.court_id).first()
    if not court or not court.is_active:
        raise NotFoundError("Court not found")
    venue = court.venue
    if not venue.is_bookable:
        raise ValidationError("Venue is not available for booking")

    platform = get_admin_settings(db)
    today = now.date()
    if payload.booking_date < today:
        raise ValidationError("Cannot book a date in the past")
    if payload.booking_date > today + timedelta(days=platform.max_booking_advance_days):
        raise ValidationError(
            f"Bookings can be made at most {platform.max_booking_advance_days} days in advance"
        )

    config = court.config_for(DayOfWeek.from_date(payload.booking_date))
    if config is None or not config.is_open:
        raise ValidationError("Court is closed on this day")
    if not slots.is_slot_boundary(config, payload.start_time):
        raise ValidationError("Start time does not match the court's slot schedule")

    end_time = slots.booking_end(payload.start_time, payload.number_of_slots, config.slot_duration)
    if end_time is None or not slots.within_operating_hours(config, payload.start_time, end_time):
        raise ValidationError("Booking time is outside operating hours")
    if payload.end_time is not None and payload.end_time != end_time:
        raise ValidationError("Invalid booking duration")

    start_at = slots.combine(payload.booking_date, payload.start_time)
    if start_at <= now + timedelta(hours=platform.min_booking_advance_hours):
        raise ValidationError("Booking must start in the future")

    for block in court.unavailabilities:
        if block.blocks(payload.booking_date, payload.start_time, end_time):
            raise ConflictError("Court is unavailable during this time")

    if find_overlapping_bookings(db, court.id, payload.booking_date, payload.start_time, end_time):
        raise ConflictError("This time slot is already booked")

    booking = Booking(
        user_id=user.id,
        venue_id=venue.id,
        court_id=court.id,
        booking_date=payload.booking_date,
        start_time=payload.start_time,
        end_time=end_time,
        number_of_slots=payload.number_of_slots,
        slot_duration=config.slot_duration,
        total_amount=Decimal(config.price) * payload.number_of_slots,
        status=BookingStatus.CONFIRMED.value,
        payment_simulated=True,
    )
    booking.slots = [
        BookingSlot(court_id=court.id, booking_date=payload.booking_date, slot_start=cell)
        for cell in slots.occupied_cells(payload.start_time, end_time)
    ]
    db.add(booking)
    try:
        db.commit()
    except IntegrityError:
        # Another request took one of the cells between the check and the insert
        db.rollback()
        logger.info(
            f"Slot conflict on court {court.id} {payload.booking_date} {payload.start_time}-{end_time}"
        )
        raise ConflictError("This time slot is already booked")

    db.refresh(booking)
    logger.info(
        f"Booking {booking.id} confirmed: court {court.id} on {booking.booking_date} "
        f"{booking.start_time}-{booking.end_time} for user {user.id}"
    )
    return booking


def get_booking_or_404(db: Session, booking_id: int) -> Booking:
    booking = db.query(Booking).options(
        joinedload(Booking.venue),
        joinedload(Booking.court),
        joinedload(Booking.user),
    ).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def _ensure_can_view(booking: Booking, actor: User):
    if actor.role == UserRole.ADMIN.value:
        return
    if booking.user_id == actor.id or booking.venue.owner_id == actor.id:
        return
    raise AuthorizationError("You do not have access to this booking")


def get_booking_for(db: Session, actor: User, booking_id: int, now: Optional[datetime] = None) -> Booking:
    complete_elapsed_bookings(db, now)
    booking = get_booking_or_404(db, booking_id)
    _ensure_can_view(booking, actor)
    return booking


def cancel_booking(
    db: Session,
    actor: User,
    booking_id: int,
    reason: Optional[str],
    now: Optional[datetime] = None,
) -> Booking:
    now = _now(now)
    complete_elapsed_bookings(db, now)
    booking = get_booking_or_404(db, booking_id)

    if booking.user_id != actor.id and booking.venue.owner_id != actor.id:
        raise AuthorizationError("Only the booker or the venue owner can cancel this booking")
    if booking.status != BookingStatus.CONFIRMED.value:
        raise ConflictError(f"Cannot cancel a booking that is {booking.status}")
    if not reason or not reason.strip():
        raise ValidationError("A cancellation reason is required")

    platform = get_admin_settings(db)
    cutoff = booking.start_datetime - timedelta(hours=platform.cancellation_min_hours)
    if now >= cutoff:
        if platform.cancellation_min_hours:
            raise ConflictError(
                f"Bookings can only be cancelled up to {platform.cancellation_min_hours} hours before they start"
            )
        raise ConflictError("Bookings can only be cancelled before they start")

    booking.cancel(reason.strip(), now)
    db.commit()
    db.refresh(booking)
    logger.info(f"Booking {booking.id} cancelled by user {actor.id}")
    return booking


def _apply_time_filter(query, time_filter: Optional[str], now: datetime):
    if not time_filter:
        return query
    if time_filter not in TIME_FILTERS:
        raise ValidationError(f"time_filter must be one of {', '.join(TIME_FILTERS)}")

    today = now.date()
    current = now.time()
    if time_filter == "today":
        return query.filter(Booking.booking_date == today)
    if time_filter == "upcoming":
        return query.filter(
            Booking.status == BookingStatus.CONFIRMED.value,
            or_(
                Booking.booking_date > today,
                and_(Booking.booking_date == today, Booking.start_time > current),
            ),
        )
    return query.filter(
        or_(
            Booking.booking_date < today,
            and_(Booking.booking_date == today, Booking.end_time <= current),
        )
    )


def _with_relations(query):
    return query.options(
        joinedload(Booking.venue),
        joinedload(Booking.court),
        joinedload(Booking.user),
    )


def list_user_bookings(
    db: Session,
    user: User,
    status: Optional[str] = None,
    time_filter: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    now: Optional[datetime] = None,
) -> dict:
    now = _now(now)
    complete_elapsed_bookings(db, now)
    query = _with_relations(db.query(Booking)).filter(Booking.user_id == user.id)
    if status:
        query = query.filter(Booking.status == status)
    query = _apply_time_filter(query, time_filter, now)
    query = query.order_by(Booking.booking_date.desc(), Booking.start_time.desc())
    return paginate_query(query, page, limit)


def list_venue_bookings(
    db: Session,
    actor: User,
    venue_id: int,
    court_id: Optional[int] = None,
    booking_date=None,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
    now: Optional[datetime] = None,
) -> dict:
    venue = get_venue_or_404(db, venue_id)
    if not can_manage_venue(venue, actor):
        raise AuthorizationError("Only the venue owner or an admin can view its bookings")

    complete_elapsed_bookings(db, now)
    query = _with_relations(db.query(Booking)).filter(Booking.venue_id == venue.id)
    if court_id:
        query = query.filter(Booking.court_id == court_id)
    if booking_date:
        query = query.filter(Booking.booking_date == booking_date)
    if status:
        query = query.filter(Booking.status == status)
    query = query.order_by(Booking.booking_date.desc(), Booking.start_time.desc())
    return paginate_query(query, page, limit)


def list_owner_bookings(
    db: Session,
    owner: User,
    status: Optional[str] = None,
    time_filter: Optional[str] = None,
    venue_id: Optional[int] = None,
    page: int = 1,
    limit: int = 20,
    now: Optional[datetime] = None,
) -> dict:
    now = _now(now)
    complete_elapsed_bookings(db, now)
    query = _with_relations(db.query(Booking)).join(Venue, Booking.venue_id == Venue.id).filter(
        Venue.owner_id == owner.id
    )
    if venue_id:
        query = query.filter(Booking.venue_id == venue_id)
    if status:
        query = query.filter(Booking.status == status)
    query = _apply_time_filter(query, time_filter, now)
    query = query.order_by(Booking.booking_date.desc(), Booking.start_time.desc())
    return paginate_query(query, page, limit)


def list_user_booking_history(db: Session, user_id: int, page: int = 1, limit: int = 10) -> dict:
    target = db.query(User).filter(User.id == user_id).first()
    if not target:
        raise NotFoundError("User not found")
    complete_elapsed_bookings(db)
    query = _with_relations(db.query(Booking)).filter(Booking.user_id == target.id)
    query = query.order_by(Booking.booking_date.desc(), Booking.start_time.desc())
    return paginate_query(query, page, limit)
