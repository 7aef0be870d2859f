"""
Dashboard aggregation for owners, admins and players.

The bucket builders are pure functions over booking rows so they can be
exercised without a database; the ``*_stats`` / ``*_charts`` functions load
the rows and assemble the response payloads.
"""
import logging
from collections import Counter
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session, joinedload

from quickcourt.models.booking import Booking
from quickcourt.models.court import Court
from quickcourt.models.enums import BookingStatus, UserRole, VenueStatus
from quickcourt.models.user import User
from quickcourt.models.venue import Venue
from quickcourt.services.booking_service import complete_elapsed_bookings
from quickcourt.services.platform_settings import get_admin_settings

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
DAILY_WINDOW_DAYS = 30
WEEKLY_WINDOW_WEEKS = 12
MONTHLY_WINDOW_MONTHS = 12
RECENT_BOOKINGS = 5

REVENUE_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)


def money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def split_commission(revenue, commission_percentage):
    """(commission, net) for a gross amount; net + commission == revenue exactly."""
    revenue = money(revenue)
    commission = money(revenue * Decimal(commission_percentage) / Decimal(100))
    return commission, revenue - commission


def is_revenue(booking) -> bool:
    return booking.status in REVENUE_STATUSES


def is_active_booking(booking) -> bool:
    return booking.status != BookingStatus.CANCELLED.value


def total_revenue(bookings: Iterable) -> Decimal:
    return money(sum((Decimal(b.total_amount) for b in bookings if is_revenue(b)), Decimal(0)))


# Bucket windows. Every window is contiguous and ends at the current period.

def week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def month_start(day: date) -> date:
    return day.replace(day=1)


def add_months(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def daily_window(today: date, days: int = DAILY_WINDOW_DAYS) -> List[date]:
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def weekly_window(today: date, weeks: int = WEEKLY_WINDOW_WEEKS) -> List[date]:
    current = week_start(today)
    return [current - timedelta(weeks=offset) for offset in range(weeks - 1, -1, -1)]


def monthly_window(today: date, months: int = MONTHLY_WINDOW_MONTHS) -> List[date]:
    current = month_start(today)
    return [add_months(current, -offset) for offset in range(months - 1, -1, -1)]


def _week_label(start: date) -> str:
    year, week, _ = start.isocalendar()
    return f"{year}-W{week:02d}"


def booking_trends(bookings: Iterable, today: date) -> dict:
    active = [b for b in bookings if is_active_booking(b)]
    per_day = Counter(b.booking_date for b in active)
    per_week = Counter(week_start(b.booking_date) for b in active)
    per_month = Counter(month_start(b.booking_date) for b in active)

    return {
        "daily": [
            {"date": day.isoformat(), "bookings": per_day.get(day, 0)}
            for day in daily_window(today)
        ],
        "weekly": [
            {"week": _week_label(start), "date": start.isoformat(), "bookings": per_week.get(start, 0)}
            for start in weekly_window(today)
        ],
        "monthly": [
            {"month": start.strftime("%Y-%m"), "date": start.isoformat(), "bookings": per_month.get(start, 0)}
            for start in monthly_window(today)
        ],
    }


def _earning_point(gross: Decimal, commission_percentage) -> dict:
    _, net = split_commission(gross, commission_percentage)
    return {"gross_earnings": money(gross), "net_earnings": net}


def earnings_series(bookings: Iterable, today: date, commission_percentage) -> dict:
    paid = [b for b in bookings if is_revenue(b)]
    per_day = Counter()
    per_month = Counter()
    for b in paid:
        per_day[b.booking_date] += Decimal(b.total_amount)
        per_month[month_start(b.booking_date)] += Decimal(b.total_amount)

    return {
        "daily": [
            {"date": day.isoformat(), **_earning_point(per_day.get(day, Decimal(0)), commission_percentage)}
            for day in daily_window(today)
        ],
        "monthly": [
            {
                "month": start.strftime("%Y-%m"),
                "date": start.isoformat(),
                **_earning_point(per_month.get(start, Decimal(0)), commission_percentage),
            }
            for start in monthly_window(today)
        ],
    }


def peak_hours(bookings: Iterable) -> List[dict]:
    per_hour = Counter(b.start_time.hour for b in bookings if is_active_booking(b))
    return [{"hour": f"{hour:02d}:00", "bookings": per_hour.get(hour, 0)} for hour in range(24)]


# Loaders

def _owner_bookings(db: Session, owner: User) -> List[Booking]:
    return db.query(Booking).join(Venue, Booking.venue_id == Venue.id).filter(
        Venue.owner_id == owner.id
    ).all()


def owner_stats(db: Session, owner: User, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now()
    today = now.date()
    complete_elapsed_bookings(db, now)
    commission_percentage = get_admin_settings(db).commission_percentage

    venues = db.query(Venue).filter(Venue.owner_id == owner.id, Venue.is_active.is_(True)).all()
    venue_status = Counter(v.status for v in venues)
    active_courts = db.query(Court).join(Venue, Court.venue_id == Venue.id).filter(
        Venue.owner_id == owner.id,
        Venue.is_active.is_(True),
        Court.is_active.is_(True),
    ).count()

    bookings = _owner_bookings(db, owner)
    this_month = [b for b in bookings if month_start(b.booking_date) == month_start(today)]
    revenue = total_revenue(bookings)
    commission, net = split_commission(revenue, commission_percentage)
    month_revenue = total_revenue(this_month)
    _, month_net = split_commission(month_revenue, commission_percentage)

    return {
        "venues": {
            "total": len(venues),
            "approved": venue_status.get(VenueStatus.APPROVED.value, 0),
            "pending": venue_status.get(VenueStatus.PENDING.value, 0),
            "rejected": venue_status.get(VenueStatus.REJECTED.value, 0),
        },
        "bookings": {
            "total": len(bookings),
            "today": sum(1 for b in bookings if b.booking_date == today and is_active_booking(b)),
            "upcoming": sum(
                1 for b in bookings
                if b.status == BookingStatus.CONFIRMED.value and b.start_datetime > now
            ),
            "completed": sum(1 for b in bookings if b.status == BookingStatus.COMPLETED.value),
            "cancelled": sum(1 for b in bookings if b.status == BookingStatus.CANCELLED.value),
            "this_month": sum(1 for b in this_month if is_active_booking(b)),
        },
        "courts": {"total_active": active_courts},
        "earnings": {
            "total_revenue": revenue,
            "admin_commission": commission,
            "net_earnings": net,
            "this_month_revenue": month_revenue,
            "this_month_net_earnings": month_net,
            "commission_percentage": Decimal(commission_percentage),
        },
    }


def owner_charts(db: Session, owner: User, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now()
    today = now.date()
    complete_elapsed_bookings(db, now)
    commission_percentage = get_admin_settings(db).commission_percentage

    bookings = _owner_bookings(db, owner)
    recent = [b for b in bookings if today - timedelta(days=DAILY_WINDOW_DAYS) < b.booking_date <= today]
    return {
        "booking_trends": booking_trends(bookings, today),
        "earnings": earnings_series(bookings, today, commission_percentage),
        "peak_hours": peak_hours(recent),
    }


def admin_stats(db: Session, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now()
    today = now.date()
    complete_elapsed_bookings(db, now)
    commission_percentage = get_admin_settings(db).commission_percentage

    venue_status = Counter(status for (status,) in db.query(Venue.status).all())
    users = db.query(User.role, User.is_active).all()
    bookings = db.query(Booking).all()
    booking_status = Counter(b.status for b in bookings)
    active_courts = db.query(Court).join(Venue, Court.venue_id == Venue.id).filter(
        Court.is_active.is_(True),
        Venue.is_active.is_(True),
        Venue.status == VenueStatus.APPROVED.value,
    ).count()

    revenue = total_revenue(bookings)
    platform_earnings, _ = split_commission(revenue, commission_percentage)

    per_day_revenue = Counter()
    for b in bookings:
        if is_revenue(b):
            per_day_revenue[b.booking_date] += Decimal(b.total_amount)
    trends = booking_trends(bookings, today)

    return {
        "venues": {
            "total": sum(venue_status.values()),
            "pending": venue_status.get(VenueStatus.PENDING.value, 0),
            "approved": venue_status.get(VenueStatus.APPROVED.value, 0),
            "rejected": venue_status.get(VenueStatus.REJECTED.value, 0),
        },
        "users": {
            "total": len(users),
            "active": sum(1 for _, active in users if active),
            "players": sum(1 for role, _ in users if role == UserRole.USER.value),
            "facility_owners": sum(1 for role, _ in users if role == UserRole.FACILITY_OWNER.value),
            "admins": sum(1 for role, _ in users if role == UserRole.ADMIN.value),
        },
        "bookings": {
            "total": len(bookings),
            "confirmed": booking_status.get(BookingStatus.CONFIRMED.value, 0),
            "completed": booking_status.get(BookingStatus.COMPLETED.value, 0),
            "cancelled": booking_status.get(BookingStatus.CANCELLED.value, 0),
        },
        "courts": {"total_active": active_courts},
        "earnings": {
            "total_revenue": revenue,
            "platform_earnings": platform_earnings,
            "commission_percentage": Decimal(commission_percentage),
        },
        "charts": {
            "daily_earnings": [
                {
                    "date": day.isoformat(),
                    "earnings": split_commission(per_day_revenue.get(day, Decimal(0)), commission_percentage)[0],
                }
                for day in daily_window(today)
            ],
            "daily_bookings": trends["daily"],
        },
    }


def user_stats(db: Session, user: User, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now()
    complete_elapsed_bookings(db, now)
    bookings = db.query(Booking).options(
        joinedload(Booking.venue),
        joinedload(Booking.court),
    ).filter(Booking.user_id == user.id).order_by(
        Booking.booking_date.desc(), Booking.start_time.desc()
    ).all()

    return {
        "total_bookings": len(bookings),
        "venues_visited": len({b.venue_id for b in bookings if b.status == BookingStatus.COMPLETED.value}),
        "upcoming": sum(
            1 for b in bookings
            if b.status == BookingStatus.CONFIRMED.value and b.start_datetime > now
        ),
        "completed": sum(1 for b in bookings if b.status == BookingStatus.COMPLETED.value),
        "cancelled": sum(1 for b in bookings if b.status == BookingStatus.CANCELLED.value),
        "total_amount_spent": total_revenue(bookings),
        "member_since": user.created_at,
        "recent_bookings": bookings[:RECENT_BOOKINGS],
    }
