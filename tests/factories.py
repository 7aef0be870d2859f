import time as clock
from decimal import Decimal

from jose import jwt

from quickcourt.models.court import Court, CourtSlotConfiguration
from quickcourt.models.enums import UserRole, VenueStatus
from quickcourt.models.user import User
from quickcourt.models.venue import Venue
from quickcourt.services.slots import default_slot_configurations

TEST_SECRET = "test-secret"


def make_token(subject: str, email: str, **claims) -> str:
    payload = {"sub": subject, "email": email, "exp": int(clock.time()) + 3600, **claims}
    return jwt.encode(payload, TEST_SECRET, algorithm="HS256")


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {make_token(user.external_id, user.email)}"}


def create_user(db, name: str, role: UserRole = UserRole.USER, is_active: bool = True) -> User:
    user = User(
        external_id=f"idp|{name}",
        email=f"{name}@quickcourt.io",
        first_name=name.capitalize(),
        role=role.value,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_venue(db, owner: User, status: VenueStatus = VenueStatus.APPROVED, **overrides) -> Venue:
    fields = dict(
        owner_id=owner.id,
        name="Riverside Sports Arena",
        description="Floodlit courts next to the river park",
        street="12 River Road",
        city="Pune",
        state="Maharashtra",
        zip_code="411001",
        venue_type="outdoor",
        sports=["badminton", "tennis"],
        amenities=["parking"],
        images=[],
        status=status.value,
    )
    fields.update(overrides)
    venue = Venue(**fields)
    db.add(venue)
    db.commit()
    db.refresh(venue)
    return venue


def create_court(db, venue: Venue, price: Decimal = Decimal("400.00"), sport_type: str = "badminton",
                 name: str = "Court 1") -> Court:
    court = Court(venue_id=venue.id, name=name, sport_type=sport_type, default_price=price)
    court.slot_configurations = [
        CourtSlotConfiguration(**config) for config in default_slot_configurations(price)
    ]
    db.add(court)
    db.commit()
    db.refresh(court)
    return court


VENUE_PAYLOAD = {
    "name": "Lakeside Club",
    "description": "Indoor badminton halls with wooden floors",
    "address": {
        "street": "4 Lake View",
        "city": "Bengaluru",
        "state": "Karnataka",
        "zip_code": "560001",
    },
    "venue_type": "indoor",
    "sports": ["badminton"],
    "amenities": ["showers", "parking"],
}


def create_booking_row(db, user: User, court: Court, booking_date, start_time, number_of_slots: int = 1,
                       status: str = "confirmed", price: Decimal = Decimal("400.00")):
    """Inserts a booking directly, bypassing the booking rules (for past dates and fixtures)."""
    from quickcourt.models.booking import Booking, BookingSlot
    from quickcourt.services.slots import booking_end, occupied_cells

    end_time = booking_end(start_time, number_of_slots, 1)
    booking = Booking(
        user_id=user.id,
        venue_id=court.venue_id,
        court_id=court.id,
        booking_date=booking_date,
        start_time=start_time,
        end_time=end_time,
        number_of_slots=number_of_slots,
        slot_duration=1,
        total_amount=price * number_of_slots,
        status=status,
    )
    if status != "cancelled":
        booking.slots = [
            BookingSlot(court_id=court.id, booking_date=booking_date, slot_start=cell)
            for cell in occupied_cells(start_time, end_time)
        ]
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking
