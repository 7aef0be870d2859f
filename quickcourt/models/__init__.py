from .user import User
from .venue import Venue
from .court import Court, CourtSlotConfiguration
from .booking import Booking, BookingSlot
from .review import Review
from .court_unavailability import CourtUnavailability
from .admin_settings import AdminSettings

__all__ = [
    "User", "Venue", "Court", "CourtSlotConfiguration", "Booking",
    "BookingSlot", "Review", "CourtUnavailability", "AdminSettings"
]
