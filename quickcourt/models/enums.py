import enum


class UserRole(str, enum.Enum):
    USER = "user"
    FACILITY_OWNER = "facility_owner"
    ADMIN = "admin"


class VenueStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VenueType(str, enum.Enum):
    INDOOR = "indoor"
    OUTDOOR = "outdoor"
    BOTH = "both"


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DayOfWeek(str, enum.Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, value) -> "DayOfWeek":
        # date.weekday(): Monday == 0
        return list(cls)[value.weekday()]


class SportType(str, enum.Enum):
    CRICKET = "cricket"
    BADMINTON = "badminton"
    TENNIS = "tennis"
    TABLE_TENNIS = "table_tennis"
    FOOTBALL = "football"
    BASKETBALL = "basketball"
    VOLLEYBALL = "volleyball"
    SWIMMING = "swimming"
    SQUASH = "squash"
    HOCKEY = "hockey"
    BASEBALL = "baseball"
    GOLF = "golf"
    BOXING = "boxing"
    GYM_FITNESS = "gym_fitness"
    YOGA = "yoga"
    OTHER = "other"


class UnavailabilityReason(str, enum.Enum):
    MAINTENANCE = "maintenance"
    PRIVATE_EVENT = "private_event"
    HOLIDAY = "holiday"
    OTHER = "other"


SLOT_DURATIONS = (1, 2, 3, 4)
MAX_SLOTS_PER_BOOKING = 4
