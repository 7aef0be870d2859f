from datetime import datetime
from sqlalchemy import Column, String, Integer, Date, Time, Numeric, Text, Boolean, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from quickcourt.database import Base
from quickcourt.core.exceptions import ConflictError
from quickcourt.models.enums import BookingStatus

class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    court_id = Column(Integer, ForeignKey("courts.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    number_of_slots = Column(Integer, nullable=False)
    slot_duration = Column(Integer, nullable=False)  # hours
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value, index=True)
    cancellation_reason = Column(Text)
    cancelled_at = Column(DateTime)
    completed_at = Column(DateTime)
    payment_simulated = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="bookings")
    venue = relationship("Venue", back_populates="bookings")
    court = relationship("Court", back_populates="bookings")
    slots = relationship("BookingSlot", back_populates="booking", cascade="all, delete-orphan")
    review = relationship("Review", back_populates="booking", uselist=False)

    @property
    def start_datetime(self) -> datetime:
        return datetime.combine(self.booking_date, self.start_time)

    @property
    def end_datetime(self) -> datetime:
        return datetime.combine(self.booking_date, self.end_time)

    def _ensure_confirmed(self, action: str):
        if self.status != BookingStatus.CONFIRMED.value:
            raise ConflictError(f"Cannot {action} a booking that is {self.status}")

    def complete(self, now: datetime):
        self._ensure_confirmed("complete")
        self.status = BookingStatus.COMPLETED.value
        self.completed_at = now

    def cancel(self, reason: str, now: datetime):
        self._ensure_confirmed("cancel")
        self.status = BookingStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_at = now
        # Releasing the slot cells frees the time range for new bookings
        self.slots.clear()


class BookingSlot(Base):
    """
    One 30-minute cell of a court's calendar held by a booking.

    The unique constraint is what makes two overlapping confirmed bookings
    impossible: concurrent inserts for the same cell fail at commit time.
    """
    __tablename__ = "booking_slots"
    __table_args__ = (
        UniqueConstraint("court_id", "booking_date", "slot_start", name="uq_booking_slot_cell"),
    )

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    court_id = Column(Integer, ForeignKey("courts.id", ondelete="CASCADE"), nullable=False)
    booking_date = Column(Date, nullable=False)
    slot_start = Column(Time, nullable=False)

    booking = relationship("Booking", back_populates="slots")
