from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, Time, Numeric, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from quickcourt.database import Base
from quickcourt.models.enums import DayOfWeek

class Court(Base):
    __tablename__ = "courts"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    sport_type = Column(String(30), nullable=False)
    description = Column(Text)
    default_price = Column(Numeric(10, 2), nullable=False, default=500)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    venue = relationship("Venue", back_populates="courts")
    slot_configurations = relationship(
        "CourtSlotConfiguration",
        back_populates="court",
        cascade="all, delete-orphan",
        order_by="CourtSlotConfiguration.id",
    )
    bookings = relationship("Booking", back_populates="court")
    unavailabilities = relationship("CourtUnavailability", back_populates="court", cascade="all, delete-orphan")

    def config_for(self, day: DayOfWeek):
        for config in self.slot_configurations:
            if config.day_of_week == day.value:
                return config
        return None


class CourtSlotConfiguration(Base):
    """Opening hours and pricing of a court for one day of the week."""
    __tablename__ = "court_slot_configurations"
    __table_args__ = (
        UniqueConstraint("court_id", "day_of_week", name="uq_court_slot_configuration_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    court_id = Column(Integer, ForeignKey("courts.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(String(10), nullable=False)
    is_open = Column(Boolean, nullable=False, default=True)
    start_time = Column(Time, nullable=False)
    slot_duration = Column(Integer, nullable=False, default=1)  # hours
    number_of_slots = Column(Integer, nullable=False, default=11)
    price = Column(Numeric(10, 2), nullable=False)

    court = relationship("Court", back_populates="slot_configurations")
