from datetime import date, datetime, time
from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from quickcourt.database import Base
from quickcourt.models.enums import DayOfWeek

class CourtUnavailability(Base):
    __tablename__ = "court_unavailabilities"

    id = Column(Integer, primary_key=True, index=True)
    court_id = Column(Integer, ForeignKey("courts.id", ondelete="CASCADE"), nullable=False, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    start_datetime = Column(DateTime, nullable=False)
    end_datetime = Column(DateTime, nullable=False)
    reason = Column(String(20), nullable=False)
    description = Column(Text)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_days = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    court = relationship("Court", back_populates="unavailabilities")

    def blocks(self, on: date, start: time, end: time) -> bool:
        """Whether this block intersects the [start, end) window on the given date."""
        if self.is_recurring:
            if DayOfWeek.from_date(on).value not in (self.recurring_days or []):
                return False
            block_start = self.start_datetime.time()
            block_end = self.end_datetime.time()
            return start < block_end and block_start < end
        window_start = datetime.combine(on, start)
        window_end = datetime.combine(on, end)
        return window_start < self.end_datetime and self.start_datetime < window_end
