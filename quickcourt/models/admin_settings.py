from sqlalchemy import Column, Integer, Numeric, DateTime, func
from quickcourt.database import Base

class AdminSettings(Base):
    """Platform-wide knobs. A single row, created on first read."""
    __tablename__ = "admin_settings"

    id = Column(Integer, primary_key=True, index=True)
    commission_percentage = Column(Numeric(5, 2), nullable=False, default=10)
    min_booking_advance_hours = Column(Integer, nullable=False, default=0)
    max_booking_advance_days = Column(Integer, nullable=False, default=7)
    cancellation_min_hours = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
