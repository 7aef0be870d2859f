from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, Float, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from quickcourt.database import Base
from quickcourt.core.exceptions import ConflictError, ValidationError
from quickcourt.models.enums import VenueStatus, VenueType

class Venue(Base):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    street = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False, index=True)
    state = Column(String(100), nullable=False)
    zip_code = Column(String(20), nullable=False)
    country = Column(String(100), nullable=False, default="India")
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    venue_type = Column(String(20), nullable=False, default=VenueType.OUTDOOR.value)
    sports = Column(JSON, nullable=False, default=list)
    amenities = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)  # [{"url": ..., "public_id": ...}]
    status = Column(String(20), nullable=False, default=VenueStatus.PENDING.value, index=True)
    rejection_reason = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    owner = relationship("User", back_populates="venues")
    courts = relationship("Court", back_populates="venue", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="venue")
    reviews = relationship("Review", back_populates="venue")

    @property
    def address(self) -> dict:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
        }

    @property
    def is_bookable(self) -> bool:
        return self.status == VenueStatus.APPROVED.value and self.is_active

    def approve(self):
        if self.status != VenueStatus.PENDING.value:
            raise ConflictError(f"Only pending venues can be approved (current status: {self.status})")
        self.status = VenueStatus.APPROVED.value
        self.rejection_reason = None

    def reject(self, reason: str):
        if not reason or not reason.strip():
            raise ValidationError("A rejection reason is required")
        if self.status != VenueStatus.PENDING.value:
            raise ConflictError(f"Only pending venues can be rejected (current status: {self.status})")
        self.status = VenueStatus.REJECTED.value
        self.rejection_reason = reason.strip()
