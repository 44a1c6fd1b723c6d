import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from bizdir.core.config import settings
from bizdir.db.base import Base

ADDRESS_PARTS = ("unit", "street", "city", "country")


def _utcnow() -> datetime:
    # Microsecond precision keeps newest-first ordering meaningful for back-to-back inserts
    return datetime.now(timezone.utc)


def compose_display_address(
    unit: str | None,
    street: str | None,
    city: str | None,
    country: str | None,
    location: str | None = None,
) -> str:
    """Comma-join the non-empty structured parts in order; fall back to the free-text location."""
    parts = [p.strip() for p in (unit, street, city, country) if p and p.strip()]
    if parts:
        return ", ".join(parts)
    return (location or "").strip()


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)
    # Structured address is canonical; location is only the free-text fallback
    unit = Column(String, nullable=True)
    street = Column(String, nullable=True)
    city = Column(String, nullable=True)
    country = Column(String, nullable=True)
    location = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    owner_id = Column(Uuid, ForeignKey("accounts.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    owner = relationship("Account", back_populates="businesses")
    photos = relationship(
        "BusinessPhoto",
        back_populates="business",
        cascade="all, delete-orphan",
        order_by="BusinessPhoto.position",
    )

    @property
    def display_address(self) -> str:
        return compose_display_address(self.unit, self.street, self.city, self.country, self.location)


class BusinessPhoto(Base):
    __tablename__ = "business_photos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    business_id = Column(Uuid, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)  # upload order within the business
    filename = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    path = Column(String, nullable=False)
    size = Column(Integer, nullable=False)

    business = relationship("Business", back_populates="photos")

    @property
    def url(self) -> str:
        return f"{settings.uploads_url_prefix.rstrip('/')}/{self.filename}"
