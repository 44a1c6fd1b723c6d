from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from uuid import UUID
from datetime import datetime
from typing import Optional

from bizdir.core.categories import CATEGORIES, canonical_category
from bizdir.models.business import compose_display_address


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class BusinessFields(BaseModel):
    """
    Full, validated field set of a business listing.

    Used for creation and, after merging the stored values with a partial
    update, for re-validating an edited listing:
    - name, description and email must be non-empty (email is lowercased)
    - category must belong to the vocabulary (stored in canonical spelling)
    - latitude/longitude are both present or both absent
    - the address must resolve to a non-empty display string
    """
    name: str
    category: str
    description: str
    unit: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    location: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    email: str
    phone: Optional[str] = None

    @field_validator("name", "description", "email", mode="before")
    @classmethod
    def require_text(cls, value):
        if value is None or not str(value).strip():
            raise ValueError("must not be empty")
        return str(value).strip()

    @field_validator("unit", "street", "city", "country", "location", "phone", mode="before")
    @classmethod
    def strip_optional(cls, value):
        return _blank_to_none(value) if isinstance(value, str) or value is None else value

    @field_validator("category", mode="before")
    @classmethod
    def check_category(cls, value):
        canonical = canonical_category(value) if isinstance(value, str) else None
        if canonical is None:
            raise ValueError(f"Category must be one of: {', '.join(CATEGORIES)}")
        return canonical

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("latitude")
    @classmethod
    def check_latitude(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and not -90.0 <= value <= 90.0:
            raise ValueError("Latitude must be between -90 and 90")
        return value

    @field_validator("longitude")
    @classmethod
    def check_longitude(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and not -180.0 <= value <= 180.0:
            raise ValueError("Longitude must be between -180 and 180")
        return value

    @model_validator(mode="after")
    def check_location(self) -> "BusinessFields":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Latitude and longitude must be provided together")
        if not self.display_address:
            raise ValueError("Address is required: provide street, city, country or a location")
        return self

    @property
    def display_address(self) -> str:
        return compose_display_address(self.unit, self.street, self.city, self.country, self.location)


class BusinessUpdate(BaseModel):
    """Partial update; only fields present in the payload are applied. Ownership is not editable."""
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    unit: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    location: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class PhotoRead(BaseModel):
    filename: str
    original_name: str
    path: str
    size: int
    url: str

    model_config = ConfigDict(from_attributes=True)


class BusinessRead(BaseModel):
    id: UUID
    name: str
    category: str
    description: str
    unit: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    location: Optional[str] = None
    display_address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    email: str
    phone: Optional[str] = None
    owner_id: UUID
    photos: list[PhotoRead] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BusinessEnvelope(BaseModel):
    message: str
    business: BusinessRead


class BusinessSearchResponse(BaseModel):
    count: int
    businesses: list[BusinessRead]


class MessageResponse(BaseModel):
    message: str


class ReverseGeocodeResponse(BaseModel):
    """Address suggestion for a coordinate pair. resolved=False means: let the user type it."""
    resolved: bool
    unit: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    display_address: str = ""
