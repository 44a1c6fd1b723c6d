"""Business listing persistence: create with photos, edit, delete, list and search."""

import logging
import uuid as uuid_lib
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session, selectinload

from bizdir.core.errors import NotFound, ValidationError, describe_validation_errors
from bizdir.models.account import Account
from bizdir.models.business import ADDRESS_PARTS, Business, BusinessPhoto
from bizdir.schemas.business import BusinessFields, BusinessSearchResponse, BusinessUpdate
from bizdir.search.matcher import filter_records
from bizdir.search.query import SearchQuery
from bizdir.search.results import assemble_results
from bizdir.services.geocoding_client import reverse_geocode
from bizdir.services.storage import StoredFile, remove_files

logger = logging.getLogger(__name__)


def validate_fields(data: Dict[str, Any]) -> BusinessFields:
    try:
        return BusinessFields.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(describe_validation_errors(e.errors()))


async def fill_address_from_coordinates(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    When coordinates are given but no address at all, try to look the address up.
    On geocoder failure the data is returned unchanged and normal validation decides.
    """
    has_address = any((data.get(k) or "").strip() for k in (*ADDRESS_PARTS, "location"))
    lat, lng = data.get("latitude"), data.get("longitude")
    if has_address or lat is None or lng is None:
        return data
    address = await reverse_geocode(lat, lng)
    if address is None:
        return data
    logger.info(f"Filled address from coordinates ({lat}, {lng}): {address.display_address}")
    return {
        **data,
        "unit": address.unit,
        "street": address.street,
        "city": address.city,
        "country": address.country,
    }


def _ordered_query(db: Session):
    # id as tiebreaker keeps equal timestamps in a stable order across calls
    return (
        db.query(Business)
        .options(selectinload(Business.photos))
        .order_by(Business.created_at.desc(), Business.id)
    )


def list_businesses(db: Session) -> list[Business]:
    return _ordered_query(db).all()


def search_businesses(db: Session, query: SearchQuery) -> BusinessSearchResponse:
    """Filtered scan: an empty query yields an empty result, not the whole directory."""
    if query.is_empty:
        return assemble_results([])
    matches = filter_records(query, _ordered_query(db).all())
    logger.info(
        f"Search term={query.term!r} category={query.category!r} location={query.location!r}: {len(matches)} match(es)"
    )
    return assemble_results(matches)


def get_business(db: Session, business_id: str) -> Business:
    try:
        key = uuid_lib.UUID(str(business_id))
    except ValueError:
        raise NotFound("Business not found")
    business = db.query(Business).filter(Business.id == key).first()
    if business is None:
        raise NotFound("Business not found")
    return business


def create_business(
    db: Session,
    owner: Account,
    fields: BusinessFields,
    photos: list[StoredFile],
) -> Business:
    """
    Persist the business and its photo rows in one commit.

    The photo files are already on disk; if the commit fails they are removed
    before the error propagates, so a failed create leaves nothing behind.
    """
    business = Business(**fields.model_dump(), owner_id=owner.id)
    business.photos = [
        BusinessPhoto(
            position=position,
            filename=photo.filename,
            original_name=photo.original_name,
            path=photo.path,
            size=photo.size,
        )
        for position, photo in enumerate(photos)
    ]
    db.add(business)
    try:
        db.commit()
    except Exception:
        db.rollback()
        removed = remove_files(p.path for p in photos)
        logger.error(f"Failed to save business for account {owner.id}; removed {removed} uploaded file(s)")
        raise
    db.refresh(business)
    logger.info(f"Created business id={business.id} owner={owner.id} photos={len(photos)}")
    return business


def update_business(db: Session, business: Business, update: BusinessUpdate) -> Business:
    """Apply a partial update; the merged result must satisfy the same rules as a new listing."""
    changes = update.model_dump(exclude_unset=True)
    current = {name: getattr(business, name) for name in BusinessFields.model_fields}
    fields = validate_fields({**current, **changes})

    for name, value in fields.model_dump().items():
        setattr(business, name, value)
    business.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(business)
    logger.info(f"Updated business id={business.id} fields={sorted(changes)}")
    return business


def delete_business(db: Session, business: Business) -> None:
    paths = [photo.path for photo in business.photos]
    business_id = business.id
    db.delete(business)
    db.commit()
    removed = remove_files(paths)
    logger.info(f"Deleted business id={business_id}; removed {removed} photo file(s)")
