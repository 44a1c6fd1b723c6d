"""Ordering and envelope construction for business listings."""

from datetime import datetime, timezone
from typing import Iterable

from bizdir.models.business import Business
from bizdir.schemas.business import BusinessRead, BusinessSearchResponse


def _created_key(business: Business) -> datetime:
    created = business.created_at
    if created is not None and created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created or datetime.min.replace(tzinfo=timezone.utc)


def newest_first(businesses: Iterable[Business]) -> list[Business]:
    """Sort by created_at descending. Stable, so equal timestamps keep their input order."""
    return sorted(businesses, key=_created_key, reverse=True)


def assemble_results(businesses: Iterable[Business]) -> BusinessSearchResponse:
    """Full match set (no pagination), newest first, public fields only."""
    ordered = newest_first(businesses)
    return BusinessSearchResponse(
        count=len(ordered),
        businesses=[BusinessRead.model_validate(b) for b in ordered],
    )
