from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from bizdir.core.auth import get_current_account, require_owner
from bizdir.core.config import settings
from bizdir.db.session import get_db
from bizdir.models.account import Account
from bizdir.schemas.business import (
    BusinessEnvelope,
    BusinessRead,
    BusinessSearchResponse,
    BusinessUpdate,
    MessageResponse,
)
from bizdir.search.query import normalize_query
from bizdir.services import businesses as business_service
from bizdir.services.storage import check_uploads, save_uploads, selected_files

router = APIRouter(prefix="/businesses", tags=["businesses"])


@router.get("", response_model=list[BusinessRead])
def list_businesses(db: Session = Depends(get_db)):
    """Every business, newest first."""
    return business_service.list_businesses(db)


@router.get("/search", response_model=BusinessSearchResponse)
def search_businesses(
    q: Optional[str] = Query(None, description="Matched against name, description, category and address"),
    category: Optional[str] = Query(None, description="Substring of the category"),
    location: Optional[str] = Query(None, description="Substring of the address"),
    db: Session = Depends(get_db),
):
    """
    Case-insensitive substring search, newest first, no pagination.
    A search with no criteria returns an empty result; use GET /businesses to list everything.
    """
    return business_service.search_businesses(db, normalize_query(q, category, location))


@router.get("/{business_id}", response_model=BusinessRead)
def get_business(business_id: str, db: Session = Depends(get_db)):
    """Get business by ID."""
    return business_service.get_business(db, business_id)


@router.post("", response_model=BusinessEnvelope, status_code=201)
async def create_business(
    name: str = Form(""),
    category: str = Form(""),
    description: str = Form(""),
    unit: Optional[str] = Form(None),
    street: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    country: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    latitude: Optional[float] = Form(None),
    longitude: Optional[float] = Form(None),
    email: str = Form(""),
    phone: Optional[str] = Form(None),
    photos: list[UploadFile] = File(default=[]),
    current_account: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
):
    """
    Create a listing from a multipart form with up to 10 photos.

    Order matters: the photo batch is checked and the fields validated before
    any file touches the disk; files are written next, then the record.
    """
    files = selected_files(photos)
    check_uploads(files, settings.max_photos)

    data = await business_service.fill_address_from_coordinates({
        "name": name,
        "category": category,
        "description": description,
        "unit": unit,
        "street": street,
        "city": city,
        "country": country,
        "location": location,
        "latitude": latitude,
        "longitude": longitude,
        "email": email,
        "phone": phone,
    })
    fields = business_service.validate_fields(data)

    stored = await save_uploads(files, settings.max_photos)
    business = business_service.create_business(db, current_account, fields, stored)
    return BusinessEnvelope(message="Business added successfully", business=BusinessRead.model_validate(business))


@router.put("/{business_id}", response_model=BusinessEnvelope)
def update_business(
    business_id: str,
    body: BusinessUpdate,
    current_account: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
):
    """Owner-only partial update."""
    business = business_service.get_business(db, business_id)
    require_owner(business, current_account, "update")
    business = business_service.update_business(db, business, body)
    return BusinessEnvelope(message="Business updated successfully", business=BusinessRead.model_validate(business))


@router.delete("/{business_id}", response_model=MessageResponse)
def delete_business(
    business_id: str,
    current_account: Account = Depends(get_current_account),
    db: Session = Depends(get_db),
):
    """Owner-only delete; the listing's photo files are removed too."""
    business = business_service.get_business(db, business_id)
    require_owner(business, current_account, "delete")
    business_service.delete_business(db, business)
    return MessageResponse(message="Business deleted successfully")
