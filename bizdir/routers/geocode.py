from fastapi import APIRouter, Query

from bizdir.schemas.business import ReverseGeocodeResponse
from bizdir.services.geocoding_client import reverse_geocode

router = APIRouter(prefix="/geocode", tags=["geocode"])


@router.get("/reverse", response_model=ReverseGeocodeResponse)
async def reverse(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
):
    """
    Suggest address fields for a coordinate pair (e.g. the device location).
    Never fails on geocoder trouble: resolved=false tells the client to leave
    the fields for manual entry.
    """
    address = await reverse_geocode(lat, lng)
    if address is None:
        return ReverseGeocodeResponse(resolved=False)
    return ReverseGeocodeResponse(
        resolved=True,
        unit=address.unit,
        street=address.street,
        city=address.city,
        country=address.country,
        display_address=address.display_address,
    )
