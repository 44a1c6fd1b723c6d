"""Business category vocabulary and the popular-search shortlist."""

CATEGORIES = (
    "Restaurant",
    "Café",
    "Coffee Shop",
    "Retail Store",
    "Grocery Store",
    "Tech Startup",
    "Consulting",
    "Healthcare",
    "Clinic",
    "Hospital",
    "Pharmacy",
    "Education",
    "School",
    "Training Center",
    "Beauty & Spa",
    "Hair Salon",
    "Nail Salon",
    "Barbershop",
    "Fitness",
    "Gym",
    "Yoga Studio",
    "Real Estate",
    "Automotive",
    "Car Repair",
    "Gas Station",
    "Hotel",
    "Law Firm",
    "Accounting",
    "Dentist",
    "Pet Store",
    "Bakery",
    "Bar",
    "Nightclub",
    "Other",
)

# Shown when the search box is focused but empty
POPULAR_SEARCHES = (
    "Restaurant",
    "Coffee Shop",
    "Gym",
    "Hair Salon",
    "Grocery Store",
)

_CANONICAL = {c.casefold(): c for c in CATEGORIES}


def canonical_category(value: str | None) -> str | None:
    """Return the vocabulary spelling of value (case-insensitive), or None if it is not a category."""
    if value is None:
        return None
    return _CANONICAL.get(value.strip().casefold())
