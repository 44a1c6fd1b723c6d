import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from bizdir.core.security import hash_password
from bizdir.models.account import Account
from bizdir.models.business import Business, BusinessPhoto


def seed_db(db: Session) -> None:
    """Seed the database with sample data."""

    # Clear existing data (optional - comment out if you want to preserve data)
    db.query(BusinessPhoto).delete()
    db.query(Business).delete()
    db.query(Account).delete()
    db.commit()

    alice = Account(
        id=uuid.uuid4(),
        name="Alice Owner",
        email="alice@example.com",
        password_hash=hash_password("password123"),
    )
    bob = Account(
        id=uuid.uuid4(),
        name="Bob Google",
        email="bob@example.com",
        google_id="google-oauth-bob",
        avatar="https://example.com/bob.png",
        is_verified=True,
    )
    db.add_all([alice, bob])
    db.commit()

    # Staggered timestamps so newest-first ordering is visible
    now = datetime.now(timezone.utc)
    businesses = [
        Business(
            name="Tony's Pizza",
            category="Restaurant",
            description="Wood-fired pizza and pasta",
            unit="12",
            street="Main St",
            city="Springfield",
            country="USA",
            latitude=39.7817,
            longitude=-89.6501,
            email="hello@tonys.example.com",
            phone="555-0100",
            owner_id=alice.id,
            created_at=now - timedelta(days=3),
        ),
        Business(
            name="Elite Hair Salon",
            category="Hair Salon",
            description="Cuts, colour and styling",
            street="456 Broadway",
            city="New York",
            country="USA",
            email="book@elite.example.com",
            owner_id=alice.id,
            created_at=now - timedelta(days=2),
        ),
        Business(
            name="Bean There",
            category="Coffee Shop",
            description="Single-origin espresso and pastries",
            location="Riverside Mall, Shelbyville",
            email="hi@beanthere.example.com",
            owner_id=bob.id,
            created_at=now - timedelta(days=1),
        ),
    ]
    db.add_all(businesses)
    db.commit()
