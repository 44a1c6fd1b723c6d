import os
import tempfile

# Settings are read at import time; point them at throwaway locations first
_UPLOAD_DIR = tempfile.mkdtemp(prefix="bizdir-test-uploads-")
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["UPLOAD_DIR"] = _UPLOAD_DIR
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id"
os.environ["GOOGLE_CLIENT_SECRET"] = "test-client-secret"
os.environ["FRONTEND_URL"] = "http://frontend.test"

from datetime import datetime, timedelta, timezone  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from bizdir.core.security import create_access_token, hash_password  # noqa: E402
from bizdir.db.base import Base  # noqa: E402
from bizdir.db.session import get_db  # noqa: E402
from bizdir.main import app  # noqa: E402
from bizdir.models.account import Account  # noqa: E402
from bizdir.models.business import Business  # noqa: E402
from bizdir.seed.seed_data import seed_db  # noqa: E402


# Use SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def seeded_db(db_session):
    """Create a database session with seeded data."""
    seed_db(db_session)
    return db_session


@pytest.fixture(scope="function")
def seeded_client(seeded_db):
    """Create a test client with seeded database."""
    def override_get_db():
        try:
            yield seeded_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def upload_dir():
    """Directory uploads are written to; emptied after each test."""
    root = Path(_UPLOAD_DIR)
    root.mkdir(parents=True, exist_ok=True)
    yield root
    for path in root.iterdir():
        path.unlink()


@pytest.fixture
def create_account(db_session):
    """Factory for password accounts stored directly in the test database."""
    def _create(email="owner@example.com", name="Owner", password="secret123", **kwargs):
        account = Account(
            name=name,
            email=email,
            password_hash=hash_password(password) if password else None,
            **kwargs,
        )
        db_session.add(account)
        db_session.commit()
        db_session.refresh(account)
        return account
    return _create


@pytest.fixture
def auth_headers():
    """Bearer header for an account."""
    def _headers(account):
        return {"Authorization": f"Bearer {create_access_token(account.id)}"}
    return _headers


@pytest.fixture
def create_business(db_session):
    """Factory for businesses stored directly, with an explicit created_at."""
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _create(owner, minutes=0, **fields):
        data = {
            "name": "Sample Business",
            "category": "Other",
            "description": "A sample listing",
            "location": "Somewhere",
            "email": "sample@example.com",
        }
        data.update(fields)
        business = Business(owner_id=owner.id, created_at=base_time + timedelta(minutes=minutes), **data)
        db_session.add(business)
        db_session.commit()
        db_session.refresh(business)
        return business
    return _create


@pytest.fixture
def image_file():
    """Multipart tuple for a small fake image."""
    def _file(name="photo.png", content=b"\x89PNG\r\n\x1a\nfake-image-bytes", content_type="image/png"):
        return (name, content, content_type)
    return _file
