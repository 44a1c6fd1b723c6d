"""
Tests for signup, login, bearer token verification and Google sign-in.
"""
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse

import jwt as pyjwt
from fastapi import status
from sqlalchemy.exc import IntegrityError

from bizdir.core.config import settings
from bizdir.core.errors import UpstreamError
from bizdir.core.security import create_access_token, create_oauth_state, decode_access_token, verify_oauth_state
from bizdir.models.account import Account
from bizdir.services.google_oauth import GoogleProfile


def create_test_token(sub, secret=None, expires_in=timedelta(days=7), **claims):
    """Sign a token independently of the app's signer."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(sub),
        "purpose": "access",
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    payload.update(claims)
    return pyjwt.encode(payload, secret or settings.jwt_secret, algorithm="HS256")


def _redirect_query(response):
    location = urlparse(response.headers["location"])
    return location, {k: v[0] for k, v in parse_qs(location.query).items()}


# --- signup ---


def test_signup(client, db_session):
    """Test signup returns a token and the public profile."""
    response = client.post(
        "/api/auth/signup",
        json={"name": "Alice", "email": "Alice@Example.com", "password": "secret123"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["message"] == "User created successfully"
    assert data["user"]["email"] == "alice@example.com"
    assert data["user"]["name"] == "Alice"
    assert set(data["user"]) == {"id", "name", "email", "avatar"}
    assert decode_access_token(data["token"]) == data["user"]["id"]

    account = db_session.query(Account).one()
    assert account.password_hash != "secret123"


def test_signup_duplicate_email(client, db_session):
    """Test duplicate email (any case) is rejected and only one account exists."""
    first = client.post("/api/auth/signup", json={"name": "A", "email": "dup@example.com", "password": "secret123"})
    assert first.status_code == status.HTTP_201_CREATED

    second = client.post("/api/auth/signup", json={"name": "B", "email": "DUP@example.com", "password": "other123"})
    assert second.status_code == status.HTTP_400_BAD_REQUEST
    assert second.json() == {"error": "User already exists with this email"}
    assert db_session.query(Account).count() == 1


def test_signup_short_password(client):
    """Test passwords under 6 characters are rejected."""
    response = client.post("/api/auth/signup", json={"name": "A", "email": "a@example.com", "password": "12345"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "Password must be at least 6 characters" in response.json()["error"]


def test_signup_missing_fields(client):
    """Test missing or blank fields are a 400 with an error envelope."""
    response = client.post("/api/auth/signup", json={"email": "a@example.com", "password": "secret123"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "error" in response.json()

    response = client.post("/api/auth/signup", json={"name": "  ", "email": "a@example.com", "password": "secret123"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_signup_invalid_email(client):
    """Test a malformed email is rejected."""
    response = client.post("/api/auth/signup", json={"name": "A", "email": "not-an-email", "password": "secret123"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"].startswith("email")


# --- login ---


def test_login(client, create_account):
    """Test login with correct credentials; email is case-insensitive."""
    account = create_account(email="owner@example.com", password="secret123")
    response = client.post("/api/auth/login", json={"email": "Owner@Example.com", "password": "secret123"})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["user"]["id"] == str(account.id)
    assert decode_access_token(data["token"]) == str(account.id)


def test_login_failures_are_indistinguishable(client, create_account):
    """Test wrong password and unknown email produce the same 401."""
    create_account(email="owner@example.com", password="secret123")
    wrong_password = client.post("/api/auth/login", json={"email": "owner@example.com", "password": "nope-nope"})
    unknown_email = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"})

    assert wrong_password.status_code == status.HTTP_401_UNAUTHORIZED
    assert unknown_email.status_code == status.HTTP_401_UNAUTHORIZED
    assert wrong_password.json() == unknown_email.json() == {"error": "Invalid credentials"}


def test_login_google_only_account(client, create_account):
    """Test an account without a password cannot log in with one."""
    create_account(email="g@example.com", password=None, google_id="google-123")
    response = client.post("/api/auth/login", json={"email": "g@example.com", "password": "anything"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"error": "Invalid credentials"}


def test_login_seeded_account(seeded_client):
    """Test the seeded password account can log in."""
    response = seeded_client.post("/api/auth/login", json={"email": "alice@example.com", "password": "password123"})
    assert response.status_code == status.HTTP_200_OK


# --- me / token verification ---


def test_me(client, create_account, auth_headers):
    """Test /me returns the token holder's profile."""
    account = create_account(name="Owner Name")
    response = client.get("/api/auth/me", headers=auth_headers(account))
    assert response.status_code == status.HTTP_200_OK
    user = response.json()["user"]
    assert user["id"] == str(account.id)
    assert user["name"] == "Owner Name"
    assert "password_hash" not in user


def test_me_without_token(client):
    """Test /me without a token."""
    response = client.get("/api/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert "error" in response.json()


def test_me_with_independently_signed_token(client, create_account):
    """Test a token signed with the shared secret by another library is accepted."""
    account = create_account()
    token = create_test_token(account.id)
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_200_OK


def test_expired_token_rejected(client, create_account):
    """Test an expired token is a 401."""
    account = create_account()
    token = create_test_token(account.id, expires_in=timedelta(seconds=-10))
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"error": "Token expired"}


def test_token_with_wrong_secret_rejected(client, create_account):
    """Test a token signed with a different secret is a 401."""
    account = create_account()
    token = create_test_token(account.id, secret="some-other-secret")
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"error": "Invalid token"}


def test_garbage_token_rejected(client):
    """Test a malformed token is a 401."""
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_token_for_missing_account_rejected(client):
    """Test a valid token whose account does not exist is a 401."""
    token = create_access_token(uuid.uuid4())
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_oauth_state_is_not_a_bearer_token(client, create_account):
    """Test a signed OAuth state cannot be used to authenticate."""
    create_account()
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {create_oauth_state('/')}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_token_issued_at_and_expiry(create_account):
    """Test tokens expire after the configured number of days."""
    account = create_account()
    issued = datetime(2020, 1, 1, tzinfo=timezone.utc)
    token = create_access_token(account.id, now=issued)
    claims = pyjwt.decode(token, settings.jwt_secret, algorithms=["HS256"], options={"verify_exp": False})
    assert claims["exp"] - claims["iat"] == settings.jwt_expires_days * 24 * 3600
    assert claims["sub"] == str(account.id)


# --- Google sign-in ---


def test_google_login_redirects_to_consent(client):
    """Test /auth/google redirects to Google with a signed state."""
    response = client.get("/api/auth/google?next=/businesses/new", follow_redirects=False)
    assert response.status_code == status.HTTP_307_TEMPORARY_REDIRECT
    location, params = _redirect_query(response)
    assert location.netloc == "accounts.google.com"
    assert params["client_id"] == "test-client-id"
    assert params["redirect_uri"] == settings.google_callback_url
    assert params["response_type"] == "code"
    assert verify_oauth_state(params["state"])["next"] == "/businesses/new"


def test_google_login_ignores_external_next(client):
    """Test an absolute or protocol-relative next path falls back to /."""
    for target in ("https://evil.example.com", "//evil.example.com"):
        response = client.get("/api/auth/google", params={"next": target}, follow_redirects=False)
        _, params = _redirect_query(response)
        assert verify_oauth_state(params["state"])["next"] == "/"


def test_google_callback_creates_account(client, db_session):
    """Test a first-time Google user gets a new verified account and a token."""
    profile = GoogleProfile(google_id="g-1", email="new@example.com", name="New Person", avatar="https://img/p.png")
    with patch("bizdir.services.google_oauth.authenticate", new=AsyncMock(return_value=profile)):
        response = client.get(
            "/api/auth/google/callback",
            params={"code": "auth-code", "state": create_oauth_state("/add")},
            follow_redirects=False,
        )

    assert response.status_code == status.HTTP_302_FOUND
    location, params = _redirect_query(response)
    assert f"{location.scheme}://{location.netloc}{location.path}" == "http://frontend.test/auth/callback"
    assert params["next"] == "/add"

    account = db_session.query(Account).one()
    assert account.google_id == "g-1"
    assert account.is_verified is True
    assert account.password_hash is None
    assert decode_access_token(params["token"]) == str(account.id)


def test_google_callback_links_existing_email(client, create_account, db_session):
    """Test a Google profile with a registered email is linked to that account."""
    existing = create_account(email="owner@example.com", password="secret123")
    profile = GoogleProfile(google_id="g-2", email="owner@example.com", name="Owner", avatar="https://img/o.png")
    with patch("bizdir.services.google_oauth.authenticate", new=AsyncMock(return_value=profile)):
        response = client.get(
            "/api/auth/google/callback",
            params={"code": "auth-code", "state": create_oauth_state("/")},
            follow_redirects=False,
        )

    _, params = _redirect_query(response)
    assert decode_access_token(params["token"]) == str(existing.id)
    assert db_session.query(Account).count() == 1
    db_session.refresh(existing)
    assert existing.google_id == "g-2"
    assert existing.avatar == "https://img/o.png"

    # Password login keeps working after linking
    login = client.post("/api/auth/login", json={"email": "owner@example.com", "password": "secret123"})
    assert login.status_code == status.HTTP_200_OK


def test_google_callback_returning_user(client, create_account, db_session):
    """Test a returning Google user resolves to the same account."""
    existing = create_account(email="g@example.com", password=None, google_id="g-3")
    profile = GoogleProfile(google_id="g-3", email="g@example.com", name="G")
    with patch("bizdir.services.google_oauth.authenticate", new=AsyncMock(return_value=profile)):
        response = client.get(
            "/api/auth/google/callback",
            params={"code": "c", "state": create_oauth_state("/")},
            follow_redirects=False,
        )
    _, params = _redirect_query(response)
    assert decode_access_token(params["token"]) == str(existing.id)
    assert db_session.query(Account).count() == 1


def test_google_callback_provider_failure(client, db_session):
    """Test a failed code exchange redirects with an error and creates nothing."""
    failing = AsyncMock(side_effect=UpstreamError("Google OAuth HTTP 400"))
    with patch("bizdir.services.google_oauth.authenticate", new=failing):
        response = client.get(
            "/api/auth/google/callback",
            params={"code": "bad", "state": create_oauth_state("/")},
            follow_redirects=False,
        )
    assert response.status_code == status.HTTP_302_FOUND
    assert response.headers["location"] == "http://frontend.test/?error=oauth_failed"
    assert db_session.query(Account).count() == 0


def test_google_callback_rejects_bad_state(client):
    """Test a forged state never reaches the provider."""
    provider = AsyncMock()
    with patch("bizdir.services.google_oauth.authenticate", new=provider):
        response = client.get(
            "/api/auth/google/callback",
            params={"code": "c", "state": "forged"},
            follow_redirects=False,
        )
    assert response.headers["location"] == "http://frontend.test/?error=oauth_failed"
    provider.assert_not_awaited()


def test_google_callback_user_denied(client):
    """Test Google's error parameter (consent refused) redirects with an error."""
    response = client.get("/api/auth/google/callback?error=access_denied", follow_redirects=False)
    assert response.status_code == status.HTTP_302_FOUND
    assert response.headers["location"] == "http://frontend.test/?error=oauth_failed"


def test_google_callback_database_failure(client, db_session):
    """Test an account write failing after a good exchange redirects with an error."""
    profile = GoogleProfile(google_id="g-4", email="race@example.com", name="Race")
    duplicate = IntegrityError("INSERT INTO accounts", {}, Exception("UNIQUE constraint failed: accounts.email"))
    with patch("bizdir.services.google_oauth.authenticate", new=AsyncMock(return_value=profile)), \
            patch("bizdir.services.accounts.link_or_create_google_account", side_effect=duplicate):
        response = client.get(
            "/api/auth/google/callback",
            params={"code": "c", "state": create_oauth_state("/")},
            follow_redirects=False,
        )
    assert response.status_code == status.HTTP_302_FOUND
    assert response.headers["location"] == "http://frontend.test/?error=oauth_failed"
    assert db_session.query(Account).count() == 0
