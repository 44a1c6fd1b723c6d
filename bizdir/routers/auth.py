import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bizdir.core.auth import get_current_account
from bizdir.core.config import settings
from bizdir.core.errors import DirectoryError
from bizdir.core.security import create_access_token, create_oauth_state, verify_oauth_state
from bizdir.db.session import get_db
from bizdir.models.account import Account
from bizdir.schemas.account import AccountRead, AuthResponse, LoginRequest, MeResponse, SignupRequest
from bizdir.services import accounts, google_oauth

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _frontend_redirect(path: str, **params: str) -> RedirectResponse:
    url = f"{settings.frontend_url.rstrip('/')}{path}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url, status_code=302)


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    """Register with name, email and password; returns a bearer token and the public profile."""
    account = accounts.create_account(db, body)
    return AuthResponse(
        message="User created successfully",
        token=create_access_token(account.id),
        user=AccountRead.model_validate(account),
    )


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Credential login. Unknown email and wrong password produce the same 401."""
    account = accounts.authenticate(db, body.email, body.password)
    return AuthResponse(
        message="Login successful",
        token=create_access_token(account.id),
        user=AccountRead.model_validate(account),
    )


@router.get("/google")
def google_login(next_path: str = Query("/", alias="next", description="Client path to return to after sign-in")):
    """Redirect the browser to Google's consent screen."""
    if not next_path.startswith("/") or next_path.startswith("//"):
        next_path = "/"
    return RedirectResponse(google_oauth.build_authorization_url(create_oauth_state(next_path)), status_code=307)


@router.get("/google/callback")
async def google_callback(
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
    db: Session = Depends(get_db),
):
    """
    Google redirects here after consent. Links or creates the account, then
    sends the browser to {frontend_url}/auth/callback?token=<bearer token>.
    Any failure lands on {frontend_url}/?error=oauth_failed instead.
    """
    if error or not code:
        logger.warning(f"Google OAuth callback without code (error={error})")
        return _frontend_redirect("/", error="oauth_failed")
    try:
        state_claims = verify_oauth_state(state)
        profile = await google_oauth.authenticate(code)
        account = accounts.link_or_create_google_account(db, profile)
    except DirectoryError as e:
        logger.error(f"Google OAuth callback failed: {e.detail}")
        return _frontend_redirect("/", error="oauth_failed")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Google OAuth account linking failed: {e}")
        return _frontend_redirect("/", error="oauth_failed")

    logger.info(f"Google OAuth success for account id={account.id}")
    return _frontend_redirect(
        "/auth/callback",
        token=create_access_token(account.id),
        next=state_claims.get("next", "/"),
    )


@router.get("/me", response_model=MeResponse)
def get_me(current_account: Account = Depends(get_current_account)):
    """Public profile of the token holder."""
    return MeResponse(user=AccountRead.model_validate(current_account))
