"""Account creation, credential login and Google account linking."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bizdir.core.errors import Conflict, InvalidCredentials
from bizdir.core.security import hash_password, verify_password
from bizdir.models.account import Account
from bizdir.schemas.account import SignupRequest
from bizdir.services.google_oauth import GoogleProfile

logger = logging.getLogger(__name__)

# Checked against when the email is unknown so both login failures cost one bcrypt round
_DUMMY_HASH = hash_password("not-a-real-password")


def find_by_email(db: Session, email: str) -> Account | None:
    return db.query(Account).filter(Account.email == email.strip().lower()).first()


def create_account(db: Session, data: SignupRequest) -> Account:
    """
    Register a password account.

    Raises:
        Conflict: the (lowercased) email is already registered, including a
            concurrent signup caught by the unique constraint.
    """
    if find_by_email(db, data.email) is not None:
        raise Conflict("User already exists with this email")

    account = Account(
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
    )
    db.add(account)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Signup lost race on unique email: {data.email}")
        raise Conflict("User already exists with this email")
    db.refresh(account)
    logger.info(f"Created account id={account.id}")
    return account


def authenticate(db: Session, email: str, password: str) -> Account:
    """
    Credential login.

    Raises:
        InvalidCredentials: unknown email, wrong password, or an account
            without a password. The error does not reveal which.
    """
    account = find_by_email(db, email or "")
    if account is None:
        verify_password(password or "", _DUMMY_HASH)
        logger.info("Login failed")
        raise InvalidCredentials()
    if not verify_password(password or "", account.password_hash):
        logger.info("Login failed")
        raise InvalidCredentials()
    return account


def link_or_create_google_account(db: Session, profile: GoogleProfile) -> Account:
    """
    Resolve the account for a Google profile:
    1. an account already linked to this Google id
    2. an account with the same email, which gets the Google id and avatar attached
    3. otherwise a new verified account
    """
    account = db.query(Account).filter(Account.google_id == profile.google_id).first()
    if account is not None:
        return account

    account = find_by_email(db, profile.email)
    if account is not None:
        account.google_id = profile.google_id
        if profile.avatar:
            account.avatar = profile.avatar
        db.commit()
        db.refresh(account)
        logger.info(f"Linked Google id to existing account id={account.id}")
        return account

    account = Account(
        name=profile.name,
        email=profile.email,
        google_id=profile.google_id,
        avatar=profile.avatar,
        is_verified=True,
    )
    db.add(account)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent callback for the same person created it first
        db.rollback()
        account = db.query(Account).filter(Account.google_id == profile.google_id).first()
        if account is not None:
            return account
        raise
    db.refresh(account)
    logger.info(f"Created account id={account.id} from Google sign-in")
    return account
