import logging
import uuid as uuid_lib
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bizdir.core.errors import Forbidden, Unauthenticated
from bizdir.core.security import decode_access_token
from bizdir.db.session import get_db
from bizdir.models.account import Account
from bizdir.models.business import Business

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must surface as our 401, not FastAPI's default 403
security = HTTPBearer(auto_error=False)


def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Account:
    """
    Resolve the Account behind the Bearer token.

    Raises:
        Unauthenticated: no token, invalid/expired token, or the account no longer exists.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Missing token")

    sub = decode_access_token(credentials.credentials)
    try:
        account_id = uuid_lib.UUID(sub)
    except (ValueError, TypeError):
        logger.warning(f"Invalid subject in token: {sub!r}")
        raise Unauthenticated("Invalid token")

    account = db.query(Account).filter(Account.id == account_id).first()
    if account is None:
        logger.warning(f"Token subject has no account: {account_id}")
        raise Unauthenticated("Account not found")
    return account


def require_owner(business: Business, account: Account, action: str = "modify") -> None:
    """Raise 403 unless account created the business."""
    if business.owner_id != account.id:
        logger.info(f"Account {account.id} denied {action} on business {business.id}")
        raise Forbidden(f"Not authorized to {action} this business")
