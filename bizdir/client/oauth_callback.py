"""
Handling of the browser landing on /auth/callback?token=... after Google sign-in.

States: awaiting-token -> verifying -> redirect-success | redirect-failure.
The token in the URL is not trusted until /api/auth/me accepts it, so a
token that arrived but whose profile is not yet loaded is an explicit
"verifying" state rather than a race between two watchers.
"""

import logging
from enum import Enum
from typing import Mapping, Optional

from bizdir.client.api import ApiError, DirectoryClient

logger = logging.getLogger(__name__)

FAILURE_PATH = "/"


def _local_path(path: Optional[str]) -> Optional[str]:
    """Only same-site paths; "//host" is protocol-relative and rejected."""
    if path and path.startswith("/") and not path.startswith("//"):
        return path
    return None


class CallbackState(str, Enum):
    AWAITING_TOKEN = "awaiting-token"
    VERIFYING = "verifying"
    REDIRECT_SUCCESS = "redirect-success"
    REDIRECT_FAILURE = "redirect-failure"


class InvalidTransition(Exception):
    pass


class OAuthCallbackFlow:
    def __init__(self, client: DirectoryClient):
        self.client = client
        self.state = CallbackState.AWAITING_TOKEN
        self.token: Optional[str] = None
        self.redirect_to: Optional[str] = None
        self.error: Optional[str] = None
        self.next_path: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.state in (CallbackState.REDIRECT_SUCCESS, CallbackState.REDIRECT_FAILURE)

    def receive(self, query_params: Mapping[str, str]) -> CallbackState:
        """Read the one-time token from the callback URL's query string."""
        if self.state is not CallbackState.AWAITING_TOKEN:
            raise InvalidTransition(f"receive() in state {self.state.value}")
        token = (query_params.get("token") or "").strip()
        if not token:
            return self._fail(query_params.get("error") or "missing_token")
        self.token = token
        self.next_path = _local_path(query_params.get("next"))
        self.state = CallbackState.VERIFYING
        return self.state

    def verify(self) -> CallbackState:
        """Confirm the token with the server and settle on a redirect target."""
        if self.state is not CallbackState.VERIFYING:
            raise InvalidTransition(f"verify() in state {self.state.value}")
        try:
            data = self.client.me(token=self.token)
        except ApiError as e:
            logger.warning(f"OAuth token rejected: {e.status_code} {e.message}")
            return self._fail("verification_failed")

        self.client.session.sign_in(self.token, data["user"])
        self.redirect_to = self.client.session.pop_redirect(default=self.next_path or "/")
        self.state = CallbackState.REDIRECT_SUCCESS
        return self.state

    def run(self, query_params: Mapping[str, str]) -> CallbackState:
        if self.receive(query_params) is CallbackState.VERIFYING:
            self.verify()
        return self.state

    def _fail(self, reason: str) -> CallbackState:
        self.error = reason
        self.client.session.sign_out()
        self.client.session.pop_redirect()
        self.redirect_to = FAILURE_PATH
        self.state = CallbackState.REDIRECT_FAILURE
        return self.state
