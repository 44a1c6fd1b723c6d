"""
Client-side session: the bearer token and the signed-in profile.

The session is an explicit object handed to whatever needs it; persistence
goes through a TokenStorage so the same code works against memory (tests,
short-lived scripts) or a JSON file on disk.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
REDIRECT_KEY = "authRedirect"


class TokenStorage(ABC):
    """Small key/value persistence interface."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove(self, key: str) -> None: ...


class MemoryTokenStorage(TokenStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileTokenStorage(TokenStorage):
    """Keys persisted as one JSON object; a corrupt or missing file reads as empty."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class Session:
    """Token + profile of the signed-in account. The token survives restarts via storage; the profile does not."""

    def __init__(self, storage: Optional[TokenStorage] = None):
        self.storage = storage or MemoryTokenStorage()
        self.user: Optional[Dict[str, Any]] = None

    @property
    def token(self) -> Optional[str]:
        return self.storage.get(TOKEN_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.user is not None

    def sign_in(self, token: str, user: Optional[Dict[str, Any]] = None) -> None:
        self.storage.set(TOKEN_KEY, token)
        self.user = user

    def sign_out(self) -> None:
        self.storage.remove(TOKEN_KEY)
        self.user = None

    def remember_redirect(self, path: str) -> None:
        """Where to go after an external sign-in round trip."""
        self.storage.set(REDIRECT_KEY, path)

    def pop_redirect(self, default: str = "/") -> str:
        path = self.storage.get(REDIRECT_KEY) or default
        self.storage.remove(REDIRECT_KEY)
        return path
