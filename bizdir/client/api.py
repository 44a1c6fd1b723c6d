"""HTTP client for the directory API."""

import logging
from typing import Any, BinaryIO, Dict, Iterable, Optional, Tuple

import httpx

from bizdir.client.session import Session

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10.0

# (filename, content, content_type) as accepted by httpx multipart
PhotoUpload = Tuple[str, bytes | BinaryIO, str]


class ApiError(Exception):
    """Non-2xx response; message comes from the {"error": ...} envelope when present."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class DirectoryClient:
    """
    Thin wrapper over the REST endpoints.

    Pass an existing httpx.Client (FastAPI's TestClient works) or a base URL.
    Authenticated calls use the token held by the session.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        session: Optional[Session] = None,
        http: Optional[httpx.Client] = None,
    ):
        self.session = session or Session()
        self.http = http or httpx.Client(base_url=base_url, timeout=REQUEST_TIMEOUT)

    def _headers(self, auth: bool) -> Dict[str, str]:
        if not auth:
            return {}
        token = self.session.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _request(self, method: str, path: str, auth: bool = False, **kwargs) -> Any:
        headers = {**self._headers(auth), **kwargs.pop("headers", {})}
        try:
            response = self.http.request(method, path, headers=headers, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(0, "Network error")
        if response.status_code >= 400:
            try:
                message = response.json().get("error") or response.reason_phrase
            except ValueError:
                message = response.reason_phrase
            raise ApiError(response.status_code, message)
        return response.json()

    # Auth

    def signup(self, name: str, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/api/auth/signup", json={"name": name, "email": email, "password": password})
        self.session.sign_in(data["token"], data["user"])
        return data

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.session.sign_in(data["token"], data["user"])
        return data

    def me(self, token: Optional[str] = None) -> Dict[str, Any]:
        """Profile of the session token, or of an explicit token (used right after an OAuth redirect)."""
        if token is None:
            return self._request("GET", "/api/auth/me", auth=True)
        return self._request("GET", "/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    def logout(self) -> None:
        self.session.sign_out()

    # Businesses

    def list_businesses(self) -> list[Dict[str, Any]]:
        return self._request("GET", "/api/businesses")

    def search(
        self,
        q: Optional[str] = None,
        category: Optional[str] = None,
        location: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {k: v for k, v in (("q", q), ("category", category), ("location", location)) if v}
        return self._request("GET", "/api/businesses/search", params=params)

    def get_business(self, business_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/businesses/{business_id}")

    def create_business(self, fields: Dict[str, Any], photos: Iterable[PhotoUpload] = ()) -> Dict[str, Any]:
        data = {k: str(v) for k, v in fields.items() if v is not None}
        files = [("photos", photo) for photo in photos]
        return self._request("POST", "/api/businesses", auth=True, data=data, files=files or None)

    def update_business(self, business_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/api/businesses/{business_id}", auth=True, json=changes)

    def delete_business(self, business_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/businesses/{business_id}", auth=True)

    def reverse_geocode(self, lat: float, lng: float) -> Dict[str, Any]:
        return self._request("GET", "/api/geocode/reverse", params={"lat": lat, "lng": lng})
