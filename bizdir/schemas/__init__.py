from bizdir.schemas.account import AccountRead, AuthResponse, LoginRequest, MeResponse, SignupRequest
from bizdir.schemas.business import (
    BusinessEnvelope,
    BusinessFields,
    BusinessRead,
    BusinessSearchResponse,
    BusinessUpdate,
    MessageResponse,
    PhotoRead,
    ReverseGeocodeResponse,
)
from bizdir.schemas.upload import FileRead, UploadMultipleResponse, UploadResponse

__all__ = [
    "AccountRead",
    "AuthResponse",
    "LoginRequest",
    "MeResponse",
    "SignupRequest",
    "BusinessEnvelope",
    "BusinessFields",
    "BusinessRead",
    "BusinessSearchResponse",
    "BusinessUpdate",
    "MessageResponse",
    "PhotoRead",
    "ReverseGeocodeResponse",
    "FileRead",
    "UploadMultipleResponse",
    "UploadResponse",
]
