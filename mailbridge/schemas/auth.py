"""Payloads exchanged with the Microsoft identity platform device-code endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

AUTHORIZATION_PENDING = "authorization_pending"


class DeviceAuthorization(BaseModel):
    """Response of the device-code initiation endpoint."""

    device_code: str
    user_code: str
    verification_uri: str
    expires_in: int = Field(..., description="Lifetime of the device code in seconds.")
    interval: int = Field(5, description="Seconds to wait between token polls.")
    message: str = Field(..., description="Human-readable sign-in instructions.")


class TokenGrant(BaseModel):
    """Successful token endpoint response."""

    kind: Literal["grant"] = "grant"
    token_type: str
    scope: str = ""
    expires_in: int
    access_token: str
    refresh_token: str
    id_token: Optional[str] = None


class TokenError(BaseModel):
    """Error payload returned by the token endpoint, usually with HTTP 400."""

    kind: Literal["error"] = "error"
    error: str
    error_description: str = ""
    error_codes: List[int] = Field(default_factory=list)
    timestamp: Optional[str] = None
    trace_id: Optional[str] = None
    correlation_id: Optional[str] = None
    error_uri: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.error == AUTHORIZATION_PENDING

    def describe(self) -> str:
        return self.error_description or self.error


TokenResponse = Union[TokenGrant, TokenError]


def parse_token_response(payload: Dict[str, Any]) -> TokenResponse:
    """Decide once whether a token endpoint payload is a grant or an error."""
    if "token_type" in payload:
        return TokenGrant.model_validate(payload)
    if "error" in payload:
        return TokenError.model_validate(payload)
    raise ValueError("Token endpoint returned neither a token nor an error.")


__all__ = [
    "AUTHORIZATION_PENDING",
    "DeviceAuthorization",
    "TokenError",
    "TokenGrant",
    "TokenResponse",
    "parse_token_response",
]
