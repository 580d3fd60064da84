"""Expose API payload schemas."""

from .auth import (
    AUTHORIZATION_PENDING,
    DeviceAuthorization,
    TokenError,
    TokenGrant,
    TokenResponse,
    parse_token_response,
)
from .mail import DeltaPage, GraphUser, MailFolder, Message

__all__ = [
    "AUTHORIZATION_PENDING",
    "DeltaPage",
    "DeviceAuthorization",
    "GraphUser",
    "MailFolder",
    "Message",
    "TokenError",
    "TokenGrant",
    "TokenResponse",
    "parse_token_response",
]
