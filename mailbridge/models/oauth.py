"""
Domain models for OAuth token persistence.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def to_epoch_millis(value: datetime) -> int:
    """Convert an aware datetime to integer milliseconds since the epoch."""
    return (value - _EPOCH) // _ONE_MS


def from_epoch_millis(value: int) -> datetime:
    """Inverse of :func:`to_epoch_millis`; exact for integer input."""
    return _EPOCH + timedelta(milliseconds=int(value))


class TokenRecord(BaseModel):
    """The cached credential: access token, its expiry and the refresh token."""

    access_token: str = Field(..., min_length=1)
    expire_at: datetime
    refresh_token: str = Field(..., min_length=1)

    @field_validator("expire_at")
    @classmethod
    def _normalize_expiry(cls, value: datetime) -> datetime:
        # Stored as epoch milliseconds, so keep only that precision in memory.
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return from_epoch_millis(to_epoch_millis(value))

    @classmethod
    def issued(
        cls,
        *,
        access_token: str,
        refresh_token: str,
        expires_in: int,
        issued_at: datetime,
    ) -> "TokenRecord":
        """Build a record for a token the server just granted."""
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expire_at=issued_at + timedelta(seconds=expires_in),
        )

    def is_expired(
        self, now: datetime, margin: timedelta = timedelta(0)
    ) -> bool:
        return now >= self.expire_at - margin

    def to_storage(self) -> Dict[str, Any]:
        return {
            "accessToken": self.access_token,
            "expireDate": to_epoch_millis(self.expire_at),
            "refreshToken": self.refresh_token,
        }

    @classmethod
    def from_storage(cls, data: Dict[str, Any]) -> "TokenRecord":
        return cls(
            access_token=data["accessToken"],
            expire_at=from_epoch_millis(data["expireDate"]),
            refresh_token=data["refreshToken"],
        )


__all__ = ["TokenRecord", "from_epoch_millis", "to_epoch_millis"]
