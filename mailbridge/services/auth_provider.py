"""
Supply bearer tokens for Microsoft Graph calls.

The provider authorizes with the device-code flow the first time, persists the
resulting token record, and refreshes it lazily: expiry is only checked when
someone asks for a token, never on a timer.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from mailbridge.clients.microsoft_auth import (
    AuthorizationError,
    DeviceCodeExpiredError,
    MicrosoftIdentityClient,
    RefreshFailedError,
)
from mailbridge.models.oauth import TokenRecord
from mailbridge.schemas.auth import TokenError, TokenGrant
from mailbridge.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

AUTH_STORE_KEY = "auth"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthState(str, enum.Enum):
    NO_CREDENTIAL = "no_credential"
    VALID = "valid"
    EXPIRED = "expired"
    AUTHORIZING = "authorizing"
    REFRESHING = "refreshing"
    FAILED = "failed"


class AuthProvider:
    """Hand out a currently valid access token on demand.

    ``get_access_token`` must be called before every request; the returned
    token is only guaranteed to be valid at the moment it is returned.
    Concurrent callers are serialized so a single refresh serves all of them,
    which matters because the server may rotate refresh tokens.
    """

    def __init__(
        self,
        identity_client: MicrosoftIdentityClient,
        credential_store: CredentialStore,
        *,
        print_message: Callable[[str], object] = print,
        clock: Callable[[], datetime] = _utcnow,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        expiry_margin: timedelta = timedelta(0),
        authorization_timeout: Optional[float] = None,
    ) -> None:
        self._identity = identity_client
        self._store = credential_store
        self._print_message = print_message
        self._clock = clock
        self._sleep = sleep
        self._expiry_margin = expiry_margin
        self._authorization_timeout = authorization_timeout
        self._lock = asyncio.Lock()
        self._phase: Optional[AuthState] = None

        self._record = self._store.load(AUTH_STORE_KEY)
        if self._record is not None:
            logger.info("Loaded saved credentials")

    @property
    def state(self) -> AuthState:
        if self._phase is not None:
            return self._phase
        if self._record is None:
            return AuthState.NO_CREDENTIAL
        if self._record.is_expired(self._clock(), self._expiry_margin):
            return AuthState.EXPIRED
        return AuthState.VALID

    @property
    def record(self) -> Optional[TokenRecord]:
        return self._record

    async def get_access_token(self) -> str:
        """Return an access token, authorizing or refreshing first if needed."""
        async with self._lock:
            self._phase = None
            try:
                if self._record is None:
                    self._phase = AuthState.AUTHORIZING
                    record = await self._authorize()
                elif self._record.is_expired(self._clock(), self._expiry_margin):
                    logger.info("Access token has expired; refreshing")
                    self._phase = AuthState.REFRESHING
                    record = await self._refresh(self._record.refresh_token)
                else:
                    return self._record.access_token
            except BaseException:
                self._phase = AuthState.FAILED
                raise

            self._record = record
            self._store.save(AUTH_STORE_KEY, record)
            self._phase = None
            return record.access_token

    async def _authorize(self) -> TokenRecord:
        authorization = await self._identity.start_device_flow()
        self._print_message(authorization.message)

        started = self._clock()
        deadline = started + timedelta(seconds=authorization.expires_in)
        if self._authorization_timeout is not None:
            deadline = min(
                deadline, started + timedelta(seconds=self._authorization_timeout)
            )

        logger.info("Waiting for authorization...")
        response = await self._identity.poll_device_token(authorization.device_code)
        while isinstance(response, TokenError) and response.is_pending:
            await self._sleep(authorization.interval)
            if self._clock() >= deadline:
                raise DeviceCodeExpiredError(
                    "Device code has expired. Please, try again."
                )
            response = await self._identity.poll_device_token(
                authorization.device_code
            )

        if isinstance(response, TokenError):
            raise DeviceCodeExpiredError(
                f"Authorization failed: {response.describe()}. Please, try again."
            )

        logger.info("Device authorization completed")
        return self._record_from_grant(response)

    async def _refresh(self, refresh_token: str) -> TokenRecord:
        response = await self._identity.refresh_token(refresh_token)
        if isinstance(response, TokenError):
            raise RefreshFailedError(response.describe())
        return self._record_from_grant(response)

    def _record_from_grant(self, grant: TokenGrant) -> TokenRecord:
        return TokenRecord.issued(
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_in=grant.expires_in,
            issued_at=self._clock(),
        )


__all__ = [
    "AUTH_STORE_KEY",
    "AuthProvider",
    "AuthState",
    "AuthorizationError",
]
