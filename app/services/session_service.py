"""
Session lifecycle: login, logout and refresh-token rotation.

A refresh token is Active until it is revoked (logout or rotation) or its
expiry passes; neither state ever returns to Active. Refresh revokes the
presented token and creates its replacement in one transaction, so a replayed
token stops working as soon as the legitimate client has rotated it.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from loguru import logger
from sqlmodel import Session

from app.core.config import LockoutPolicy, TokenConfig
from app.core.errors import (
    AlreadyAuthenticatedError,
    InvalidOrExpiredTokenError,
    OperationCancelledError,
    RefreshTokenNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from app.db.unit_of_work import UnitOfWork
from app.models.base import utc_now
from app.services.credential_verifier import Principal, build_principal, verify_credentials
from app.services.refresh_token_store import RefreshTokenStore
from app.services.token_signer import TokenSigner
from app.services.user_directory import UserDirectory


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int
    refresh_expires_at: datetime
    token_type: str = 'bearer'


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError()


class SessionService:
    def __init__(
        self,
        *,
        uow: UnitOfWork,
        directory: UserDirectory,
        signer: TokenSigner,
        store: RefreshTokenStore,
        config: TokenConfig,
        now_fn: Callable[[], datetime] = utc_now,
    ):
        self.uow = uow
        self.directory = directory
        self.signer = signer
        self.store = store
        self.config = config
        self.now_fn = now_fn

    @classmethod
    def from_session(
        cls,
        session: Session,
        config: TokenConfig,
        policy: LockoutPolicy = LockoutPolicy(),
        now_fn: Callable[[], datetime] = utc_now,
    ) -> 'SessionService':
        return cls(
            uow=UnitOfWork(session),
            directory=UserDirectory(session, policy=policy, now_fn=now_fn),
            signer=TokenSigner(config, now_fn=now_fn),
            store=RefreshTokenStore(session),
            config=config,
            now_fn=now_fn,
        )

    # ---------- Login ----------
    def login(
        self,
        username: str,
        password: str,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
        *,
        current_user_id: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> TokenPair:
        if current_user_id:
            raise AlreadyAuthenticatedError()
        if not username:
            raise ValidationError('Username is required', field='username')
        if not password:
            raise ValidationError('Password is required', field='password')

        _check_cancelled(cancel_event)
        # Lockout bookkeeping commits on its own, outside the session transaction.
        principal = verify_credentials(self.directory, username, password)

        with self.uow.transaction():
            _check_cancelled(cancel_event)
            pair = self._issue_pair(principal, device_info, ip_address)

        logger.info('user {} logged in from {}', principal.user_id, ip_address)
        return pair

    # ---------- Logout ----------
    def logout(self, refresh_token: Optional[str], *, cancel_event: Optional[threading.Event] = None) -> bool:
        if not refresh_token:
            raise ValidationError('Refresh token is required', field='refresh_token')

        with self.uow.transaction():
            _check_cancelled(cancel_event)
            record = self.store.find_by_value(refresh_token)
            if record is None:
                raise RefreshTokenNotFoundError()
            now = self.now_fn()
            if not record.is_active(now) or not self.store.revoke_if_active(record, now):
                raise InvalidOrExpiredTokenError()
            session_id, user_id = record.id, record.user_id

        logger.info('user {} logged out session {}', user_id, session_id)
        return True

    # ---------- Refresh (rotation) ----------
    def refresh(
        self,
        refresh_token: Optional[str],
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> TokenPair:
        if not refresh_token:
            raise ValidationError('Refresh token is required', field='refresh_token')

        with self.uow.transaction():
            _check_cancelled(cancel_event)
            old = self.store.find_by_value(refresh_token)
            if old is None:
                raise RefreshTokenNotFoundError()

            now = self.now_fn()
            if not old.is_active(now):
                raise InvalidOrExpiredTokenError()

            user = self.directory.find_by_id(old.user_id)
            if user is None:
                raise UserNotFoundError()
            principal = build_principal(self.directory, user)

            _check_cancelled(cancel_event)
            if not self.store.revoke_if_active(old, now):
                # Another transaction rotated or revoked this token first.
                raise InvalidOrExpiredTokenError()

            _check_cancelled(cancel_event)
            pair = self._issue_pair(principal, device_info, ip_address)
            old_id = old.id

        logger.info('user {} rotated session {}', principal.user_id, old_id)
        return pair

    def _issue_pair(self, principal: Principal, device_info: Optional[str], ip_address: Optional[str]) -> TokenPair:
        access_token = self.signer.issue_access_token(principal)
        expires_at = self.now_fn() + self.config.refresh_ttl
        record = self.store.create(principal.user_id, expires_at, device_info, ip_address)
        return TokenPair(
            access_token=access_token,
            refresh_token=record.token,
            expires_in=int(self.config.access_ttl.total_seconds()),
            refresh_expires_at=expires_at,
        )
