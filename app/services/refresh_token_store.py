import base64
import secrets
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import update
from sqlalchemy.orm.attributes import set_committed_value
from sqlmodel import Session, col, select

from app.models.base import utc_now
from app.models.refresh_token import RefreshToken

REFRESH_TOKEN_BYTES = 64


def generate_token_value() -> str:
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode('ascii')


class RefreshTokenStore:
    """Refresh token persistence.

    Nothing here commits: new and revoked records become durable when the
    caller's transaction commits.
    """

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        user_id: str,
        expires_at: datetime,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> RefreshToken:
        record = RefreshToken(
            token=generate_token_value(),
            user_id=user_id,
            expires_at=expires_at,
            device_info=device_info,
            ip_address=ip_address,
        )
        self.session.add(record)
        self.session.flush()
        return record

    def find_by_value(self, token: str) -> Optional[RefreshToken]:
        return self.session.exec(select(RefreshToken).where(RefreshToken.token == token)).first()

    def list_active_for_user(self, user_id: str, now: Optional[datetime] = None) -> Sequence[RefreshToken]:
        now = now or utc_now()
        return self.session.exec(
            select(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .where(col(RefreshToken.revoked_at).is_(None))
            .where(RefreshToken.expires_at > now)
            .order_by(col(RefreshToken.created_at).desc())
        ).all()

    def revoke(self, record: RefreshToken, now: Optional[datetime] = None) -> None:
        if record.revoked_at is not None:
            return
        record.revoked_at = now or utc_now()
        self.session.add(record)
        self.session.flush()

    def revoke_if_active(self, record: RefreshToken, now: Optional[datetime] = None) -> bool:
        """Revoke ``record`` only if the stored row is still active.

        The check and the write are a single conditional UPDATE, so of two
        transactions racing on the same token only one sees a changed row.
        """
        now = now or utc_now()
        result = self.session.execute(
            update(RefreshToken)
            .where(col(RefreshToken.id) == record.id)
            .where(col(RefreshToken.revoked_at).is_(None))
            .where(col(RefreshToken.expires_at) > now)
            .values(revoked_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        set_committed_value(record, 'revoked_at', now)
        set_committed_value(record, 'updated_at', now)
        return True
