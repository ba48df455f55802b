from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel
from app.models.base import IDModel, TimestampModel, UTCDateTime, ensure_utc, utc_now


class RefreshToken(IDModel, TimestampModel, SQLModel, table=True):
    """One login session. ``revoked_at`` is set once and never cleared."""

    __tablename__ = 'refresh_tokens'

    token: str = Field(index=True, unique=True, max_length=128)
    user_id: str = Field(index=True, foreign_key='users.id')
    expires_at: datetime = Field(sa_type=UTCDateTime, sa_column_kwargs={'nullable': False})
    revoked_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    device_info: Optional[str] = Field(default=None, max_length=512)
    ip_address: Optional[str] = Field(default=None, max_length=45)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) >= ensure_utc(self.expires_at)

    def is_active(self, now: Optional[datetime] = None) -> bool:
        return self.revoked_at is None and not self.is_expired(now)
