from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel
from app.models.base import IDModel, TimestampModel, UTCDateTime


class User(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'users'

    username: str = Field(index=True, unique=True, max_length=50)
    email: str = Field(index=True, unique=True, max_length=255)
    full_name: str = Field(default='', max_length=255)
    hashed_password: str = Field(max_length=255)
    is_active: bool = True
    email_confirmed: bool = False
    access_failed_count: int = 0
    lockout_enabled: bool = True
    lockout_end: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
