from sqlmodel import Session

from app.models.base import ensure_utc
from app.models.user import User
from app.schemas.user import SessionOut, UserOut
from app.services.refresh_token_store import RefreshTokenStore
from app.services.user_directory import UserDirectory


def to_user_out(session: Session, user: User) -> UserOut:
    return UserOut(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        is_active=user.is_active,
        email_confirmed=user.email_confirmed,
        roles=UserDirectory(session).get_roles(user),
    )


def list_sessions(session: Session, user_id: str) -> list[SessionOut]:
    records = RefreshTokenStore(session).list_active_for_user(user_id)
    return [
        SessionOut(
            id=record.id,
            device_info=record.device_info,
            ip_address=record.ip_address,
            created_at=ensure_utc(record.created_at),
            expires_at=ensure_utc(record.expires_at),
        )
        for record in records
    ]
