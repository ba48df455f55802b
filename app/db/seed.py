from typing import Optional

from loguru import logger
from sqlmodel import Session

from app.core.config import Settings
from app.models.enums import UserRole
from app.models.user import User
from app.services.user_directory import UserDirectory


def seed_admin(session: Session, source: Settings) -> Optional[User]:
    """Create the configured admin account once, with a confirmed email."""
    if not source.ADMIN_USERNAME or not source.ADMIN_PASSWORD:
        return None
    directory = UserDirectory(session)
    if directory.find_by_username(source.ADMIN_USERNAME):
        return None
    user = directory.create_user(
        username=source.ADMIN_USERNAME,
        email=source.ADMIN_EMAIL or f'{source.ADMIN_USERNAME}@localhost',
        password=source.ADMIN_PASSWORD,
        full_name=source.ADMIN_FULL_NAME,
        roles=(UserRole.ADMIN, UserRole.USER),
        email_confirmed=True,
    )
    logger.info('seeded admin account {}', user.id)
    return user
