from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from app.core.config import LockoutPolicy, TokenConfig
from app.core.errors import ForbiddenError, UnauthorizedError
from app.core.security import get_lockout_policy, get_token_config
from app.db.session import get_session
from app.models.enums import UserRole
from app.models.user import User
from app.services.session_service import SessionService
from app.services.token_signer import TokenSigner
from app.services.user_directory import UserDirectory

security = HTTPBearer(auto_error=False)


def get_session_service(
    session: Session = Depends(get_session),
    config: TokenConfig = Depends(get_token_config),
    policy: LockoutPolicy = Depends(get_lockout_policy),
) -> SessionService:
    return SessionService.from_session(session, config, policy)


def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    config: TokenConfig = Depends(get_token_config),
) -> Optional[str]:
    if credentials is None:
        return None
    try:
        payload = TokenSigner(config).decode_access_token(credentials.credentials)
    except UnauthorizedError:
        return None
    return payload['sub']


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: Session = Depends(get_session),
    config: TokenConfig = Depends(get_token_config),
) -> User:
    if credentials is None:
        raise UnauthorizedError('You must be logged in to access this resource.')
    payload = TokenSigner(config).decode_access_token(credentials.credentials)
    user = session.get(User, payload['sub'])
    if not user or not user.is_active:
        raise UnauthorizedError('User not found')
    return user


def require_admin(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> User:
    if UserRole.ADMIN.value not in UserDirectory(session).get_roles(user):
        raise ForbiddenError('You do not have permission to access this resource.')
    return user
