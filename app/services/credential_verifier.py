from dataclasses import dataclass

from loguru import logger

from app.core.errors import (
    EmailNotConfirmedError,
    InvalidCredentialError,
    LockedOutError,
    UnknownUsernameError,
)
from app.models.user import User
from app.services.user_directory import UserDirectory


@dataclass(frozen=True)
class Principal:
    user_id: str
    username: str
    full_name: str
    roles: tuple[str, ...] = ()


def build_principal(directory: UserDirectory, user: User) -> Principal:
    return Principal(
        user_id=user.id,
        username=user.username,
        full_name=user.full_name or user.username,
        roles=tuple(directory.get_roles(user)),
    )


def verify_credentials(directory: UserDirectory, username: str, password: str) -> Principal:
    """Check ``username``/``password`` and return the authenticated principal.

    Checks run in a fixed order: existence, lockout, password, email
    confirmation. A wrong password is recorded against the lockout counter
    before the error is raised; a correct one clears the counter.
    """
    user = directory.find_by_username(username)
    if user is None:
        logger.warning('login rejected: unknown username {!r}', username)
        raise UnknownUsernameError(f'User with username {username} not found')

    if directory.is_locked_out(user):
        logger.warning('login rejected: user {} is locked out', user.id)
        raise LockedOutError()

    if not directory.check_password(user, password):
        directory.record_access_failure(user)
        logger.warning('login rejected: invalid password for user {}', user.id)
        raise InvalidCredentialError(f'Invalid password for user {username}', field='password')
    directory.reset_access_failure_count(user)

    if not directory.is_email_confirmed(user):
        logger.warning('login rejected: email not confirmed for user {}', user.id)
        raise EmailNotConfirmedError()

    return build_principal(directory, user)
