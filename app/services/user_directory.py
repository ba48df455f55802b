from typing import Callable, Iterable, Optional
from datetime import datetime

from loguru import logger
from passlib.context import CryptContext
from sqlalchemy import update
from sqlmodel import Session, col, select

from app.core.config import LockoutPolicy
from app.core.errors import ValidationError
from app.models.base import ensure_utc, utc_now
from app.models.enums import UserRole
from app.models.user import User
from app.models.user_role import UserRoleAssignment

pwd_context = CryptContext(schemes=['bcrypt'], deprecated='auto')


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    return pwd_context.verify(password, hashed_password)


class UserDirectory:
    """User lookups, password checks and lockout bookkeeping.

    Lockout follows a counter-and-window policy: every failed password check
    bumps ``access_failed_count``; reaching ``policy.max_failed_attempts`` sets
    ``lockout_end`` to ``now + policy.window`` and resets the counter.
    """

    def __init__(
        self,
        session: Session,
        *,
        policy: LockoutPolicy = LockoutPolicy(),
        now_fn: Callable[[], datetime] = utc_now,
    ):
        self.session = session
        self.policy = policy
        self.now_fn = now_fn

    def find_by_username(self, username: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.username == username)).first()

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def check_password(self, user: User, password: str) -> bool:
        return verify_password(password, user.hashed_password)

    def is_locked_out(self, user: User) -> bool:
        if not user.lockout_enabled or user.lockout_end is None:
            return False
        return ensure_utc(user.lockout_end) > self.now_fn()

    def record_access_failure(self, user: User) -> None:
        # Increment in the database so parallel failures are all counted.
        self.session.execute(
            update(User)
            .where(col(User.id) == user.id)
            .values(access_failed_count=col(User.access_failed_count) + 1)
            .execution_options(synchronize_session=False)
        )
        failed_count = self.session.exec(
            select(User.access_failed_count).where(User.id == user.id)
        ).one()
        if failed_count >= self.policy.max_failed_attempts:
            lockout_end = self.now_fn() + self.policy.window
            locked = self.session.execute(
                update(User)
                .where(
                    col(User.id) == user.id,
                    col(User.lockout_enabled).is_(True),
                    col(User.access_failed_count) >= self.policy.max_failed_attempts,
                )
                .values(lockout_end=lockout_end, access_failed_count=0)
                .execution_options(synchronize_session=False)
            )
            if locked.rowcount == 1:
                logger.warning('user {} locked out until {}', user.id, lockout_end)
        self.session.commit()

    def reset_access_failure_count(self, user: User) -> None:
        result = self.session.execute(
            update(User)
            .where(col(User.id) == user.id, col(User.access_failed_count) != 0)
            .values(access_failed_count=0)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        if result.rowcount:
            logger.debug('cleared failed login count for user {}', user.id)

    def is_email_confirmed(self, user: User) -> bool:
        return user.email_confirmed

    def get_roles(self, user: User) -> list[str]:
        rows = self.session.exec(
            select(UserRoleAssignment.role).where(UserRoleAssignment.user_id == user.id)
        ).all()
        return sorted(UserRole(role).value for role in rows)

    def create_user(
        self,
        *,
        username: str,
        email: str,
        password: str,
        full_name: str = '',
        roles: Iterable[UserRole] = (UserRole.USER,),
        email_confirmed: bool = False,
    ) -> User:
        if self.find_by_username(username):
            raise ValidationError('Username already exists', field='username')
        if self.session.exec(select(User).where(User.email == email)).first():
            raise ValidationError('Email already registered', field='email')
        user = User(
            username=username,
            email=email,
            full_name=full_name,
            hashed_password=hash_password(password),
            email_confirmed=email_confirmed,
        )
        self.session.add(user)
        self.session.flush()
        for role in set(roles):
            self.session.add(UserRoleAssignment(user_id=user.id, role=role))
        self.session.commit()
        self.session.refresh(user)
        return user
