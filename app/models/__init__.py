from app.models.base import IDModel, TimestampModel
from app.models.user import User
from app.models.user_role import UserRoleAssignment
from app.models.refresh_token import RefreshToken

__all__ = [
    'IDModel',
    'TimestampModel',
    'User',
    'UserRoleAssignment',
    'RefreshToken',
]
