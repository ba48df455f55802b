from enum import Enum
import sqlalchemy as sa
from sqlalchemy import Column


class UserRole(str, Enum):
    ADMIN = 'admin'
    USER = 'user'

    @classmethod
    def parse_list(cls, raw: str) -> list['UserRole']:
        """Parse a comma separated role list, e.g. ``"admin, user"``."""
        names = [item.strip().lower() for item in raw.split(',') if item.strip()]
        return [cls(name) for name in dict.fromkeys(names)]


def enum_column(enum_cls: type[Enum], name: str) -> Column:
    return Column(
        sa.Enum(
            enum_cls,
            values_callable=lambda enum: [item.value for item in enum],
            name=name,
        ),
        nullable=False,
    )
