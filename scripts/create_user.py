#!/usr/bin/env python3
from __future__ import annotations

import argparse
import getpass

from sqlmodel import Session

from app.core.errors import ValidationError
from app.db.init_db import init_db
from app.db.session import engine
from app.models.enums import UserRole
from app.services.user_directory import UserDirectory


def main() -> None:
    parser = argparse.ArgumentParser(description='Create a user account.')
    parser.add_argument('username')
    parser.add_argument('email')
    parser.add_argument('--full-name', default='', help='Display name used in access tokens')
    parser.add_argument('--roles', default='user', help='Comma separated roles (user, admin)')
    parser.add_argument('--password', help='Password; prompted for when omitted')
    parser.add_argument('--unconfirmed', action='store_true', help='Leave the email unconfirmed')
    args = parser.parse_args()

    password = args.password or getpass.getpass('Password: ')
    init_db()
    with Session(engine) as session:
        try:
            user = UserDirectory(session).create_user(
                username=args.username,
                email=args.email,
                password=password,
                full_name=args.full_name,
                roles=UserRole.parse_list(args.roles) or [UserRole.USER],
                email_confirmed=not args.unconfirmed,
            )
        except ValidationError as exc:
            parser.error(exc.message)
    print(f"created user {user.username} ({user.id})")


if __name__ == '__main__':
    main()
