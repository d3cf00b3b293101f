"""
Create a user (e.g. first admin). Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD FIRSTNAME [--lastname NAME] [--role user|admin]
Example:
  python -m app.scripts.create_user admin your-secure-password Ada --role admin
"""
import argparse
import sys

from pydantic import ValidationError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import get_settings
from app.core.database import create_db_engine, create_session_factory
from app.core.exceptions import ConflictError
from app.core.log_config import configure_logging
from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from app.schemas.users import UserCreate
from app.services.users import create_user


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a user account from the shell.")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("firstname", help="First name")
    parser.add_argument("--lastname", default=None, help="Last name")
    parser.add_argument("--role", default="user", choices=["user", "admin"])
    return parser


def main(
    argv: list[str] | None = None,
    session_factory: sessionmaker[Session] | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    username = args.username.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1
    if not args.firstname.strip():
        print("First name must not be empty.", file=sys.stderr)
        return 1

    if session_factory is None:
        session_factory = create_session_factory(create_db_engine(settings))
    db = session_factory()
    try:
        data = UserCreate(
            username=username,
            password=args.password,
            firstname=args.firstname.strip(),
            lastname=args.lastname,
            role=args.role,
        )
        create_user(db, data, salt_rounds=settings.PASSWORD_SALT_ROUNDS)
        print(f"Created user '{username}' with role '{args.role}'.")
        return 0
    except ValidationError as e:
        print(f"Invalid user data: {e}", file=sys.stderr)
        return 1
    except ConflictError:
        print(f"User '{username}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
