"""
Create a user (e.g. a recovery admin). Run from project root:
  python -m app.scripts.create_user NAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user "Ops Admin" ops@example.com 'Sup3rSecret' admin
"""
import argparse
import sys

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy import select

from app.core.database import SessionLocal
from app.core.security import PASSWORD_POLICY_MESSAGE, is_strong_password
from app.models.user import ROLE_ADMIN, User
from app.services.auth import AuthServiceError, sign_up_email

_email_adapter = TypeAdapter(EmailStr)


def parse_email(value: str) -> str:
    """Validate an address with the same rules the API applies."""
    return _email_adapter.validate_python(value.strip())


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Talos console user.")
    parser.add_argument("name", help="Display name (1-100 chars)")
    parser.add_argument("email", help="Email address (must be unique)")
    parser.add_argument("password", help="Password (8-128 chars, mixed case and a digit)")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    args = parser.parse_args(argv)

    name = args.name.strip()
    if not name or len(name) > 100:
        print("Invalid name length.", file=sys.stderr)
        return 1
    try:
        email = parse_email(args.email)
    except ValidationError:
        print(f"Invalid email address: {args.email}", file=sys.stderr)
        return 1
    if not is_strong_password(args.password):
        print(f"Password must be 8-128 characters. {PASSWORD_POLICY_MESSAGE}.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        existing = db.scalar(select(User.id).where(User.email == email))
        if existing:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        try:
            user = sign_up_email(db, name, email, args.password)
        except AuthServiceError as e:
            print(f"Could not create user: {e.message}", file=sys.stderr)
            return 1
        if args.role == ROLE_ADMIN:
            user.role = ROLE_ADMIN
            db.commit()
        print(f"Created user '{email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
