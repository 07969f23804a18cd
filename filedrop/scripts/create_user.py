"""
Create an account and print its API key. Run from project root:
  python -m filedrop.scripts.create_user USERNAME PASSWORD [--email EMAIL] [--admin]
Example:
  python -m filedrop.scripts.create_user alice your-secure-password --admin
"""
import argparse
import sys

from sqlalchemy.orm import Session

from filedrop.core.database import SessionLocal
from filedrop.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    generate_api_key,
    hash_password,
)
from filedrop.models.user import User


def create_user(
    db: Session,
    username: str,
    password: str,
    email: str | None = None,
    is_admin: bool = False,
) -> User:
    """Insert a user with a bcrypt password hash and a fresh API key."""
    user = User(
        username=username,
        hashed_password=hash_password(password),
        email=email,
        is_admin=is_admin,
        api_key=generate_api_key(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a filedrop account (no registration UI).")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("--email", default=None)
    parser.add_argument("--admin", action="store_true", help="Grant administrator flag")
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.username == username).first()
        if existing:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        user = create_user(db, username, args.password, args.email, args.admin)
        role = "admin" if user.is_admin else "user"
        print(f"Created {role} '{username}' (id={user.id}).")
        print(f"API key: {user.api_key}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
