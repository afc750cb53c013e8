"""Create a PartnerPulse user.

Usage:
    python -m app.scripts.create_user --email you@example.com --password <password> [--name "Your Name"]
"""

from __future__ import annotations

import argparse
import sys

from app.db.session import SessionLocal
from app.services.auth import EmailAlreadyRegisteredError, create_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a PartnerPulse user")
    parser.add_argument("--email", required=True, help="Login email for the new user")
    parser.add_argument("--password", required=True, help="Password for the new user")
    parser.add_argument("--name", default=None, help="Display name")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        try:
            user = create_user(db, args.email, args.password, name=args.name)
        except EmailAlreadyRegisteredError:
            print(f"User '{args.email}' already exists.")
            return 1
        print(f"User '{user.email}' created successfully (id={user.id}).")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
