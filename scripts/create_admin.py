#!/usr/bin/env python3
"""
Create an admin account directly in the store.
Admins cannot sign up through the API, so operators bootstrap them with this script.
Run it with DATABASE_URL, JWT_SECRET, and JWT_EXPIRES set; it exits non-zero when the email is taken.
"""

from __future__ import annotations

import argparse
import getpass
import json
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from marketplace.api.api_config import get_api_config
from marketplace.api.db_access import DatabaseClient
from marketplace.api.error_handlers import APIError
from marketplace.api.services.auth_service import AuthService
from marketplace.api.validation import normalize_email, validate_name, validate_password
from marketplace.common.logging import configure_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument(
        "--password",
        default=None,
        help="Password for the account; prompted for when omitted.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config = get_api_config()
    configure_logging(config.log_level)

    password = args.password or getpass.getpass("Admin password: ")
    try:
        # same account rules as signup, checked before touching the store
        name = validate_name(args.name)
        email = normalize_email(args.email)
        password = validate_password(password)
    except APIError as exc:
        print(f"Admin creation failed: {exc.message}", file=sys.stderr)
        sys.exit(1)

    db = DatabaseClient(database_url=config.database_url)
    try:
        db.create_schema()
        service = AuthService(config=config, db=db)
        profile = service.create_user(name=name, email=email, password=password, role="admin")
    except APIError as exc:
        print(f"Admin creation failed: {exc.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.dispose()

    print(json.dumps({"id": profile["id"], "email": profile["email"], "role": profile["role"]}, indent=2))


if __name__ == "__main__":
    main()
