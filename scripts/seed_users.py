"""
Seed team accounts. Existing emails are skipped.

Reads "email,name" CSV rows from the file given as the first argument
(quote names that contain commas); every account gets the password from
SEED_USER_PASSWORD.

Usage:
  SEED_USER_PASSWORD='...' python scripts/seed_users.py users.csv
"""
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from opsdesk.core.logging import setup_logging
from opsdesk.core.security import validate_password
from opsdesk.db.init_db import read_user_rows, seed_users
from opsdesk.db.session import SessionLocal


def main():
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    password = os.environ.get("SEED_USER_PASSWORD")
    if not password:
        print("SEED_USER_PASSWORD environment variable is not set")
        sys.exit(2)
    try:
        password = validate_password(password)
    except ValueError as e:
        print(f"SEED_USER_PASSWORD rejected: {e}")
        sys.exit(2)

    setup_logging()
    db = SessionLocal()
    try:
        with open(sys.argv[1], newline="", encoding="utf-8") as f:
            rows = [(email, name, password) for email, name in read_user_rows(f)]
        created = seed_users(db, rows)
        print(f"User seeding completed: {len(created)} created")
    finally:
        db.close()


if __name__ == "__main__":
    main()
