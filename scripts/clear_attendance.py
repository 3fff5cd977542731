"""
Delete ALL attendance records (every user, every day). Asks for confirmation
unless --yes is passed.

Usage:
  python scripts/clear_attendance.py [--yes]
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from opsdesk.db.session import SessionLocal
from opsdesk.models.attendance import AttendanceRecord


def main():
    parser = argparse.ArgumentParser(description="Delete all attendance records")
    parser.add_argument("--yes", action="store_true", help="Skip confirmation prompt")
    args = parser.parse_args()

    if not args.yes:
        answer = input("Delete every attendance record? [y/N] ")
        if answer.strip().lower() != "y":
            print("Aborted")
            return

    db = SessionLocal()
    try:
        deleted = db.query(AttendanceRecord).delete(synchronize_session=False)
        db.commit()
        print(f"Deleted {deleted} attendance records")
    finally:
        db.close()


if __name__ == "__main__":
    main()
