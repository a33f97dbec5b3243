#!/usr/bin/env python3
"""
Find slots holding more than one confirmed booking and cancel all but the oldest.

Usage:
  python3 scripts/reconcile_bookings.py --date 2025-06-01 --dry-run
  python3 scripts/reconcile_bookings.py

Uses the booking store selected by STORE_PROVIDER (see .env).
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

try:
    from dotenv import load_dotenv

    load_dotenv()
except Exception:
    pass

from app.wiring.dependencies import get_reconcile_use_case


def main() -> int:
    parser = argparse.ArgumentParser(description="Cancel duplicate bookings for the same slot")
    parser.add_argument("--date", default=None, help="Only reconcile this date (YYYY-MM-DD)")
    parser.add_argument("--dry-run", action="store_true", help="Report duplicates without cancelling")
    args = parser.parse_args()

    groups = get_reconcile_use_case().execute(date=args.date, dry_run=args.dry_run)

    if not groups:
        print("No duplicate bookings found.")
        return 0

    action = "Would cancel" if args.dry_run else "Cancelled"
    for group in groups:
        slot = group.slot
        print(f"{slot.date} {slot.time} {slot.groomer}: kept #{group.kept_id}, {action.lower()} {group.cancelled_ids}")
    total = sum(len(g.cancelled_ids) for g in groups)
    print(f"{action} {total} booking(s) across {len(groups)} slot(s).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
