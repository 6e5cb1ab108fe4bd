#!/usr/bin/env python3
"""
Close out a month's daily sales into monthly rollups.
Meant for an external scheduler, e.g. cron "10 0 1 * *".
Usage: python run_monthly_rollup.py [YYYY-MM]   (defaults to the previous month)
"""
import logging
import sys

from salesboard.core.config import settings
from salesboard.core.database import SessionLocal
from salesboard.services.rollup_service import default_rollup_month, perform_rollup


def main() -> None:
    logging.basicConfig(level=settings.log_level.upper())
    month_key = sys.argv[1] if len(sys.argv) > 1 else default_rollup_month()
    with SessionLocal() as db:
        written = perform_rollup(db, month_key)
    print(f"Rolled up {month_key}: {written} store/KPI rows")


if __name__ == "__main__":
    main()
