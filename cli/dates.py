"""Argument types for dates and months."""

import argparse
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD argument."""
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def parse_month(value: str) -> date:
    """Parse a YYYY-MM argument into the first day of that month."""
    try:
        year, month = value.split("-")
        return date(int(year), int(month), 1)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid month '{value}', expected YYYY-MM")


def default_period(months: int = 12, today: Optional[date] = None):
    """Get (start, end) covering the last N calendar months including this one."""
    today = today or date.today()
    start = today + relativedelta(months=-(months - 1), day=1)
    end = today + relativedelta(day=31)
    return start, end
