"""Date manipulation utilities"""

from datetime import date, datetime, time, timedelta, timezone
from typing import List, Tuple


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def trailing_window_start(today: date, days: int) -> date:
    """First day of a trailing window of `days` ending on `today`"""
    return today - timedelta(days=days)


def utc_day(moment: datetime) -> date:
    """Calendar day of a timestamp in UTC. Naive timestamps are taken as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def utc_day_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    """Half-open [start 00:00, end+1 00:00) UTC range covering both days"""
    lower = datetime.combine(start, time.min, tzinfo=timezone.utc)
    upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return lower, upper


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
