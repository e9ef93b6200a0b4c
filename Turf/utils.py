# turf/utils.py
from datetime import date, datetime, timedelta

SLOT_LENGTH = timedelta(hours=1)

BASE_DATE = date(2000, 1, 1)


def operating_window(open_time, close_time):
    """
    Opening and closing as datetimes on a fixed day.
    A closing time at or before the opening time runs past midnight.
    """
    opens_at = datetime.combine(BASE_DATE, open_time)
    closes_at = datetime.combine(BASE_DATE, close_time)

    if closes_at <= opens_at:
        closes_at += timedelta(days=1)

    return opens_at, closes_at


def place_in_window(open_time, close_time, start_time, end_time):
    """
    Place a start/end pair on the turf's operating timeline.
    Times before the opening belong to the after-midnight part of the
    window; an end at or before the start falls on the next day.
    """
    opens_at, _ = operating_window(open_time, close_time)

    start_at = datetime.combine(BASE_DATE, start_time)
    if start_at < opens_at:
        start_at += timedelta(days=1)

    end_at = datetime.combine(start_at.date(), end_time)
    if end_at <= start_at:
        end_at += timedelta(days=1)

    return start_at, end_at


def generate_hour_slots(open_time, close_time):
    """Start times of the 1-hour slots in [open_time, close_time)."""
    slots = []

    current, end = operating_window(open_time, close_time)

    while current + SLOT_LENGTH <= end:
        slots.append(current.time())
        current += SLOT_LENGTH

    return slots


def slot_end(start_time):
    return (datetime.combine(BASE_DATE, start_time) + SLOT_LENGTH).time()


def format_time(value):
    return value.strftime("%H:%M") if value else None
