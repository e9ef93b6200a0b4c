"""
Slot pricing.

Pure functions only: no database access, no clock, no settings. A turf's
pricing rules are plain data (the ``Turf.pricing_rules`` JSON list), so the
same inputs always produce the same price.
"""
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError

SUN_THU = "sun_thu"
FRI_SAT = "fri_sat"
ALL_DAYS = "all_days"

DAY_TYPES = (SUN_THU, FRI_SAT, ALL_DAYS)

DEFAULT_RULE_LABEL = "default"

# Friday, Saturday (date.weekday(): Monday == 0)
WEEKEND_DAYS = {4, 5}

TIME_FORMAT = "%H:%M"

# Durations are measured on a fixed day so wall-clock math ignores DST
REFERENCE_DAY = date(2000, 1, 1)

TWO_PLACES = Decimal("0.01")


def parse_time(value):
    if isinstance(value, time):
        return value
    return datetime.strptime(value, TIME_FORMAT).time()


def to_decimal(value):
    return value if isinstance(value, Decimal) else Decimal(str(value))


def get_day_type(booking_date):
    return FRI_SAT if booking_date.weekday() in WEEKEND_DAYS else SUN_THU


def calculate_duration_hours(start_time, end_time):
    """Hours between start and end; an end at or before the start is past midnight."""
    start = datetime.combine(REFERENCE_DAY, parse_time(start_time))
    end = datetime.combine(REFERENCE_DAY, parse_time(end_time))

    if end <= start:
        end += timedelta(days=1)

    seconds = Decimal((end - start).total_seconds())
    return (seconds / Decimal(3600)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def select_rule(pricing_rules, day_type):
    """Day-type specific rule first, then the all-days fallback."""
    for wanted in (day_type, ALL_DAYS):
        for rule in pricing_rules or []:
            if rule.get("day_type") == wanted:
                return rule
    return None


def find_time_slot(rule, start_time):
    # First slot whose half-open [start, end) range holds the start time
    start = parse_time(start_time)
    for slot in rule.get("time_slots", []):
        if parse_time(slot["start_time"]) <= start < parse_time(slot["end_time"]):
            return slot
    return None


def calculate_booking_price(default_price, pricing_rules, booking_date, start_time, end_time):
    """
    Price one booking.

    Returns a dict with ``price_per_slot``, ``total_price``, ``applied_rule``,
    ``rule_day_type``, ``day_type`` and ``duration_hours``. ``applied_rule`` is
    either ``"<day_type>-<start>-<end>"`` of the matched time slot or
    ``"default"``; ``rule_day_type`` is the matched rule's day type or
    ``"default"``.
    """
    day_type = get_day_type(booking_date)
    duration_hours = calculate_duration_hours(start_time, end_time)

    price_per_slot = to_decimal(default_price)
    applied_rule = DEFAULT_RULE_LABEL
    rule_day_type = DEFAULT_RULE_LABEL

    rule = select_rule(pricing_rules, day_type)
    slot = find_time_slot(rule, start_time) if rule else None

    if slot:
        price_per_slot = to_decimal(slot["price_per_slot"])
        applied_rule = f"{rule['day_type']}-{slot['start_time']}-{slot['end_time']}"
        rule_day_type = rule["day_type"]

    total_price = (price_per_slot * duration_hours).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

    return {
        "price_per_slot": price_per_slot,
        "total_price": total_price,
        "applied_rule": applied_rule,
        "rule_day_type": rule_day_type,
        "day_type": day_type,
        "duration_hours": duration_hours,
    }


def price_turf(turf, booking_date, start_time, end_time):
    return calculate_booking_price(
        turf.price, turf.pricing_rules, booking_date, start_time, end_time
    )


def validate_pricing_rules(pricing_rules):
    if not isinstance(pricing_rules, list):
        raise ValidationError("pricing_rules must be a list")

    seen = set()
    for rule in pricing_rules:
        if not isinstance(rule, dict):
            raise ValidationError("Each pricing rule must be an object")

        day_type = rule.get("day_type")
        if day_type not in DAY_TYPES:
            raise ValidationError(f"Invalid day_type: {day_type}")
        if day_type in seen:
            raise ValidationError(f"Duplicate pricing rule for {day_type}")
        seen.add(day_type)

        time_slots = rule.get("time_slots")
        if not isinstance(time_slots, list):
            raise ValidationError("time_slots must be a list")

        for slot in time_slots:
            try:
                start = parse_time(slot["start_time"])
                end = parse_time(slot["end_time"])
                price = to_decimal(slot["price_per_slot"])
            except (KeyError, TypeError, ValueError, InvalidOperation):
                raise ValidationError(
                    "Each time slot needs start_time, end_time (HH:MM) and price_per_slot"
                )

            if start >= end:
                raise ValidationError("Time slot start_time must be before end_time")
            if price < 0:
                raise ValidationError("price_per_slot cannot be negative")
