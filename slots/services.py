from Turf.models import Booking
from Turf.service import calculate_booking_price, get_day_type
from Turf.utils import format_time, generate_hour_slots, slot_end


def occupied_start_times(turf, slot_date, now=None):
    """Start times held by confirmed bookings or fresh pending holds."""
    return set(
        Booking.objects.occupying(now)
        .filter(turf=turf, booking_date=slot_date)
        .values_list("start_time", flat=True)
    )


def format_slot(turf, slot_date, start_time, occupied):
    end_time = slot_end(start_time)
    pricing = calculate_booking_price(
        turf.price, turf.pricing_rules, slot_date, start_time, end_time
    )

    return {
        "startTime": format_time(start_time),
        "endTime": format_time(end_time),
        "isAvailable": start_time not in occupied,
        "pricePerSlot": float(pricing["price_per_slot"]),
        "dayTypeLabel": pricing["rule_day_type"],
    }


def build_availability(turf, slot_date, now=None):
    occupied = occupied_start_times(turf, slot_date, now)

    slot_times = generate_hour_slots(
        turf.opening_time,
        turf.closing_time
    )

    return {
        "date": slot_date.isoformat(),
        "dayType": get_day_type(slot_date),
        "slots": [
            format_slot(turf, slot_date, slot_time, occupied)
            for slot_time in slot_times
        ],
    }
