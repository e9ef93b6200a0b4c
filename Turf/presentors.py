def build_pricing_payload(pricing):
    """Pricing breakdown shown to the client next to a new booking."""
    return {
        "pricePerSlot": float(pricing["price_per_slot"]),
        "duration": float(pricing["duration_hours"]),
        "totalPrice": float(pricing["total_price"]),
        "appliedRule": pricing["applied_rule"],
    }
