from django.contrib import admin

from .models import Booking, Turf


# -------------------------------
# TURF ADMIN
# -------------------------------
# Operating hours, default price and the pricing rule list
@admin.register(Turf)
class TurfAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "name",
        "owner",
        "opening_time",
        "closing_time",
        "price",          # Fallback price per slot
        "is_active",
    )

    list_filter = ("is_active",)
    search_fields = ("name", "address", "owner__email")
    filter_horizontal = ("admins",)


# -------------------------------
# BOOKING ADMIN
# -------------------------------
@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "turf",
        "user",
        "booking_date",
        "start_time",
        "end_time",
        "total_amount",
        "status",
        "payment_status",
        "created_at",
    )

    list_filter = (
        "status",
        "payment_status",
        "booking_date",
    )

    search_fields = (
        "turf__name",
        "user__email",
    )

    date_hierarchy = "booking_date"

    # Pricing snapshot is fixed at booking time
    readonly_fields = (
        "applied_price_per_slot",
        "duration_hours",
        "total_amount",
        "pricing_rule_label",
        "day_type",
        "created_at",
        "updated_at",
    )
