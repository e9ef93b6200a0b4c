from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "transaction_id",
        "booking",
        "amount",
        "currency",
        "status",
        "paid_at",
        "created_at",
    )
    list_filter = ("status", "currency")
    search_fields = ("transaction_id", "validation_id", "booking__user__email")

    # Written by the gateway only
    readonly_fields = ("gateway_data", "validation_id", "paid_at", "created_at", "updated_at")
