from rest_framework import serializers


class GatewayNotificationSerializer(serializers.Serializer):
    """SSLCommerz IPN fields the reconciliation relies on."""

    tran_id = serializers.CharField(max_length=100)
    status = serializers.CharField(max_length=30)
    val_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    currency = serializers.CharField(max_length=10, required=False, allow_blank=True)
    bank_tran_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    card_type = serializers.CharField(max_length=100, required=False, allow_blank=True)
    tran_date = serializers.CharField(max_length=50, required=False, allow_blank=True)

    def validate_status(self, value):
        return value.upper()
