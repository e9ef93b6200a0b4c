from django.http import HttpResponseRedirect, QueryDict
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import GatewayNotificationSerializer
from .services import PaymentService


def raw_payload(data):
    if isinstance(data, QueryDict):
        return data.dict()
    return dict(data)


# -------------------------------------------------------------------
# CHECKOUT
# -------------------------------------------------------------------
class PaymentInitView(APIView):
    """
    Authenticated API
    Opens a gateway checkout session for the caller's booking
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, booking_id):
        redirect_url = PaymentService.initiate_payment(booking_id, request.user)
        return Response({"redirectUrl": redirect_url})


# -------------------------------------------------------------------
# IPN (server-to-server)
# -------------------------------------------------------------------
class PaymentWebhookView(APIView):
    """
    Public API, called by the gateway
    Trust comes from the validator API, not from the caller
    """
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = GatewayNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = PaymentService.reconcile_notification(
            serializer.validated_data,
            raw_payload(request.data),
        )

        return Response({
            "status": "success",
            "message": "Payment processed" if result["processed"] else "Notification acknowledged",
        })


# -------------------------------------------------------------------
# BROWSER REDIRECTS (success / fail / cancel)
# -------------------------------------------------------------------
class PaymentRedirectView(APIView):
    authentication_classes = []
    permission_classes = [permissions.AllowAny]
    outcome = None

    def get(self, request, transaction_id):
        return self.redirect(transaction_id, raw_payload(request.query_params))

    def post(self, request, transaction_id):
        return self.redirect(transaction_id, raw_payload(request.data))

    def redirect(self, transaction_id, payload):
        url = PaymentService.handle_redirect(self.outcome, transaction_id, payload)
        return HttpResponseRedirect(url)
