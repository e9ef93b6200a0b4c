from django.urls import path

from .views import PaymentInitView, PaymentRedirectView, PaymentWebhookView

urlpatterns = [
    path("init/<int:booking_id>/", PaymentInitView.as_view(), name="payment-init"),
    path("webhook/", PaymentWebhookView.as_view(), name="payment-webhook"),
    path(
        "success/<str:transaction_id>/",
        PaymentRedirectView.as_view(outcome="success"),
        name="payment-success",
    ),
    path(
        "fail/<str:transaction_id>/",
        PaymentRedirectView.as_view(outcome="fail"),
        name="payment-fail",
    ),
    path(
        "cancel/<str:transaction_id>/",
        PaymentRedirectView.as_view(outcome="cancel"),
        name="payment-cancel",
    ),
]
