"""URL routes for the payments app (v1)."""

from django.urls import path

from .views import ConfirmPaymentView, CreatePaymentIntentView, PaymentStatusView, PaymentWebhookView

app_name = "payments"

urlpatterns = [
    path("create-intent/", CreatePaymentIntentView.as_view(), name="create-intent"),
    path("confirm/", ConfirmPaymentView.as_view(), name="confirm"),
    path("webhook/", PaymentWebhookView.as_view(), name="webhook"),
    path("<int:order_id>/", PaymentStatusView.as_view(), name="status"),
]
