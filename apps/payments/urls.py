"""URL routing for payments."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import PaymentCallbackView, PaymentInitiateView

urlpatterns = [
    path("initiate/", PaymentInitiateView.as_view(), name="payment-initiate"),
    path("callback/<str:gateway>/", PaymentCallbackView.as_view(), name="payment-callback"),
]
