"""API views for payment initiation and gateway callbacks."""

from __future__ import annotations

import logging

from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users.permissions import IsPhotographer
from shared.api import error_response
from shared.domain.base import ErrorKind

from .application.command_handlers import (
    GatewayOutcome,
    InitiatePaymentCommand,
    InitiatePaymentHandler,
    ReconcilePaymentHandler,
)
from .domain.entities import PaymentGateway
from .gateways import get_payment_gateway
from .serializers import PaymentInitiateSerializer

logger = logging.getLogger(__name__)


class PaymentInitiateView(APIView):
    """Open a checkout for one of the photographer's bookings."""

    permission_classes = [IsPhotographer]

    def post(self, request):  # type: ignore
        serializer = PaymentInitiateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = InitiatePaymentHandler().handle(InitiatePaymentCommand(
            booking_id=data["booking_id"],
            requester_id=request.user.id,
            gateway=data.get("gateway") or PaymentGateway.default(),
        ))
        if not result.ok:
            return error_response(result.error, result.message)

        return Response(
            {
                "payment_id": str(result.payment.id),
                "payment_url": result.payment_url,
            },
            status=status.HTTP_200_OK,
        )


class PaymentCallbackView(APIView):
    """
    Gateway webhook

    Unauthenticated: the external reference is the only link to a payment.
    Replays answer with the stored outcome and change nothing.
    """

    authentication_classes: list = []
    permission_classes = [permissions.AllowAny]

    def get(self, request, gateway: str):  # type: ignore
        return self._handle(request, gateway, request.query_params)

    def post(self, request, gateway: str):  # type: ignore
        params = request.query_params.dict()
        if hasattr(request.data, "dict"):
            params.update(request.data.dict())
        elif isinstance(request.data, dict):
            params.update({key: str(value) for key, value in request.data.items()})
        return self._handle(request, gateway, params)

    def _handle(self, request, gateway: str, params):  # type: ignore
        try:
            selected = PaymentGateway(gateway.upper())
        except ValueError:
            return Response(
                {"success": False, "message": f"Unknown gateway '{gateway}'"},
                status=status.HTTP_404_NOT_FOUND,
            )

        verification = get_payment_gateway().verify_payment(selected, params)
        if not verification.external_ref:
            return Response(
                {"success": False, "message": "Missing payment reference"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        result = ReconcilePaymentHandler().handle(GatewayOutcome(
            external_ref=verification.external_ref,
            success=verification.success,
            error_detail=verification.error_message,
        ))

        if result.error is ErrorKind.NOT_FOUND:
            return Response(
                {"success": False, "message": "Payment record not found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        if not result.ok:
            return error_response(result.error, result.message)

        if result.paid:
            message = "Payment already verified" if result.replayed else "Payment verified successfully"
            return Response({"success": True, "message": message})

        return Response({"success": False, "message": verification.error_message or "Payment failed"})
