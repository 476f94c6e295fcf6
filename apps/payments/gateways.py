"""
Payment gateway collaborators

The engine never speaks a gateway protocol itself. A gateway service
hands out a checkout (URL + external reference) and turns a callback's
parameters into a GatewayVerification the reconciliation handler can
consume. PAYMENT_GATEWAY_BACKEND selects the implementation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping

from django.conf import settings  # type: ignore
from django.utils.module_loading import import_string  # type: ignore

from apps.payments.domain.entities import PaymentGateway

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """The gateway could not create a checkout"""


@dataclass(frozen=True)
class GatewayCheckout:
    payment_url: str
    external_ref: str


@dataclass(frozen=True)
class GatewayVerification:
    success: bool
    amount: int | None
    external_ref: str | None
    error_message: str | None


class PaymentGatewayService(ABC):

    @abstractmethod
    def create_payment(
        self,
        payment_id: str,
        booking_id: str,
        amount: int,
        gateway: PaymentGateway,
    ) -> GatewayCheckout:
        """Open a checkout for amount (whole currency units)"""

    @abstractmethod
    def verify_payment(self, gateway: PaymentGateway, params: Mapping[str, str]) -> GatewayVerification:
        """Interpret callback parameters"""


class SandboxGatewayService(PaymentGatewayService):
    """
    Offline gateway for development and tests

    Callback parameters follow Zarinpal's naming:
    Status=OK|NOK, Authority=<external ref>, Amount, Message.
    """

    def __init__(self, base_url: str | None = None):
        self.base_url = (base_url or getattr(settings, 'PAYMENT_SANDBOX_BASE_URL', 'https://gateway.test')).rstrip('/')

    def create_payment(self, payment_id, booking_id, amount, gateway):
        checkout = GatewayCheckout(
            payment_url=f"{self.base_url}/pay/{booking_id}",
            external_ref=f"SANDBOX-{payment_id}",
        )
        logger.info(f"Sandbox checkout for booking {booking_id} via {gateway.value}: {checkout.external_ref} ({amount})")
        return checkout

    def verify_payment(self, gateway, params):
        success = params.get('Status') == 'OK'
        raw_amount = params.get('Amount')
        try:
            amount = int(raw_amount) if raw_amount is not None else None
        except (TypeError, ValueError):
            amount = None
        external_ref = params.get('Authority') or params.get('externalRef') or params.get('RefId')
        message = None if success else (params.get('Message') or 'Payment verification failed')
        return GatewayVerification(
            success=success,
            amount=amount,
            external_ref=external_ref,
            error_message=message,
        )


def get_payment_gateway() -> PaymentGatewayService:
    backend = getattr(settings, 'PAYMENT_GATEWAY_BACKEND', 'apps.payments.gateways.SandboxGatewayService')
    return import_string(backend)()
