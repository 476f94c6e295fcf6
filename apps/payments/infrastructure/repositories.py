"""
Django ORM repository for payment records
"""

from decimal import Decimal
from uuid import UUID

from shared.domain.value_objects import Money
from shared.infrastructure.orm import lock_queryset_if_possible
from apps.bookings.domain.entities import PaymentStatus
from apps.payments.domain.entities import PaymentGateway, PaymentRecord
from apps.payments.domain.repositories import AbstractPaymentRepository
from apps.payments.models import PaymentRecord as PaymentRecordModel


def _record_to_entity(model: PaymentRecordModel) -> PaymentRecord:
    return PaymentRecord(
        id=model.id,
        booking_id=model.booking_id,
        amount=Money(Decimal(model.amount), model.currency),
        gateway=PaymentGateway(model.gateway),
        status=PaymentStatus(model.status),
        external_ref=model.external_ref,
        payment_url=model.payment_url,
        error_detail=model.error_detail,
        created_at=model.created_at,
        settled_at=model.settled_at,
    )


class DjangoPaymentRepository(AbstractPaymentRepository):

    def _fetch(self, lock: bool, **lookup) -> PaymentRecord | None:
        queryset = PaymentRecordModel.objects.filter(**lookup)
        if lock:
            queryset = lock_queryset_if_possible(queryset)
        model = queryset.first()
        return _record_to_entity(model) if model else None

    def get(self, payment_id: UUID, lock: bool = False) -> PaymentRecord | None:
        return self._fetch(lock, pk=payment_id)

    def get_by_external_ref(self, external_ref: str, lock: bool = False) -> PaymentRecord | None:
        return self._fetch(lock, external_ref=external_ref)

    def find_active_for_booking(self, booking_id: UUID) -> PaymentRecord | None:
        model = PaymentRecordModel.objects.filter(
            booking_id=booking_id,
            status__in=[PaymentStatus.PENDING.value, PaymentStatus.PAID.value],
        ).first()
        return _record_to_entity(model) if model else None

    def add(self, record: PaymentRecord) -> None:
        PaymentRecordModel.objects.create(
            id=record.id,
            booking_id=record.booking_id,
            amount=record.amount.amount,
            currency=record.amount.currency,
            gateway=record.gateway.value,
            status=record.status.value,
            external_ref=record.external_ref,
            payment_url=record.payment_url,
            error_detail=record.error_detail,
            created_at=record.created_at,
            settled_at=record.settled_at,
        )

    def update(self, record: PaymentRecord) -> None:
        PaymentRecordModel.objects.filter(pk=record.id).update(
            status=record.status.value,
            external_ref=record.external_ref,
            payment_url=record.payment_url,
            error_detail=record.error_detail,
            settled_at=record.settled_at,
        )
