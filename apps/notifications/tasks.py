"""Celery tasks for outgoing notifications."""

from __future__ import annotations

import logging

import requests
from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore

logger = logging.getLogger(__name__)


class SmsDeliveryError(Exception):
    pass


@shared_task(
    name="notifications.send_sms",
    autoretry_for=(requests.RequestException, SmsDeliveryError),
    retry_backoff=True,
    max_retries=3,
)
def send_sms(phone_number: str, message: str) -> bool:
    """Post one message to the SMS provider."""

    api_key = getattr(settings, "SMS_API_KEY", "")
    if not api_key:
        logger.warning(f"SMS_API_KEY is not configured, dropping SMS to {phone_number}")
        return False

    base_url = getattr(settings, "SMS_API_BASE_URL", "").rstrip("/")
    response = requests.post(
        f"{base_url}/{api_key}/sms/send.json",
        data={"receptor": phone_number, "message": message},
        timeout=getattr(settings, "SMS_REQUEST_TIMEOUT", 10),
    )
    if response.status_code >= 400:
        raise SmsDeliveryError(f"SMS provider answered {response.status_code}: {response.text[:200]}")

    logger.info(f"SMS sent to {phone_number}")
    return True
