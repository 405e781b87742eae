"""SMS channel: message body, recipient numbers, and per-number Twilio delivery."""

import asyncio

from crisis_alerts.alerts.validators import filter_phone_numbers, is_valid_phone
from crisis_alerts.dispatch.providers import ProviderConfig
from crisis_alerts.schemas.dispatch import DispatchRequest, RecipientFlags, SmsDelivery

MAX_SMS_LENGTH = 1600  # Twilio's limit for one message body


def compose_sms_body(request: DispatchRequest) -> str:
    body = (
        f"[{request.severity.upper()}] {request.crisis_type.capitalize()} crisis alert "
        f"for {request.region_name}: {request.subject} - {request.message}"
    )
    if len(body) > MAX_SMS_LENGTH:
        body = body[: MAX_SMS_LENGTH - 3] + "..."
    return body


def build_sms_numbers(phone_numbers: list[str], flags: RecipientFlags, config: ProviderConfig) -> list[str]:
    """Operator numbers, then configured category numbers; no blanks, no duplicates."""
    candidates = [phone.strip() for phone in filter_phone_numbers(phone_numbers)]
    for selected, phone in (
        (flags.authorities, config.authorities_phone),
        (flags.ngos, config.ngos_phone),
        (flags.media, config.media_phone),
    ):
        if selected and phone:
            candidates.append(phone)

    numbers: list[str] = []
    for phone in candidates:
        if phone not in numbers:
            numbers.append(phone)
    return numbers


async def send_sms_alerts(twilio_client, from_phone: str, numbers: list[str], body: str) -> list[SmsDelivery]:
    """Send one message per number. A failed number does not stop the others."""
    deliveries: list[SmsDelivery] = []
    for number in numbers:
        if not is_valid_phone(number):
            deliveries.append(SmsDelivery(to=number, status="failed", error="Invalid phone number"))
            continue
        try:
            message = await asyncio.to_thread(
                twilio_client.messages.create,
                body=body,
                from_=from_phone,
                to=number,
            )
        except Exception as e:  # provider errors are recorded per number
            deliveries.append(SmsDelivery(to=number, status="failed", error=str(e)))
            continue
        deliveries.append(SmsDelivery(to=number, status=message.status or "queued", sid=message.sid))
    return deliveries
