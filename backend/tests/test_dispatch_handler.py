import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from conftest import FakeTwilioClient
from crisis_alerts.dispatch import EmailDeliveryError, ProviderConfig, ProviderRuntime, handle_dispatch
from crisis_alerts.dispatch.email import build_email_recipients, render_alert_email, severity_color
from crisis_alerts.dispatch.sms import MAX_SMS_LENGTH, build_sms_numbers, compose_sms_body
from crisis_alerts.schemas.dispatch import DispatchRequest, RecipientFlags

CONFIG = ProviderConfig(
    resend_api_key="re_test",
    resend_api_url="https://resend.test/emails",
    authorities_email="authorities@crisisscope-demo.com",
    ngos_email="relief-ngos@crisisscope-demo.com",
    media_email="media-outlets@crisisscope-demo.com",
    twilio_account_sid="AC123",
    twilio_auth_token="token",
    twilio_phone="+15550000000",
    authorities_phone="+15559990000",
)


def _request(**overrides) -> DispatchRequest:
    data = {
        "email": "ops@example.org",
        "subject": "HIGH drought Crisis Alert for Maharashtra",
        "message": "Reservoir levels below 10%.",
        "recipients": {"authorities": True, "ngos": False, "media": True},
        "crisisType": "drought",
        "regionName": "Maharashtra",
        "severity": "high",
        "sendSms": False,
        "phoneNumbers": [],
        "smsRecipients": {"authorities": False, "ngos": False, "media": False},
    }
    data.update(overrides)
    return DispatchRequest.model_validate(data)


class ResendStub:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"message": "Invalid API key"})
        return httpx.Response(200, json={"id": "re_email_1"})


def _runtime(config=CONFIG, twilio=None, resend=None):
    http = httpx.AsyncClient(transport=httpx.MockTransport(resend or ResendStub()))
    return ProviderRuntime(config, twilio_client=twilio or FakeTwilioClient(), http_client=http)


def test_email_recipients_follow_category_flags():
    flags = RecipientFlags(authorities=True, ngos=False, media=True)
    assert build_email_recipients("ops@example.org", flags, CONFIG) == [
        "ops@example.org",
        "authorities@crisisscope-demo.com",
        "media-outlets@crisisscope-demo.com",
    ]


def test_rendered_email_escapes_user_content():
    html = render_alert_email(
        _request(message="<script>alert(1)</script>", severity="extreme"),
        timestamp=datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc),
    )
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "#dc2626" in html
    assert "EXTREME SEVERITY" in html
    assert "2026-10-18 09:30:00" in html


def test_severity_color_fallback():
    assert severity_color("LOW") == "#22c55e"
    assert severity_color("unknown") == "#3b82f6"


def test_sms_numbers_add_configured_categories_without_duplicates():
    flags = RecipientFlags(authorities=True, ngos=True)
    numbers = build_sms_numbers([" +15551234567 ", "", "+15559990000"], flags, CONFIG)
    assert numbers == ["+15551234567", "+15559990000"]


def test_sms_body_is_truncated():
    body = compose_sms_body(_request(message="x" * 5000))
    assert body.startswith("[HIGH] Drought crisis alert for Maharashtra:")
    assert len(body) == MAX_SMS_LENGTH


async def test_email_only_dispatch_returns_provider_result():
    resend = ResendStub()
    result = await handle_dispatch(_request(), _runtime(resend=resend))

    assert result.email == {"id": "re_email_1"}
    assert result.sms is None
    (sent,) = resend.requests
    assert sent.headers["Authorization"] == "Bearer re_test"


async def test_email_failure_raises():
    with pytest.raises(EmailDeliveryError, match="HTTP 401"):
        await handle_dispatch(_request(), _runtime(resend=ResendStub(status_code=401)))


async def test_missing_resend_key_raises():
    config = CONFIG.model_copy(update={"resend_api_key": ""})
    with pytest.raises(EmailDeliveryError, match="RESEND_API_KEY"):
        await handle_dispatch(_request(), _runtime(config=config))


async def test_sms_sent_per_number_with_partial_failure():
    twilio = FakeTwilioClient(failing={"+15557654321"})
    request = _request(sendSms=True, phoneNumbers=["+15551234567", "+15557654321"])

    result = await handle_dispatch(request, _runtime(twilio=twilio))

    sms = result.sms
    assert sms.sent is True
    assert sms.configured is True
    assert sms.error_message == "1 of 2 SMS messages failed"
    assert [(d.to, d.status) for d in sms.responses] == [
        ("+15551234567", "queued"),
        ("+15557654321", "failed"),
    ]
    assert sms.responses[0].sid == "SM001"
    assert "not reachable" in sms.responses[1].error
    assert sms.twilio_phone == "+15550000000"
    assert twilio.messages.sent[0]["from_"] == "+15550000000"


async def test_invalid_number_recorded_without_contacting_provider():
    twilio = FakeTwilioClient()
    request = _request(sendSms=True, phoneNumbers=["0123"])

    result = await handle_dispatch(request, _runtime(twilio=twilio))

    assert result.sms.sent is False
    assert result.sms.responses[0].error == "Invalid phone number"
    assert twilio.messages.sent == []


async def test_sms_without_credentials_reports_not_configured():
    config = CONFIG.model_copy(update={"twilio_auth_token": ""})
    request = _request(sendSms=True, phoneNumbers=["+15551234567"])

    result = await handle_dispatch(request, _runtime(config=config))

    assert result.email == {"id": "re_email_1"}
    assert result.sms.sent is False
    assert result.sms.configured is False
    assert "TWILIO_AUTH_TOKEN" in result.sms.error_message


async def test_failed_verification_reports_not_configured():
    twilio = FakeTwilioClient(verify_error=RuntimeError("Authenticate"))
    request = _request(sendSms=True, phoneNumbers=["+15551234567"])

    result = await handle_dispatch(request, _runtime(twilio=twilio))

    assert result.sms.configured is False
    assert result.sms.error_message == "Twilio credential verification failed: Authenticate"
    assert twilio.messages.sent == []


async def test_config_check_sends_nothing():
    twilio = FakeTwilioClient()
    resend = ResendStub()
    request = _request(crisisType="check", sendSms=True, phoneNumbers=["+15551234567"])

    result = await handle_dispatch(request, _runtime(twilio=twilio, resend=resend))

    assert result.email["skipped"] is True
    assert result.sms.configured is True
    assert result.sms.twilio_phone == "+15550000000"
    assert result.sms.responses == []
    assert resend.requests == []
    assert twilio.messages.sent == []


async def test_verification_runs_once_for_concurrent_dispatches():
    twilio = FakeTwilioClient()
    runtime = _runtime(twilio=twilio)
    request = _request(sendSms=True, phoneNumbers=["+15551234567"])

    results = await asyncio.gather(*(handle_dispatch(request, runtime) for _ in range(3)))

    assert twilio.fetch_calls == 1
    assert all(r.sms.configured for r in results)
    await runtime.aclose()


def test_provider_config_from_env(monkeypatch):
    from crisis_alerts import config

    monkeypatch.setattr(config, "TWILIO_ACCOUNT_SID", "AC999")
    monkeypatch.setattr(config, "TWILIO_AUTH_TOKEN", "secret")
    monkeypatch.setattr(config, "TWILIO_PHONE_NUMBER", "+15551110000")
    monkeypatch.setattr(config, "RESEND_API_KEY", "")

    provider_config = ProviderConfig.from_env()

    assert provider_config.twilio_credentials_present is True
    assert provider_config.email_configured is False
    assert provider_config.authorities_email == config.AUTHORITIES_EMAIL
