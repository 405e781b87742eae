"""send-crisis-alert handler: email first, then the optional SMS channel."""

from crisis_alerts.dispatch.email import build_email_recipients, render_alert_email, send_alert_email
from crisis_alerts.dispatch.providers import ProviderRuntime
from crisis_alerts.dispatch.sms import build_sms_numbers, compose_sms_body, send_sms_alerts
from crisis_alerts.schemas.dispatch import DispatchRequest, DispatchResult, SmsResult
from crisis_alerts.utils.logging import Timer, log_dispatch_event

COMPONENT = "dispatch_handler"


async def probe_result(runtime: ProviderRuntime) -> DispatchResult:
    """Answer a configuration probe. Nothing is sent on either channel."""
    state = await runtime.sms_state()
    return DispatchResult(
        email={"skipped": True, "reason": "configuration_check"},
        sms=SmsResult(
            sent=False,
            configured=state.configured,
            error_message=state.error_message,
            responses=[],
            twilio_phone=state.phone if state.configured else None,
        ),
    )


async def _dispatch_sms(request: DispatchRequest, runtime: ProviderRuntime) -> SmsResult:
    state = await runtime.sms_state()
    if not state.configured:
        return SmsResult(sent=False, configured=False, error_message=state.error_message)

    numbers = build_sms_numbers(request.phone_numbers, request.sms_recipients, runtime.config)
    if not numbers:
        return SmsResult(
            sent=False,
            configured=True,
            error_message="No phone numbers to send SMS to",
            twilio_phone=state.phone,
        )

    deliveries = await send_sms_alerts(runtime.twilio, state.phone, numbers, compose_sms_body(request))
    failed = sum(1 for d in deliveries if d.status == "failed")
    return SmsResult(
        sent=failed < len(deliveries),
        configured=True,
        error_message=f"{failed} of {len(deliveries)} SMS messages failed" if failed else None,
        responses=deliveries,
        twilio_phone=state.phone,
    )


async def handle_dispatch(request: DispatchRequest, runtime: ProviderRuntime) -> DispatchResult:
    """
    Send one crisis alert.

    Email failures raise EmailDeliveryError (the whole dispatch failed).
    SMS failures are reported in the `sms` block (the email already went out).
    """
    if request.is_probe:
        result = await probe_result(runtime)
        log_dispatch_event(COMPONENT, "probe", "completed", sms_requested=True)
        return result

    with Timer() as timer:
        recipients = build_email_recipients(request.email, request.recipients, runtime.config)
        email_result = await send_alert_email(
            runtime.http,
            runtime.config,
            recipients,
            request.subject,
            render_alert_email(request),
        )
        sms = await _dispatch_sms(request, runtime) if request.send_sms else None

    log_dispatch_event(
        COMPONENT,
        "dispatch",
        "partial" if sms is not None and not sms.sent else "sent",
        latency_ms=timer.elapsed_ms,
        sms_requested=request.send_sms,
        error_message=sms.error_message if sms else None,
    )
    return DispatchResult(email=email_result, sms=sms)
