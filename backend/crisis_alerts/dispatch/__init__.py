"""Dispatch service: sends crisis alerts by email (Resend) and SMS (Twilio)."""

from crisis_alerts.dispatch.email import EmailDeliveryError
from crisis_alerts.dispatch.handler import handle_dispatch
from crisis_alerts.dispatch.providers import ProviderConfig, ProviderRuntime, SmsProviderState

__all__ = [
    "EmailDeliveryError",
    "ProviderConfig",
    "ProviderRuntime",
    "SmsProviderState",
    "handle_dispatch",
]
