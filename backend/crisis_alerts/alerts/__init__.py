"""Alerts client: form state, validation, and dispatch of crisis alerts."""

from crisis_alerts.alerts.boundary import (
    HttpDispatchBoundary,
    SupabaseDispatchBoundary,
    build_dispatch_boundary,
)
from crisis_alerts.alerts.coordinator import AlertCoordinator, SubmitOutcome
from crisis_alerts.alerts.form_state import AlertFormState
from crisis_alerts.alerts.provider_status import SmsProviderStatus
from crisis_alerts.alerts.validators import is_valid_email, is_valid_phone

__all__ = [
    "AlertCoordinator",
    "AlertFormState",
    "HttpDispatchBoundary",
    "SmsProviderStatus",
    "SubmitOutcome",
    "SupabaseDispatchBoundary",
    "build_dispatch_boundary",
    "is_valid_email",
    "is_valid_phone",
]
