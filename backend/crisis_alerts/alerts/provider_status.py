"""SMS provider banner state, fed by every dispatch and probe response."""

from crisis_alerts.schemas.dispatch import DispatchResult


class SmsProviderStatus:
    """Observer for AlertCoordinator.on_response.

    The banner is shown while the provider is unconfigured or the last SMS
    block carried an error message. Responses without an SMS block leave the
    state unchanged.
    """

    def __init__(self):
        self.configured = False
        self.visible = False
        self.error_message: str | None = None

    def __call__(self, result: DispatchResult) -> None:
        sms = result.sms
        if sms is None:
            return
        self.configured = sms.configured
        self.error_message = sms.error_message
        self.visible = not sms.configured or sms.error_message is not None

    @property
    def banner_text(self) -> str | None:
        if not self.visible:
            return None
        if not self.configured:
            return "SMS functionality is disabled because Twilio is not configured. Emails will still be sent."
        return f"SMS provider reported an error: {self.error_message}"
