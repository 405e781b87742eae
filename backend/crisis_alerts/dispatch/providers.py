"""Email/SMS provider configuration for the dispatch service.

ProviderConfig is resolved once at process start. ProviderRuntime owns the
provider clients and verifies the Twilio credentials in a single task that
every SMS dispatch awaits, so no dispatch reports `configured` before
verification has finished.
"""

import asyncio

import httpx
from pydantic import BaseModel

from crisis_alerts.utils.logging import Timer, log_dispatch_event

MISSING_TWILIO_MESSAGE = (
    "Twilio credentials are missing. Set TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER."
)


class ProviderConfig(BaseModel):
    """Credentials and fixed recipients for both channels."""

    model_config = {"frozen": True}

    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com/emails"
    email_from: str = "Crisis Alerts <notifications@resend.dev>"
    authorities_email: str = ""
    ngos_email: str = ""
    media_email: str = ""
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone: str = ""
    authorities_phone: str = ""
    ngos_phone: str = ""
    media_phone: str = ""

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        from crisis_alerts import config

        return cls(
            resend_api_key=config.RESEND_API_KEY,
            resend_api_url=config.RESEND_API_URL,
            email_from=config.ALERT_EMAIL_FROM,
            authorities_email=config.AUTHORITIES_EMAIL,
            ngos_email=config.NGOS_EMAIL,
            media_email=config.MEDIA_EMAIL,
            twilio_account_sid=config.TWILIO_ACCOUNT_SID,
            twilio_auth_token=config.TWILIO_AUTH_TOKEN,
            twilio_phone=config.TWILIO_PHONE_NUMBER,
            authorities_phone=config.AUTHORITIES_PHONE,
            ngos_phone=config.NGOS_PHONE,
            media_phone=config.MEDIA_PHONE,
        )

    @property
    def email_configured(self) -> bool:
        return bool(self.resend_api_key)

    @property
    def twilio_credentials_present(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token and self.twilio_phone)


class SmsProviderState(BaseModel):
    """Outcome of Twilio credential verification."""

    configured: bool
    error_message: str | None = None
    phone: str | None = None


class ProviderRuntime:
    """Provider clients plus the awaited Twilio verification task."""

    def __init__(
        self,
        config: ProviderConfig,
        twilio_client=None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self._twilio = twilio_client
        self._http = http_client
        self._owns_http = http_client is None
        self._verification: asyncio.Task | None = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=30)
        return self._http

    @property
    def twilio(self):
        if self._twilio is None:
            from twilio.rest import Client

            self._twilio = Client(self.config.twilio_account_sid, self.config.twilio_auth_token)
        return self._twilio

    def start(self) -> asyncio.Task:
        """Schedule credential verification once; later calls return the same task."""
        if self._verification is None:
            self._verification = asyncio.create_task(self._verify_twilio())
        return self._verification

    async def sms_state(self) -> SmsProviderState:
        return await self.start()

    async def _verify_twilio(self) -> SmsProviderState:
        if not self.config.twilio_credentials_present:
            log_dispatch_event("providers", "twilio_verify", "not_configured")
            return SmsProviderState(configured=False, error_message=MISSING_TWILIO_MESSAGE)

        sid = self.config.twilio_account_sid
        try:
            with Timer() as timer:
                client = self.twilio
                await asyncio.to_thread(client.api.accounts(sid).fetch)
        except Exception as e:  # any failure here means SMS is unusable, not that the service is down
            log_dispatch_event(
                "providers",
                "twilio_verify",
                "failed",
                error_code=type(e).__name__.upper(),
                error_message=str(e),
            )
            return SmsProviderState(
                configured=False,
                error_message=f"Twilio credential verification failed: {e}",
            )

        log_dispatch_event("providers", "twilio_verify", "verified", latency_ms=timer.elapsed_ms)
        return SmsProviderState(configured=True, phone=self.config.twilio_phone)

    async def aclose(self) -> None:
        if self._verification is not None and not self._verification.done():
            self._verification.cancel()
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None
