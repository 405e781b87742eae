"""Dispatch coordinator: validate the alert forms, send one dispatch, report the outcome.

Per submission: idle -> validating -> (idle on validation failure)
-> dispatching -> idle, with exactly one notification emitted.
"""

from dataclasses import dataclass
from typing import Callable, Literal

from pydantic import ValidationError

from crisis_alerts.alerts.boundary import DispatchBoundary
from crisis_alerts.alerts.errors import (
    AlertError,
    AlertInFlightError,
    DispatchTransportError,
    InvalidEmailError,
    InvalidPhoneError,
    MissingContentError,
    NoPhoneNumbersError,
    OfflineError,
)
from crisis_alerts.alerts.form_state import AlertFormState
from crisis_alerts.alerts.validators import filter_phone_numbers, is_valid_email, is_valid_phone
from crisis_alerts.schemas.alert import CrisisContext
from crisis_alerts.schemas.dispatch import (
    PROBE_CRISIS_TYPE,
    DispatchRequest,
    DispatchResult,
    Notification,
    RecipientFlags,
    SmsResult,
)
from crisis_alerts.utils.logging import Timer, log_dispatch_event

COMPONENT = "alert_coordinator"
PROBE_EMAIL = "check@crisisscope.invalid"

CoordinatorState = Literal["idle", "validating", "dispatching"]
SubmitStatus = Literal["sent", "partial", "rejected", "failed"]
NotifyFn = Callable[[Notification], None]
ResponseObserver = Callable[[DispatchResult], None]


@dataclass
class SubmitOutcome:
    """Result of one submit() call."""

    status: SubmitStatus
    notification: Notification
    error: AlertError | None = None
    result: DispatchResult | None = None


class AlertCoordinator:
    """Owns the alert forms of one rendered alert panel and dispatches them.

    `notify` receives every notification (toasts); `on_response` receives the
    raw structured result of every successful dispatch and probe.
    """

    def __init__(
        self,
        context: CrisisContext,
        boundary: DispatchBoundary,
        notify: NotifyFn | None = None,
        on_response: ResponseObserver | None = None,
    ):
        self.context = context
        self.boundary = boundary
        self.forms = AlertFormState(context)
        self.notifications: list[Notification] = []
        self.is_loading = False
        self.busy = False
        self.state: CoordinatorState = "idle"
        self._notify = notify
        self._on_response = on_response

    async def submit(self, is_online: bool) -> SubmitOutcome:
        """Validate the forms and, if they pass, dispatch the alert once."""
        # No await between the check and the set: reentrant calls see busy=True
        if self.busy:
            return self._reject(AlertInFlightError())
        self.busy = True
        try:
            self.state = "validating"
            try:
                request = self._validate(is_online)
            except AlertError as exc:
                return self._reject(exc)
            return await self._dispatch(request)
        finally:
            self.is_loading = False
            self.busy = False
            self.state = "idle"

    async def probe_sms_provider(self) -> SmsResult | None:
        """Ask the endpoint whether SMS is configured, without contacting recipients."""
        request = DispatchRequest(
            email=PROBE_EMAIL,
            subject=PROBE_CRISIS_TYPE,
            message=PROBE_CRISIS_TYPE,
            crisis_type=PROBE_CRISIS_TYPE,
            region_name=self.context.region_name,
            severity=self.context.severity,
            send_sms=True,
        )
        try:
            with Timer() as timer:
                result = await self._call_boundary(request)
        except DispatchTransportError as exc:
            log_dispatch_event(
                COMPONENT,
                "probe",
                "failed",
                error_code=exc.code,
                error_message=exc.message,
            )
            return None

        log_dispatch_event(COMPONENT, "probe", "completed", latency_ms=timer.elapsed_ms, sms_requested=True)
        self._observe(result)
        return result.sms

    def _observe(self, result: DispatchResult) -> None:
        """Hand a successful response to the observer; its failures are logged, not raised."""
        if self._on_response is None:
            return
        try:
            self._on_response(result)
        except Exception as exc:  # observer is caller code and must not break the submission
            log_dispatch_event(
                COMPONENT,
                "observer",
                "failed",
                error_code="OBSERVER",
                error_message=str(exc) or type(exc).__name__,
            )

    def _validate(self, is_online: bool) -> DispatchRequest:
        """Check preconditions in order; the first failure raises."""
        forms = self.forms
        email = forms.email

        if not is_online:
            raise OfflineError()

        if not email.recipient_email or not is_valid_email(email.recipient_email):
            forms.email_valid = False
            raise InvalidEmailError()

        if not email.subject or not email.body:
            raise MissingContentError()

        phone_numbers: list[str] = []
        if forms.sms.sms_enabled:
            phone_numbers = filter_phone_numbers(forms.sms.phone_numbers)
            if not phone_numbers:
                raise NoPhoneNumbersError()
            invalid = [phone for phone in phone_numbers if not is_valid_phone(phone)]
            if invalid:
                raise InvalidPhoneError(len(invalid))
            # Pruned before the network call, whatever the dispatch outcome
            forms.set_sms_field(phone_numbers=phone_numbers)

        sms = forms.sms
        return DispatchRequest(
            email=email.recipient_email,
            subject=email.subject,
            message=email.body,
            recipients=RecipientFlags(
                authorities=email.notify_authorities,
                ngos=email.notify_ngos,
                media=email.notify_media,
            ),
            crisis_type=self.context.crisis_type,
            region_name=self.context.region_name,
            severity=self.context.severity,
            send_sms=sms.sms_enabled,
            phone_numbers=phone_numbers,
            sms_recipients=RecipientFlags(
                authorities=sms.notify_authorities,
                ngos=sms.notify_ngos,
                media=sms.notify_media,
            ),
        )

    async def _call_boundary(self, request: DispatchRequest) -> DispatchResult:
        """Invoke the boundary; every failure mode becomes DispatchTransportError."""
        try:
            raw = await self.boundary.dispatch(request.to_wire())
        except Exception as exc:  # broad: no transport failure may escape to the UI
            raise DispatchTransportError(str(exc) or type(exc).__name__) from exc

        if isinstance(raw, dict) and raw.get("error"):
            error = raw["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise DispatchTransportError(message)

        try:
            return DispatchResult.model_validate(raw)
        except ValidationError as exc:
            raise DispatchTransportError("Unexpected response from dispatch service") from exc

    async def _dispatch(self, request: DispatchRequest) -> SubmitOutcome:
        self.state = "dispatching"
        self.is_loading = True

        try:
            with Timer() as timer:
                result = await self._call_boundary(request)
        except DispatchTransportError as exc:
            log_dispatch_event(
                COMPONENT,
                "dispatch",
                "failed",
                sms_requested=request.send_sms,
                error_code=exc.code,
                error_message=exc.message,
            )
            return SubmitOutcome(
                status="failed",
                notification=self._emit(exc.title, exc.description, "destructive"),
                error=exc,
            )

        status, notification = self._reconcile(request, result)
        # Unconditional on success: the provider banner tracks every response
        self._observe(result)
        log_dispatch_event(
            COMPONENT,
            "dispatch",
            status,
            latency_ms=timer.elapsed_ms,
            sms_requested=request.send_sms,
            error_message=result.sms.error_message if result.sms else None,
        )
        return SubmitOutcome(status=status, notification=notification, result=result)

    def _reconcile(self, request: DispatchRequest, result: DispatchResult) -> tuple[SubmitStatus, Notification]:
        """Map a successful response to one of the success or partial-success notifications."""
        if not request.send_sms:
            return "sent", self._emit(
                "Alerts sent successfully",
                "Crisis alert has been dispatched via email",
            )

        sms = result.sms
        if sms is not None and sms.sent:
            return "sent", self._emit(
                "Alerts sent successfully",
                "Crisis alert has been dispatched via email and SMS",
            )

        if sms is not None and not sms.configured:
            description = "Email alert was sent, but SMS failed because the SMS provider is not configured."
            if sms.error_message:
                description = f"{description} {sms.error_message}"
            return "partial", self._emit("Email sent, SMS failed", description, "warning")

        if sms is not None and sms.error_message:
            return "partial", self._emit(
                "Email sent, SMS failed",
                f"Email alert was sent, but SMS failed: {sms.error_message}",
                "warning",
            )

        return "partial", self._emit(
            "Email sent, SMS failed",
            "Email alert was sent, but SMS could not be delivered. Check the dispatch logs for details.",
            "warning",
        )

    def _reject(self, error: AlertError) -> SubmitOutcome:
        log_dispatch_event(COMPONENT, "submit", "rejected", error_code=error.code)
        return SubmitOutcome(
            status="rejected",
            notification=self._emit(error.title, error.description, "destructive"),
            error=error,
        )

    def _emit(self, title: str, description: str, variant: str = "default") -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self.notifications.append(notification)
        if self._notify is not None:
            self._notify(notification)
        return notification
