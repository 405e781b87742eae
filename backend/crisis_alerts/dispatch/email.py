"""Email channel: recipient list, HTML rendering, and delivery through Resend."""

from datetime import datetime, timezone
from pathlib import Path

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from crisis_alerts.dispatch.providers import ProviderConfig
from crisis_alerts.schemas.dispatch import DispatchRequest, RecipientFlags

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

SEVERITY_COLORS = {
    "extreme": "#dc2626",
    "high": "#ef4444",
    "medium": "#f97316",
    "low": "#22c55e",
}
DEFAULT_SEVERITY_COLOR = "#3b82f6"


class EmailDeliveryError(Exception):
    """The alert email could not be handed to the email provider."""


def severity_color(severity: str) -> str:
    return SEVERITY_COLORS.get(severity.lower(), DEFAULT_SEVERITY_COLOR)


def build_email_recipients(email: str, flags: RecipientFlags, config: ProviderConfig) -> list[str]:
    """Operator address first, then the fixed address of each selected category."""
    recipients = [email]
    for selected, address in (
        (flags.authorities, config.authorities_email),
        (flags.ngos, config.ngos_email),
        (flags.media, config.media_email),
    ):
        if selected and address and address not in recipients:
            recipients.append(address)
    return recipients


def _load_template():
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "jinja2"]),
    )
    return env.get_template("crisis_alert_email.jinja2")


def render_alert_email(request: DispatchRequest, timestamp: datetime | None = None) -> str:
    """Render the HTML body of the alert email. User-supplied text is escaped."""
    timestamp = timestamp or datetime.now(timezone.utc)
    return _load_template().render(
        header_color=severity_color(request.severity),
        subject=request.subject,
        message=request.message,
        crisis_type=request.crisis_type,
        region_name=request.region_name,
        severity=request.severity,
        timestamp=timestamp.strftime("%Y-%m-%d %H:%M:%S %Z").strip(),
    )


async def send_alert_email(
    http: httpx.AsyncClient,
    config: ProviderConfig,
    recipients: list[str],
    subject: str,
    html: str,
) -> dict:
    """Send one email to all recipients. Returns the provider response (e.g. {"id": ...})."""
    if not config.resend_api_key:
        raise EmailDeliveryError("RESEND_API_KEY is not configured")

    try:
        response = await http.post(
            config.resend_api_url,
            headers={"Authorization": f"Bearer {config.resend_api_key}"},
            json={
                "from": config.email_from,
                "to": recipients,
                "subject": subject,
                "html": html,
            },
        )
    except httpx.HTTPError as e:
        raise EmailDeliveryError(f"Email provider request failed: {e}") from e

    if response.is_error:
        try:
            detail = response.json().get("message")
        except (ValueError, AttributeError):
            detail = None
        raise EmailDeliveryError(
            f"Email provider returned HTTP {response.status_code}" + (f": {detail}" if detail else "")
        )
    return response.json()
