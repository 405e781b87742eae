"""Schemas for the send-crisis-alert dispatch contract (camelCase on the wire)."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# crisisType value of the configuration probe request
PROBE_CRISIS_TYPE = "check"


class WireModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class RecipientFlags(WireModel):
    """Which fixed recipient categories get a copy of the alert."""

    authorities: bool = False
    ngos: bool = False
    media: bool = False


class DispatchRequest(WireModel):
    """Single composed payload sent to the dispatch endpoint."""

    email: str
    subject: str
    message: str
    recipients: RecipientFlags = Field(default_factory=RecipientFlags)
    crisis_type: str
    region_name: str
    severity: str
    send_sms: bool = False
    phone_numbers: list[str] = Field(default_factory=list)
    sms_recipients: RecipientFlags = Field(default_factory=RecipientFlags)

    @property
    def is_probe(self) -> bool:
        return self.crisis_type == PROBE_CRISIS_TYPE


class SmsDelivery(WireModel):
    """Per-number SMS outcome."""

    to: str
    status: str
    sid: str | None = None
    error: str | None = None


class SmsResult(WireModel):
    """SMS block of a dispatch response. Present only when SMS was requested."""

    sent: bool
    configured: bool
    error_message: str | None = None
    responses: list[SmsDelivery] = Field(default_factory=list)
    twilio_phone: str | None = None


class DispatchResult(WireModel):
    """Dispatch endpoint response. `email` is the opaque provider result."""

    email: Any = None
    sms: SmsResult | None = None


class Notification(BaseModel):
    """User-facing toast produced by the dispatch coordinator."""

    title: str
    description: str
    variant: Literal["default", "warning", "destructive"] = "default"
