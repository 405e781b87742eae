"""Schemas for the crisis alert forms (operator input)."""

from typing import Literal

from pydantic import BaseModel, Field

CrisisType = Literal["drought", "economic", "political", "social", "other"]
Severity = Literal["low", "medium", "high", "extreme"]


class CrisisContext(BaseModel):
    """Crisis metadata supplied by the page that renders the alert form."""

    model_config = {"frozen": True}

    crisis_type: CrisisType = "drought"
    region_name: str = "Selected Region"
    severity: Severity = "medium"


def default_subject(context: CrisisContext) -> str:
    return f"{context.severity.upper()} {context.crisis_type} Crisis Alert for {context.region_name}"


def default_body(context: CrisisContext) -> str:
    return (
        f"This is an automated alert regarding the {context.severity} level "
        f"{context.crisis_type} crisis situation developing in {context.region_name}. "
        "Please take appropriate action."
    )


class EmailAlertForm(BaseModel):
    """Email alert fields. Category toggles add fixed recipients server-side."""

    recipient_email: str = ""
    subject: str = ""
    body: str = ""
    notify_authorities: bool = True
    notify_ngos: bool = False
    notify_media: bool = False

    @classmethod
    def for_context(cls, context: CrisisContext) -> "EmailAlertForm":
        return cls(subject=default_subject(context), body=default_body(context))


class SmsAlertForm(BaseModel):
    """SMS alert fields. Toggles are independent of the email toggles."""

    sms_enabled: bool = False
    phone_numbers: list[str] = Field(default_factory=lambda: [""])
    notify_authorities: bool = True
    notify_ngos: bool = False
    notify_media: bool = False
