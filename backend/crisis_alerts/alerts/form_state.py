"""Form state for the email and SMS alert slices."""

from crisis_alerts.alerts.validators import is_valid_email
from crisis_alerts.schemas.alert import CrisisContext, EmailAlertForm, SmsAlertForm


class AlertFormState:
    """Holds the two independently addressable form slices plus `email_valid`.

    Every operation is a synchronous local mutation. Slices are replaced, not
    mutated in place, so a reference taken before an update keeps its values.
    """

    def __init__(self, context: CrisisContext):
        self.email = EmailAlertForm.for_context(context)
        self.sms = SmsAlertForm()
        self.email_valid = True

    def set_email_field(self, **patch) -> None:
        _check_fields(EmailAlertForm, patch)
        self.email = self.email.model_copy(update=patch)

    def set_sms_field(self, **patch) -> None:
        _check_fields(SmsAlertForm, patch)
        self.sms = self.sms.model_copy(update=patch)

    def set_email_value(self, value: str) -> None:
        """Update the recipient address; an empty field never shows an error."""
        self.email = self.email.model_copy(update={"recipient_email": value})
        self.email_valid = is_valid_email(value) if value else True

    def add_phone_slot(self) -> None:
        self.set_sms_field(phone_numbers=[*self.sms.phone_numbers, ""])

    def remove_phone_slot(self, index: int) -> None:
        # At least one input row stays visible
        if len(self.sms.phone_numbers) <= 1 or not self._has_slot(index):
            return
        phone_numbers = list(self.sms.phone_numbers)
        del phone_numbers[index]
        self.set_sms_field(phone_numbers=phone_numbers)

    def set_phone_value(self, index: int, value: str) -> None:
        """Replace one slot; an index with no slot leaves the list unchanged."""
        if not self._has_slot(index):
            return
        phone_numbers = list(self.sms.phone_numbers)
        phone_numbers[index] = value
        self.set_sms_field(phone_numbers=phone_numbers)

    def _has_slot(self, index: int) -> bool:
        return 0 <= index < len(self.sms.phone_numbers)


def _check_fields(model, patch: dict) -> None:
    unknown = sorted(set(patch) - set(model.model_fields))
    if unknown:
        raise AttributeError(f"Unknown {model.__name__} field(s): {', '.join(unknown)}")
