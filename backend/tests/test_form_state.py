import pytest

from crisis_alerts.alerts.form_state import AlertFormState
from crisis_alerts.schemas.alert import CrisisContext


@pytest.fixture
def forms() -> AlertFormState:
    return AlertFormState(CrisisContext(crisis_type="economic", region_name="Kerala", severity="extreme"))


def test_defaults_derived_from_crisis_context(forms):
    assert forms.email.subject == "EXTREME economic Crisis Alert for Kerala"
    assert forms.email.body.startswith("This is an automated alert regarding the extreme level economic")
    assert "Kerala" in forms.email.body
    assert forms.email.notify_authorities is True
    assert forms.email.notify_ngos is False
    assert forms.sms.sms_enabled is False
    assert forms.sms.phone_numbers == [""]
    assert forms.email_valid is True


def test_set_email_value_validates_on_each_keystroke(forms):
    forms.set_email_value("ops@")
    assert forms.email_valid is False
    forms.set_email_value("ops@example.org")
    assert forms.email_valid is True
    assert forms.email.recipient_email == "ops@example.org"


def test_empty_email_value_never_reports_an_error(forms):
    forms.set_email_value("bad")
    assert forms.email_valid is False
    forms.set_email_value("")
    assert forms.email_valid is True


def test_field_patches_are_shallow_merges(forms):
    forms.set_email_field(notify_media=True, subject="Updated")
    assert forms.email.notify_media is True
    assert forms.email.subject == "Updated"
    assert forms.email.notify_authorities is True

    forms.set_sms_field(sms_enabled=True)
    assert forms.sms.sms_enabled is True
    assert forms.sms.notify_authorities is True


def test_email_and_sms_toggles_are_independent(forms):
    forms.set_sms_field(notify_ngos=True)
    assert forms.sms.notify_ngos is True
    assert forms.email.notify_ngos is False


def test_unknown_field_is_rejected(forms):
    with pytest.raises(AttributeError):
        forms.set_email_field(sendToMedia=True)


def test_phone_slots(forms):
    forms.add_phone_slot()
    forms.set_phone_value(0, "+15551234567")
    forms.set_phone_value(1, "+15557654321")
    assert forms.sms.phone_numbers == ["+15551234567", "+15557654321"]

    forms.remove_phone_slot(0)
    assert forms.sms.phone_numbers == ["+15557654321"]


def test_last_phone_slot_cannot_be_removed(forms):
    forms.remove_phone_slot(0)
    assert forms.sms.phone_numbers == [""]


def test_remove_phone_slot_out_of_range_is_a_no_op(forms):
    forms.add_phone_slot()
    forms.set_phone_value(0, "+15551234567")

    forms.remove_phone_slot(5)
    forms.remove_phone_slot(-1)

    assert forms.sms.phone_numbers == ["+15551234567", ""]


def test_set_phone_value_out_of_range_is_a_no_op(forms):
    forms.set_phone_value(3, "+15551234567")
    forms.set_phone_value(-1, "+15551234567")

    assert forms.sms.phone_numbers == [""]
