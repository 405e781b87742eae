"""Structural validators for alert recipients."""

import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# E.164-like: optional leading +, first digit 1-9, at most 15 digits
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")


def is_valid_email(value: str) -> bool:
    return bool(value) and EMAIL_PATTERN.fullmatch(value) is not None


def is_valid_phone(value: str) -> bool:
    return bool(value) and PHONE_PATTERN.fullmatch(value) is not None


def filter_phone_numbers(phone_numbers: list[str]) -> list[str]:
    """Drop blank entries (after strip), keeping order and the entries as typed."""
    return [phone for phone in phone_numbers if phone.strip() != ""]
