import re
from typing import Optional

# Any unicode letter, plus spaces, hyphens and apostrophes
NAME_PATTERN = re.compile(r"^(?:[^\W\d_]|[\s\-'])+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15


def name_error(value: Optional[str], label: str) -> Optional[str]:
    """Return a message describing what is wrong with a name, or None."""
    trimmed = (value or "").strip()
    if not trimmed:
        return f"{label} is required"
    if len(trimmed) < 2:
        return "At least 2 characters required"
    if not NAME_PATTERN.match(trimmed):
        return "Only letters, spaces, hyphens and apostrophes allowed"
    return None


def phone_digits(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def phone_error(value: Optional[str]) -> Optional[str]:
    digits = phone_digits(value)
    if not digits:
        return "Phone number is required"
    if len(digits) < PHONE_MIN_DIGITS:
        return "Enter a valid 10-digit phone number"
    if len(digits) > PHONE_MAX_DIGITS:
        return "Phone number is too long"
    return None


def email_error(value: Optional[str]) -> Optional[str]:
    trimmed = (value or "").strip()
    if not trimmed:
        return "Email is required"
    if not EMAIL_PATTERN.match(trimmed):
        return "Enter a valid email address"
    return None
