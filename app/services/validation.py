"""Input sanitising and validation shared by the submission services.

All free text is stripped of HTML with bleach.clean() before it is
validated or stored. Validators collect every problem instead of stopping
at the first one, so a form can show all errors at once.
"""

import re
from datetime import date, datetime

import bleach

# Simple email regex — not exhaustive, just sanity-check
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Digits with an optional leading "+", after removing spaces, dashes, parens
PHONE_RE = re.compile(r"^\+?[1-9]\d{0,15}$")
PHONE_STRIP_RE = re.compile(r"[\s\-()]")

MAX_NAME_LENGTH = 200
MAX_MESSAGE_LENGTH = 5000
MAX_FIELD_LENGTH = 1000


class SubmissionValidationError(ValueError):
    """Raised when a payload fails validation. Carries every error message."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def sanitize(text, max_length=None):
    """Strip all HTML tags and surrounding whitespace. Non-strings pass through."""
    if text is None:
        return None
    if not isinstance(text, str):
        return text
    cleaned = bleach.clean(text, tags=[], strip=True).strip()
    if max_length is not None:
        cleaned = cleaned[:max_length]
    return cleaned


def clean_payload(data, fields, errors):
    """Return {field: sanitised value or None} for the given text fields only.

    A value that is present but not a string is reported as
    "<field> must be a string" and left as-is; the format and length
    checks below only look at strings.
    """
    cleaned = {}
    for field in fields:
        value = data.get(field)
        if isinstance(value, str):
            value = sanitize(value) or None
        elif value is not None:
            errors.append(f"{field} must be a string")
        cleaned[field] = value
    return cleaned


def clean_text(value, field):
    """Sanitise a single text value from an admin edit; None when blank.

    Raises:
        ValueError: If the value is present but not a string.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    return sanitize(value) or None


def text_of(data, field):
    """The field's value when it is a non-empty string, else None."""
    value = data.get(field)
    return value if isinstance(value, str) and value else None


def is_valid_email(email):
    return isinstance(email, str) and EMAIL_RE.match(email) is not None


def is_valid_phone(phone):
    if not isinstance(phone, str):
        return False
    return PHONE_RE.match(PHONE_STRIP_RE.sub("", phone)) is not None


def check_required(data, fields, errors):
    """Append "<field> is required" for every blank or missing field."""
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append(f"{field} is required")


def check_contact_fields(data, errors):
    """Email format, optional phone format, name length."""
    email = text_of(data, "email")
    if email and not is_valid_email(email):
        errors.append("Invalid email format")
    phone = text_of(data, "phone")
    if phone and not is_valid_phone(phone):
        errors.append("Invalid phone number format")
    name = text_of(data, "name")
    if name and len(name) > MAX_NAME_LENGTH:
        errors.append("name is too long")


def check_choice(data, field, choices, errors):
    value = text_of(data, field)
    if value and value not in choices:
        errors.append(f"{field} must be one of: {', '.join(choices)}")


def parse_date(value):
    """Accept "2025-03-03" or a full ISO datetime string; None when blank.

    Raises:
        ValueError: If the value isn't a recognisable date.
    """
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValueError(f"Invalid date '{text}'. Use YYYY-MM-DD.")


def parse_datetime(value):
    """Parse an ISO datetime (a trailing "Z" is accepted); None when blank."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid datetime '{value}'.")


def parse_amount(value, field="amount"):
    """Parse a non-negative number.

    Raises:
        ValueError: If the value is not a number or is negative.
    """
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be a number.")
    if amount < 0:
        raise ValueError(f"{field} cannot be negative.")
    return amount
