"""Small helpers shared by the model ``to_dict()`` methods."""

from datetime import date, datetime


def iso(value):
    """ISO-8601 string for a date/datetime, or None."""
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def money(value):
    """Amounts are stored as floats; never emit None for a money field."""
    return float(value or 0)
