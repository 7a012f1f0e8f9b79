"""
Value transforms between the Alpaca wire format and Python values.

Outbound values are rendered the way Alpaca servers expect them in query
strings and form bodies; booleans in particular must be the literal strings
"True" and "False". Inbound values pass through unchanged unless coercion is
enabled, since devices are inconsistent about returning numbers and booleans
as strings.
"""

import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, Mapping, Optional

from alpacabridge.types import ValueKind


def to_wire_value(value: Any) -> Any:
    """Transform a Python value into its Alpaca wire representation.

    Args:
        value: Value to send to the device

    Returns:
        "True"/"False" for booleans, ISO-8601 text for dates, the value
        itself otherwise

    Raises:
        ValueError: If value is a non-finite float
    """
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, datetime):
        if value.utcoffset() == timedelta(0):
            return value.replace(tzinfo=None).isoformat() + "Z"
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Invalid numeric value: {value}")
    return value


def from_wire_value(value: Any, coerce: bool = False) -> Any:
    """Transform a value received from a device.

    Args:
        value: Decoded JSON value
        coerce: Convert "True"/"False" and numeric strings to bool/int/float

    Returns:
        The transformed value
    """
    if not coerce or not isinstance(value, str):
        return value

    if value == "True":
        return True
    if value == "False":
        return False

    text = value.strip()
    if not text:
        return value
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return value
    # "nan"/"inf" are words, not numbers
    return number if math.isfinite(number) else value


def to_wire_params(params: Mapping[str, Any]) -> Dict[str, str]:
    """Render a parameter mapping for a query string or form body.

    None values are dropped.
    """
    return {
        key: str(to_wire_value(value))
        for key, value in params.items()
        if value is not None
    }


# =============================================================================
# Type Validation
# =============================================================================

def kind_of(value: Any) -> Optional[ValueKind]:
    """Derive the ValueKind of an observed value, or None for null."""
    if value is None:
        return None
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    return ValueKind.OBJECT


def matches_kind(value: Any, expected: ValueKind) -> bool:
    """Check a value's runtime type against an expected kind."""
    if expected is ValueKind.BOOLEAN:
        return isinstance(value, bool)
    if expected is ValueKind.NUMBER:
        return (
            isinstance(value, (int, float))
            and not isinstance(value, bool)
            and not (isinstance(value, float) and math.isnan(value))
        )
    if expected is ValueKind.STRING:
        return isinstance(value, str)
    if expected is ValueKind.ARRAY:
        return isinstance(value, (list, tuple))
    # OBJECT includes arrays
    return isinstance(value, (dict, list, tuple))
