"""Normalization of the aggregate devicestate response."""

from typing import Any, Dict, List, Optional

from alpacabridge.types import DeviceStateEntry


def parse_device_state_entries(result: Any) -> Optional[List[DeviceStateEntry]]:
    """Extract {Name, Value} entries from a devicestate Value.

    Returns None when the result is not a list; malformed items are skipped.
    """
    if not isinstance(result, list):
        return None
    entries = []
    for item in result:
        if isinstance(item, dict) and "Name" in item and "Value" in item:
            entries.append(DeviceStateEntry(name=str(item["Name"]), value=item["Value"]))
    return entries


def normalize_device_state(result: Any) -> Optional[Dict[str, Any]]:
    """Flatten a devicestate Value into {lower-cased name: value}.

    - list of {Name, Value} entries: one key per entry ([] gives {})
    - plain object (non-standard devices): its keys lower-cased, None if empty
    - anything else: None
    """
    entries = parse_device_state_entries(result)
    if entries is not None:
        return {entry.name.lower(): entry.value for entry in entries}

    if isinstance(result, dict):
        state = {str(key).lower(): value for key, value in result.items()}
        return state or None

    return None
