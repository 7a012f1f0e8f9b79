"""
alpacabridge Shared Type Definitions

Common value types used across the client core: the per-client identity,
HTTP verbs, value-kind hints for validation, device-state entries and the
events delivered to the request-logging hook.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union

from alpacabridge.exceptions import AlpacaError


# =============================================================================
# Protocol Constants
# =============================================================================

API_PREFIX = "/api/v1/"
DEFAULT_ALPACA_PORT = 11111
MAX_CLIENT_ID = 65535

# ASCOM Alpaca ErrorNumber values
ERROR_NOT_IMPLEMENTED = 0x400       # 1024
ERROR_INVALID_VALUE = 0x401         # 1025
ERROR_VALUE_NOT_SET = 0x402         # 1026
ERROR_NOT_CONNECTED = 0x407         # 1031
ERROR_INVALID_WHILE_PARKED = 0x408  # 1032
ERROR_INVALID_WHILE_SLAVED = 0x409  # 1033
ERROR_INVALID_OPERATION = 0x40B     # 1035
ERROR_ACTION_NOT_IMPLEMENTED = 0x40C  # 1036
ERROR_DRIVER_BASE = 0x500           # 1280, start of driver-specific range


class HttpMethod(str, Enum):
    """HTTP verbs used by the Alpaca device API."""
    GET = "GET"
    PUT = "PUT"


class ValueKind(Enum):
    """Expected runtime type of a property value."""
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    OBJECT = "object"
    ARRAY = "array"


# =============================================================================
# Client Identity
# =============================================================================

@dataclass(frozen=True)
class ClientContext:
    """Immutable identity of one device client.

    The client_id is chosen once at construction and sent with every request
    so the server can correlate calls from the same client.
    """
    base_url: str
    device_type: str
    device_number: int
    client_id: int = field(default_factory=lambda: random.randint(0, MAX_CLIENT_ID))

    @classmethod
    def create(
        cls,
        base_url: str,
        device_type: str,
        device_number: int = 0,
        client_id: Optional[int] = None,
    ) -> "ClientContext":
        """Build a context, normalizing the base URL and device kind."""
        base_url = base_url.rstrip("/")
        if client_id is None:
            return cls(base_url, device_type.lower(), device_number)
        if not 0 <= client_id <= MAX_CLIENT_ID:
            raise ValueError(f"client_id must be in 0..{MAX_CLIENT_ID}, got {client_id}")
        return cls(base_url, device_type.lower(), device_number, client_id)

    def device_url(self, member: str) -> str:
        """Absolute URL of a device member (already in wire form).

        An /api/v1/ segment already present in the base URL (for example
        behind a reverse proxy) is replaced, keeping the prefix casing.
        """
        path = f"{API_PREFIX}{self.device_type.lower()}/{self.device_number}/{member.lower()}"
        index = self.base_url.lower().find(API_PREFIX)
        if index != -1:
            return f"{self.base_url[:index]}{path}"
        return f"{self.base_url}{path}"


# =============================================================================
# Device State
# =============================================================================

@dataclass(frozen=True)
class DeviceStateEntry:
    """One {Name, Value} item of the devicestate response."""
    name: str
    value: Any


# =============================================================================
# Request Logging Events
# =============================================================================

@dataclass
class RequestEvent:
    """Emitted once per logical call, before the first attempt."""
    method: HttpMethod
    url: str
    params: Mapping[str, Any] = field(default_factory=dict)
    body: Optional[Mapping[str, str]] = None


@dataclass
class ResponseEvent:
    """Emitted after every attempt, carrying either a value or an error."""
    url: str
    attempt: int
    response: Any = None
    error: Optional[AlpacaError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


RequestHook = Callable[[Union[RequestEvent, ResponseEvent]], None]
