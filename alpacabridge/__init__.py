"""
alpacabridge - asyncio client core for the ASCOM Alpaca protocol

Turns the Alpaca REST convention (/api/v1/{devicetype}/{devicenumber}/{member})
into a typed calling surface with consistent error handling.

Architecture:
    - Request executor: GET/PUT marshalling, per-attempt timeouts, retries
    - Response interpreter: protocol envelope -> value or classified error
    - Value codec: wire <-> Python values and property name forms
    - AlpacaClient: get/put, property get/set, bulk fetch, devicestate

License: MIT
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Version tuple for programmatic comparison
VERSION_INFO = (0, 1, 0)

from alpacabridge.exceptions import (
    AlpacaBridgeError,
    AlpacaDeviceError,
    AlpacaError,
    AlpacaNetworkError,
    AlpacaResponseError,
    AlpacaServerError,
    AlpacaTimeoutError,
    ConfigurationError,
    DeviceErrorInfo,
    ErrorKind,
)

from alpacabridge.config import (
    ClientConfig,
    RequestOptions,
    load_config,
)

from alpacabridge.types import (
    ClientContext,
    DeviceStateEntry,
    HttpMethod,
    RequestEvent,
    ResponseEvent,
    ValueKind,
)

from alpacabridge.property_names import (
    to_application_name,
    to_parameter_name,
    to_wire_name,
)

from alpacabridge.client import AlpacaClient

__all__ = [
    "__version__",
    "AlpacaBridgeError",
    "AlpacaClient",
    "AlpacaDeviceError",
    "AlpacaError",
    "AlpacaNetworkError",
    "AlpacaResponseError",
    "AlpacaServerError",
    "AlpacaTimeoutError",
    "ClientConfig",
    "ClientContext",
    "ConfigurationError",
    "DeviceErrorInfo",
    "DeviceStateEntry",
    "ErrorKind",
    "HttpMethod",
    "RequestEvent",
    "RequestOptions",
    "ResponseEvent",
    "ValueKind",
    "load_config",
    "to_application_name",
    "to_parameter_name",
    "to_wire_name",
]
