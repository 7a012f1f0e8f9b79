"""
alpacabridge Custom Exceptions

Provides the exception hierarchy for the Alpaca client core. Every failure
of a device call surfaces as a classified AlpacaError carrying enough detail
(HTTP status, device error code/message, retry eligibility) for the caller
to decide what to do next.

Exception Hierarchy:
    AlpacaBridgeError (base)
    ├── ConfigurationError
    └── AlpacaError (classified request failure)
        ├── AlpacaTimeoutError    kind=TIMEOUT, retried
        ├── AlpacaNetworkError    kind=NETWORK, retried
        ├── AlpacaServerError     kind=SERVER, retried
        ├── AlpacaDeviceError     kind=DEVICE
        └── AlpacaResponseError   kind=UNKNOWN
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class AlpacaBridgeError(Exception):
    """Base exception for all alpacabridge errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional error context
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(AlpacaBridgeError):
    """Error in configuration file or settings.

    Raised when a config file is missing or unparseable, or when its values
    fail validation.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_file: Optional[str] = None,
    ) -> None:
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_file:
            details["config_file"] = config_file
        super().__init__(message, details)
        self.config_key = config_key
        self.config_file = config_file


# =============================================================================
# Classified Request Errors
# =============================================================================

class ErrorKind(Enum):
    """Failure classification for Alpaca requests."""
    TIMEOUT = "timeout"    # Attempt exceeded its timeout
    NETWORK = "network"    # Connection/DNS/transport failure
    SERVER = "server"      # HTTP 5xx without a protocol envelope
    DEVICE = "device"      # ErrorNumber != 0, or HTTP 4xx
    UNKNOWN = "unknown"    # Body could not be parsed


@dataclass(frozen=True)
class DeviceErrorInfo:
    """Protocol-level error reported by the device (ErrorNumber/ErrorMessage)."""
    code: int
    message: str


class AlpacaError(AlpacaBridgeError):
    """A classified failure of an Alpaca request.

    Raised by the response interpreter and by the request executor's
    failure mapping. The executor only propagates the error of the final
    attempt.

    Attributes:
        kind: ErrorKind classification
        request_url: URL of the failed request
        http_status: HTTP status code, when a response was received
        device_error: ErrorNumber/ErrorMessage reported by the device
        retry_eligible: Whether the executor may retry this failure
    """

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        request_url: str,
        http_status: Optional[int] = None,
        device_error: Optional[DeviceErrorInfo] = None,
        retry_eligible: bool = False,
        kind: Optional[ErrorKind] = None,
    ) -> None:
        if kind is not None:
            self.kind = kind
        details: dict[str, Any] = {"kind": self.kind.value, "url": request_url}
        if http_status is not None:
            details["status"] = http_status
        if device_error is not None:
            details["error_number"] = device_error.code
        super().__init__(message, details)
        self.request_url = request_url
        self.http_status = http_status
        self.device_error = device_error
        self.retry_eligible = retry_eligible


class AlpacaTimeoutError(AlpacaError):
    """Request attempt timed out and was aborted."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, request_url: str, timeout_seconds: Optional[float] = None) -> None:
        super().__init__(message, request_url, retry_eligible=True)
        if timeout_seconds is not None:
            self.details["timeout_seconds"] = timeout_seconds
        self.timeout_seconds = timeout_seconds


class AlpacaNetworkError(AlpacaError):
    """Transport-level failure (connection refused, DNS, reset)."""

    kind = ErrorKind.NETWORK

    def __init__(self, message: str, request_url: str) -> None:
        super().__init__(message, request_url, retry_eligible=True)


class AlpacaServerError(AlpacaError):
    """HTTP 5xx response without a usable protocol envelope."""

    kind = ErrorKind.SERVER

    def __init__(self, message: str, request_url: str, http_status: int) -> None:
        super().__init__(message, request_url, http_status=http_status, retry_eligible=True)


class AlpacaDeviceError(AlpacaError):
    """Device-reported rejection: ErrorNumber != 0, HTTP 4xx, or a value
    of the wrong type.

    Never retried on a successful HTTP status; an error envelope carried by
    a 5xx response stays retry-eligible.
    """

    kind = ErrorKind.DEVICE

    def __init__(
        self,
        message: str,
        request_url: str,
        http_status: Optional[int] = None,
        device_error: Optional[DeviceErrorInfo] = None,
        retry_eligible: bool = False,
    ) -> None:
        super().__init__(
            message,
            request_url,
            http_status=http_status,
            device_error=device_error,
            retry_eligible=retry_eligible,
        )

    @property
    def error_number(self) -> Optional[int]:
        """ErrorNumber reported by the device, if any."""
        return self.device_error.code if self.device_error else None


class AlpacaResponseError(AlpacaError):
    """Response body could not be parsed as JSON."""

    kind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        request_url: str,
        http_status: Optional[int] = None,
        retry_eligible: bool = False,
    ) -> None:
        super().__init__(message, request_url, http_status=http_status, retry_eligible=retry_eligible)
