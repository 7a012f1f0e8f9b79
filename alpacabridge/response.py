"""
Alpaca response envelope interpretation.

Every Alpaca response is a JSON object carrying ErrorNumber/ErrorMessage and,
for reads, a Value. A successful HTTP status is not a successful call: a 200
response may still report a device-level failure in its envelope.
"""

import json
from typing import Any, Optional, Union

from alpacabridge.exceptions import (
    AlpacaDeviceError,
    AlpacaResponseError,
    AlpacaServerError,
    DeviceErrorInfo,
)


def _is_success(status: int) -> bool:
    return 200 <= status < 300


def _decode(body: Union[str, bytes]) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def parse_envelope(body: Union[str, bytes]) -> Optional[dict]:
    """Parse a body as a protocol envelope, or None if it is not one."""
    try:
        data = json.loads(_decode(body))
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _device_error(envelope: dict) -> Optional[DeviceErrorInfo]:
    error_number = envelope.get("ErrorNumber")
    if not error_number:
        return None
    try:
        code = int(error_number)
    except (TypeError, ValueError):
        code = -1
    if code == 0:
        return None
    return DeviceErrorInfo(code=code, message=envelope.get("ErrorMessage") or "")


def _device_error_message(info: DeviceErrorInfo) -> str:
    return info.message or f"Error {info.code}"


def interpret_response(
    status: int,
    body: Union[str, bytes],
    url: str,
    reason: str = "",
    retry_unknown: bool = False,
) -> Any:
    """Turn one HTTP response into a value or a classified error.

    Args:
        status: HTTP status code
        body: Raw response body
        url: Request URL, recorded on raised errors
        reason: HTTP reason phrase
        retry_unknown: Retry eligibility for unparseable bodies

    Returns:
        body["Value"] when present (even if null), else the whole body

    Raises:
        AlpacaDeviceError: ErrorNumber != 0, or a 4xx status
        AlpacaServerError: 5xx status without an error envelope
        AlpacaResponseError: Successful status with a non-JSON body
    """
    if not _is_success(status):
        envelope = parse_envelope(body)
        info = _device_error(envelope) if envelope is not None else None
        if info is not None:
            raise AlpacaDeviceError(
                _device_error_message(info),
                url,
                http_status=status,
                device_error=info,
                retry_eligible=status >= 500,
            )
        message = f"HTTP error {status}: {reason}".rstrip(": ")
        if status >= 500:
            raise AlpacaServerError(message, url, status)
        raise AlpacaDeviceError(message, url, http_status=status)

    try:
        data = json.loads(_decode(body))
    except ValueError as e:
        raise AlpacaResponseError(
            "Failed to parse response as JSON",
            url,
            http_status=status,
            retry_eligible=retry_unknown,
        ) from e

    if not isinstance(data, dict):
        return data

    info = _device_error(data)
    if info is not None:
        raise AlpacaDeviceError(
            _device_error_message(info),
            url,
            http_status=status,
            device_error=info,
            retry_eligible=False,
        )

    return data["Value"] if "Value" in data else data


def raise_for_envelope(status: int, body: Union[str, bytes], url: str) -> None:
    """Raise the classified error carried by an error envelope, if any.

    Used for binary responses, where a JSON body only ever signals failure.
    """
    envelope = parse_envelope(body)
    if envelope is None:
        return
    info = _device_error(envelope)
    if info is not None:
        raise AlpacaDeviceError(
            _device_error_message(info),
            url,
            http_status=status,
            device_error=info,
            retry_eligible=False,
        )
