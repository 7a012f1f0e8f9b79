"""
ASCOM Alpaca device-kind clients.

Async clients for telescopes, cameras, focusers, filter wheels and safety
monitors, built on the alpacabridge core client.
"""

from .alpaca_client import (
    AlpacaDevice,
    AlpacaDeviceBase,
    AlpacaTelescope,
    AlpacaCamera,
    AlpacaFocuser,
    AlpacaFilterWheel,
    AlpacaSafetyMonitor,
    CameraState,
    PierSide,
    create_configured_clients,
    create_device_client,
)

__all__ = [
    "AlpacaDevice",
    "AlpacaDeviceBase",
    "AlpacaTelescope",
    "AlpacaCamera",
    "AlpacaFocuser",
    "AlpacaFilterWheel",
    "AlpacaSafetyMonitor",
    "CameraState",
    "PierSide",
    "create_configured_clients",
    "create_device_client",
]
