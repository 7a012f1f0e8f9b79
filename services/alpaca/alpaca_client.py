"""
ASCOM Alpaca device-kind clients.

Thin async wrappers over alpacabridge.AlpacaClient for telescopes, cameras,
focusers, filter wheels and safety monitors. Each wrapper only names device
members and parameter shapes; request policy, error classification and value
transforms live in the core client. Errors propagate as AlpacaError.

Example:
    >>> from services.alpaca import AlpacaTelescope
    >>> telescope = AlpacaTelescope("192.168.1.100", 11111, 0)
    >>> await telescope.connect()
    >>> await telescope.slew_to_coordinates(12.5, 45.0)
    >>> while await telescope.is_slewing():
    ...     await asyncio.sleep(0.5)
    >>> print(await telescope.get_position())
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Type

import aiohttp

from alpacabridge.client import AlpacaClient
from alpacabridge.config import ClientConfig, DeviceEntry, RequestOptions
from alpacabridge.types import DEFAULT_ALPACA_PORT, ValueKind

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class AlpacaDevice:
    """Descriptor of an Alpaca device on a server."""
    name: str
    device_type: str
    address: str
    port: int
    device_number: int
    unique_id: str = ""

    @property
    def endpoint(self) -> str:
        """Get the base endpoint URL for this device."""
        return f"http://{self.address}:{self.port}"

    @classmethod
    def from_entry(cls, entry: DeviceEntry) -> "AlpacaDevice":
        """Build a descriptor from a config file device entry."""
        return cls(
            name=entry.name or f"{entry.device_type} {entry.device_number}",
            device_type=entry.device_type,
            address=entry.address,
            port=entry.port,
            device_number=entry.device_number,
            unique_id=entry.unique_id,
        )


@dataclass
class CameraState:
    """Camera exposure and readout state."""

    class State(Enum):
        IDLE = 0
        WAITING = 1
        EXPOSING = 2
        READING = 3
        DOWNLOAD = 4
        ERROR = 5

    state: State
    percent_complete: Optional[float]
    image_ready: Optional[bool]


class PierSide(Enum):
    EAST = 0
    WEST = 1
    UNKNOWN = -1


# ============================================================================
# Base Adapter
# ============================================================================

class AlpacaDeviceBase:
    """
    Base class for Alpaca device-kind clients.

    Owns one AlpacaClient and exposes the members common to every Alpaca
    device (connection, identity, actions, devicestate).
    """

    DEVICE_TYPE = "device"
    STATUS_PROPERTIES: List[str] = []
    PROPERTY_TYPES: Dict[str, ValueKind] = {}

    def __init__(
        self,
        address: str,
        port: int = DEFAULT_ALPACA_PORT,
        device_number: int = 0,
        config: Optional[ClientConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        device_type: Optional[str] = None,
    ):
        """
        Initialize Alpaca device client.

        Args:
            address: IP address or hostname of the Alpaca server, or a full
                     base URL (http://host:port[/prefix])
            port: Alpaca API port (ignored when address is a URL)
            device_number: Device number on the server
            config: Client configuration
            session: Optional shared aiohttp session
            device_type: Device kind for the generic base class
        """
        self.address = address
        self.port = port
        self.device_number = device_number
        self.client = AlpacaClient(
            self._get_endpoint(),
            device_type or self.DEVICE_TYPE,
            device_number,
            config=config,
            session=session,
            property_types=self.PROPERTY_TYPES,
        )
        self._connected = False

    @property
    def is_connected(self) -> bool:
        """Connection state recorded by the last connect/disconnect."""
        return self._connected

    @property
    def client_id(self) -> int:
        return self.client.client_id

    def _get_endpoint(self) -> str:
        """Get base API endpoint."""
        if self.address.startswith(("http://", "https://")):
            return self.address
        return f"http://{self.address}:{self.port}"

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Common device members
    # -------------------------------------------------------------------------

    async def connect(self, options: Optional[RequestOptions] = None) -> bool:
        """
        Connect to the device.

        Returns:
            Connected state reported by the device after the request
        """
        await self.client.set_property("connected", True, options)
        self._connected = bool(await self.client.get_property("connected", options))
        if self._connected:
            logger.info(
                f"Connected to Alpaca {self.client.device_type} at "
                f"{self._get_endpoint()}/{self.device_number}"
            )
        return self._connected

    async def disconnect(self, options: Optional[RequestOptions] = None) -> None:
        """Disconnect from the device."""
        await self.client.set_property("connected", False, options)
        self._connected = False

    async def check_connected(self, options: Optional[RequestOptions] = None) -> bool:
        """Ask the device whether it is connected."""
        self._connected = bool(await self.client.get_property("connected", options))
        return self._connected

    async def get_info(self, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        """Name, description and driver details (missing ones omitted)."""
        return await self.client.get_properties(
            ["name", "description", "driverinfo", "driverversion", "interfaceversion"],
            options,
        )

    async def supported_actions(self, options: Optional[RequestOptions] = None) -> List[str]:
        return await self.client.get_property("supportedactions", options, expected=ValueKind.ARRAY)

    async def action(self, name: str, parameters: str = "", options: Optional[RequestOptions] = None) -> Any:
        """Invoke a device-specific action."""
        return await self.client.put("action", {"Action": name, "Parameters": parameters}, options)

    async def command_blind(self, command: str, raw: bool = False, options: Optional[RequestOptions] = None) -> None:
        """Send a command string without waiting for a response value."""
        await self.client.put("commandblind", {"Command": command, "Raw": raw}, options)

    async def get_device_state(self, options: Optional[RequestOptions] = None) -> Optional[Dict[str, Any]]:
        return await self.client.get_device_state(options)

    async def get_status(self, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        """Snapshot of the kind's status properties (missing ones omitted)."""
        status = await self.client.get_properties(self.STATUS_PROPERTIES, options)
        status["connected"] = self._connected
        return status


# ============================================================================
# Telescope Adapter
# ============================================================================

class AlpacaTelescope(AlpacaDeviceBase):
    """
    ASCOM Alpaca telescope client.

    Provides mount control including slewing, tracking, parking,
    and position readout.
    """

    DEVICE_TYPE = "telescope"
    STATUS_PROPERTIES = [
        "rightascension",
        "declination",
        "altitude",
        "azimuth",
        "tracking",
        "slewing",
        "atpark",
        "sideofpier",
    ]
    PROPERTY_TYPES = {
        "rightascension": ValueKind.NUMBER,
        "declination": ValueKind.NUMBER,
        "tracking": ValueKind.BOOLEAN,
        "slewing": ValueKind.BOOLEAN,
    }
    CAPABILITIES = [
        "canfindhome",
        "canpark",
        "canunpark",
        "cansetpark",
        "canpulseguide",
        "cansettracking",
        "canslew",
        "canslewasync",
        "canslewaltaz",
        "canslewaltazasync",
        "cansync",
        "cansyncaltaz",
    ]

    async def get_position(self, options: Optional[RequestOptions] = None) -> Dict[str, Any]:
        """RA (hours), Dec (degrees), altitude and azimuth (degrees)."""
        return await self.client.get_properties(
            ["rightascension", "declination", "altitude", "azimuth"],
            options,
        )

    async def is_tracking(self, options: Optional[RequestOptions] = None) -> bool:
        return await self.client.get_property("tracking", options)

    async def is_slewing(self, options: Optional[RequestOptions] = None) -> bool:
        return await self.client.get_property("slewing", options)

    async def is_parked(self, options: Optional[RequestOptions] = None) -> bool:
        return await self.client.get_property("atpark", options)

    async def pier_side(self, options: Optional[RequestOptions] = None) -> PierSide:
        """Current pier side."""
        side = await self.client.get_property("sideofpier", options)
        try:
            return PierSide(side)
        except ValueError:
            return PierSide.UNKNOWN

    async def get_capabilities(self, options: Optional[RequestOptions] = None) -> Dict[str, Optional[bool]]:
        """Probe every capability flag; None marks an unknown capability."""
        results = {}
        for name in self.CAPABILITIES:
            results[name] = await self.client.probe_capability(name, options)
        return results

    async def set_tracking(self, enabled: bool, options: Optional[RequestOptions] = None) -> None:
        await self.client.set_property("tracking", enabled, options)
        logger.info(f"Tracking {'enabled' if enabled else 'disabled'}")

    async def slew_to_coordinates(
        self,
        ra: float,
        dec: float,
        async_slew: bool = True,
        options: Optional[RequestOptions] = None,
    ) -> None:
        """
        Slew to RA/Dec coordinates.

        Args:
            ra: Right Ascension in decimal hours (0-24)
            dec: Declination in decimal degrees (-90 to +90)
            async_slew: If True, return immediately while slewing
            options: Per-call request options
        """
        member = "slewtocoordinatesasync" if async_slew else "slewtocoordinates"
        await self.client.put(member, {"RightAscension": ra, "Declination": dec}, options)
        logger.info(f"Slewing to RA={ra:.4f}h, Dec={dec:.4f}°")

    async def slew_to_altaz(
        self,
        alt: float,
        az: float,
        async_slew: bool = True,
        options: Optional[RequestOptions] = None,
    ) -> None:
        """Slew to Alt/Az coordinates in degrees."""
        member = "slewtoaltazasync" if async_slew else "slewtoaltaz"
        await self.client.put(member, {"Azimuth": az, "Altitude": alt}, options)
        logger.info(f"Slewing to Alt={alt:.2f}°, Az={az:.2f}°")

    async def abort_slew(self, options: Optional[RequestOptions] = None) -> None:
        await self.client.call_method("abortslew", options=options)
        logger.info("Slew aborted")

    async def park(self, options: Optional[RequestOptions] = None) -> None:
        await self.client.call_method("park", options=options)
        logger.info("Parking telescope")

    async def unpark(self, options: Optional[RequestOptions] = None) -> None:
        await self.client.call_method("unpark", options=options)
        logger.info("Telescope unparked")

    async def sync(self, ra: float, dec: float, options: Optional[RequestOptions] = None) -> None:
        """Sync the mount to known RA/Dec coordinates."""
        await self.client.put("synctocoordinates", {"RightAscension": ra, "Declination": dec}, options)

    async def pulse_guide(
        self,
        direction: int,
        duration_ms: int,
        options: Optional[RequestOptions] = None,
    ) -> None:
        """Pulse guide (0=N, 1=S, 2=E, 3=W) for duration_ms milliseconds."""
        await self.client.put("pulseguide", {"Direction": direction, "Duration": duration_ms}, options)


# ============================================================================
# Camera Adapter
# ============================================================================

class AlpacaCamera(AlpacaDeviceBase):
    """
    ASCOM Alpaca camera client.

    Provides exposure control, cooling and raw image retrieval.
    """

    DEVICE_TYPE = "camera"
    STATUS_PROPERTIES = [
        "camerastate",
        "percentcompleted",
        "imageready",
        "ccdtemperature",
        "cooleron",
        "coolerpower",
        "binx",
        "biny",
        "cameraxsize",
        "cameraysize",
    ]
    PROPERTY_TYPES = {
        "camerastate": ValueKind.NUMBER,
        "imageready": ValueKind.BOOLEAN,
    }

    async def get_camera_state(self, options: Optional[RequestOptions] = None) -> CameraState:
        """Exposure state, progress and image readiness."""
        values = await self.client.get_properties(["camerastate", "percentcompleted", "imageready"], options)
        try:
            state = CameraState.State(values.get("cameraState"))
        except ValueError:
            state = CameraState.State.ERROR
        return CameraState(
            state=state,
            percent_complete=values.get("percentCompleted"),
            image_ready=values.get("imageReady"),
        )

    async def can_set_ccd_temperature(self, options: Optional[RequestOptions] = None) -> Optional[bool]:
        return await self.client.probe_capability("cansetccdtemperature", options)

    async def set_binning(self, bin_x: int, bin_y: int, options: Optional[RequestOptions] = None) -> None:
        await self.client.set_property("binx", bin_x, options)
        await self.client.set_property("biny", bin_y, options)

    async def set_cooler(self, enabled: bool, options: Optional[RequestOptions] = None) -> None:
        await self.client.set_property("cooleron", enabled, options)

    async def set_temperature(self, target: float, options: Optional[RequestOptions] = None) -> None:
        """Set the CCD temperature setpoint in °C."""
        await self.client.set_property("setccdtemperature", target, options)

    async def set_subframe(
        self,
        start_x: int,
        start_y: int,
        num_x: int,
        num_y: int,
        options: Optional[RequestOptions] = None,
    ) -> None:
        for name, value in (("startx", start_x), ("starty", start_y), ("numx", num_x), ("numy", num_y)):
            await self.client.set_property(name, value, options)

    async def start_exposure(
        self,
        duration: float,
        light: bool = True,
        options: Optional[RequestOptions] = None,
    ) -> None:
        """
        Start an exposure.

        Args:
            duration: Exposure time in seconds
            light: True for a light frame, False for a dark frame
            options: Per-call request options
        """
        await self.client.put("startexposure", {"Duration": duration, "Light": light}, options)
        logger.info(f"Started {duration}s {'light' if light else 'dark'} exposure")

    async def abort_exposure(self, options: Optional[RequestOptions] = None) -> None:
        await self.client.call_method("abortexposure", options=options)

    async def stop_exposure(self, options: Optional[RequestOptions] = None) -> None:
        await self.client.call_method("stopexposure", options=options)

    async def download_image_bytes(self, options: Optional[RequestOptions] = None) -> bytes:
        """Raw imagearray response body (ImageBytes or JSON), undecoded."""
        return await self.client.get_image_bytes("imagearray", options)


# ============================================================================
# Focuser Adapter
# ============================================================================

class AlpacaFocuser(AlpacaDeviceBase):
    """
    ASCOM Alpaca focuser client.

    Provides absolute/relative moves and temperature compensation.
    """

    DEVICE_TYPE = "focuser"
    STATUS_PROPERTIES = ["position", "maxstep", "ismoving", "temperature", "tempcomp"]
    PROPERTY_TYPES = {
        "position": ValueKind.NUMBER,
        "ismoving": ValueKind.BOOLEAN,
    }

    async def position(self, options: Optional[RequestOptions] = None) -> int:
        return await self.client.get_property("position", options)

    async def max_position(self, options: Optional[RequestOptions] = None) -> int:
        return await self.client.get_property("maxstep", options)

    async def is_moving(self, options: Optional[RequestOptions] = None) -> bool:
        return await self.client.get_property("ismoving", options)

    async def temperature(self, options: Optional[RequestOptions] = None) -> float:
        return await self.client.get_property("temperature", options, expected=ValueKind.NUMBER)

    async def temp_comp_available(self, options: Optional[RequestOptions] = None) -> Optional[bool]:
        return await self.client.probe_capability("tempcompavailable", options)

    async def set_temp_comp(self, enabled: bool, options: Optional[RequestOptions] = None) -> None:
        await self.client.set_property("tempcomp", enabled, options)

    async def move_absolute(self, position: int, options: Optional[RequestOptions] = None) -> None:
        await self.client.put("move", {"Position": position}, options)
        logger.info(f"Focuser moving to {position}")

    async def move_relative(self, steps: int, options: Optional[RequestOptions] = None) -> None:
        """Move by a step offset from the current position."""
        current = await self.position(options)
        await self.move_absolute(current + steps, options)

    async def halt(self, options: Optional[RequestOptions] = None) -> None:
        await self.client.call_method("halt", options=options)


# ============================================================================
# Filter Wheel Adapter
# ============================================================================

class AlpacaFilterWheel(AlpacaDeviceBase):
    """
    ASCOM Alpaca filter wheel client.

    Provides position setting and filter name lookup.
    """

    DEVICE_TYPE = "filterwheel"
    STATUS_PROPERTIES = ["position", "names", "focusoffsets"]
    PROPERTY_TYPES = {
        "position": ValueKind.NUMBER,
        "names": ValueKind.ARRAY,
    }

    async def position(self, options: Optional[RequestOptions] = None) -> int:
        """Current slot (0-based), -1 while moving."""
        return await self.client.get_property("position", options)

    async def filter_names(self, options: Optional[RequestOptions] = None) -> List[str]:
        return await self.client.get_property("names", options)

    async def current_filter(self, options: Optional[RequestOptions] = None) -> Optional[str]:
        names = await self.filter_names(options)
        position = await self.position(options)
        if 0 <= position < len(names):
            return names[position]
        return None

    async def set_position(self, position: int, options: Optional[RequestOptions] = None) -> None:
        await self.client.set_property("position", position, options)

    async def set_filter_by_name(self, name: str, options: Optional[RequestOptions] = None) -> None:
        """
        Move to the filter with the given name (case-insensitive).

        Raises:
            ValueError: If no filter has that name
        """
        names = await self.filter_names(options)
        for index, filter_name in enumerate(names):
            if filter_name.lower() == name.lower():
                await self.set_position(index, options)
                return
        raise ValueError(f"Filter '{name}' not found. Available: {names}")


# ============================================================================
# Safety Monitor Adapter
# ============================================================================

class AlpacaSafetyMonitor(AlpacaDeviceBase):
    """ASCOM Alpaca safety monitor client."""

    DEVICE_TYPE = "safetymonitor"
    STATUS_PROPERTIES = ["issafe"]
    PROPERTY_TYPES = {"issafe": ValueKind.BOOLEAN}

    async def is_safe(self, options: Optional[RequestOptions] = None) -> bool:
        return await self.client.get_property("issafe", options)


# ============================================================================
# Factory Functions
# ============================================================================

DEVICE_CLIENTS: Dict[str, Type[AlpacaDeviceBase]] = {
    "telescope": AlpacaTelescope,
    "camera": AlpacaCamera,
    "focuser": AlpacaFocuser,
    "filterwheel": AlpacaFilterWheel,
    "safetymonitor": AlpacaSafetyMonitor,
}


def create_device_client(
    device: AlpacaDevice,
    config: Optional[ClientConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> AlpacaDeviceBase:
    """
    Create the client matching a device's kind.

    Kinds without a dedicated client (dome, rotator, switch, ...) get a
    generic AlpacaDeviceBase for that kind.
    """
    device_type = device.device_type.lower()
    client_class = DEVICE_CLIENTS.get(device_type)
    if client_class is None:
        return AlpacaDeviceBase(
            device.address,
            device.port,
            device.device_number,
            config=config,
            session=session,
            device_type=device_type,
        )
    return client_class(device.address, device.port, device.device_number, config=config, session=session)


def create_configured_clients(
    config: ClientConfig,
    session: Optional[aiohttp.ClientSession] = None,
) -> List[AlpacaDeviceBase]:
    """Create one client per device listed in the configuration."""
    return [
        create_device_client(AlpacaDevice.from_entry(entry), config=config, session=session)
        for entry in config.devices
    ]
