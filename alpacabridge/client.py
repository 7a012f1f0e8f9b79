"""
Core Alpaca device client.

AlpacaClient is the calling surface used by every device-kind client. It
offers raw get/put on device members, single-property get/set with name and
value transforms, a concurrent multi-property fetch that tolerates partial
failure, and normalization of the devicestate aggregate.

Example:
    >>> async with AlpacaClient("http://192.168.1.100:11111", "focuser", 0) as focuser:
    ...     await focuser.set_property("tempcomp", True)
    ...     state = await focuser.get_properties(["position", "ismoving"])
    ...     print(state["position"], state["isMoving"])
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

import aiohttp

from alpacabridge.config import ClientConfig, RequestOptions
from alpacabridge.device_state import normalize_device_state
from alpacabridge.exceptions import AlpacaDeviceError, AlpacaError
from alpacabridge.property_names import (
    to_application_name,
    to_parameter_name,
    to_wire_name,
)
from alpacabridge.transport import RequestExecutor
from alpacabridge.types import ClientContext, HttpMethod, RequestHook, ValueKind
from alpacabridge.value_codec import from_wire_value, kind_of, matches_kind, to_wire_value

logger = logging.getLogger(__name__)


class AlpacaClient:
    """Client for one Alpaca device.

    Args:
        base_url: Server root, e.g. "http://192.168.1.100:11111". A base that
                  already contains /api/v1/... (reverse proxy) is accepted.
        device_type: Device kind ("camera", "telescope", ...)
        device_number: Device index on the server
        config: Client configuration; defaults to ClientConfig()
        session: Optional aiohttp session shared across requests
        property_types: Expected value kinds, keyed by property name
        request_hook: Replaces the default request-logging hook
        client_id: Fixed ClientID instead of a random one
    """

    def __init__(
        self,
        base_url: str,
        device_type: str,
        device_number: int = 0,
        config: Optional[ClientConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        property_types: Optional[Mapping[str, ValueKind]] = None,
        request_hook: Optional[RequestHook] = None,
        client_id: Optional[int] = None,
    ):
        self.context = ClientContext.create(base_url, device_type, device_number, client_id)
        self.config = config or ClientConfig()
        self._executor = RequestExecutor(
            self.context,
            self.config,
            session=session,
            hook=request_hook,
        )
        self._property_types: Dict[str, ValueKind] = {}
        for name, kind in (property_types or {}).items():
            self.register_property_type(name, kind)

    @property
    def client_id(self) -> int:
        return self.context.client_id

    @property
    def device_type(self) -> str:
        return self.context.device_type

    @property
    def device_number(self) -> int:
        return self.context.device_number

    def device_url(self, member: str) -> str:
        """URL of a device member (method or property)."""
        return self.context.device_url(to_wire_name(member))

    async def close(self) -> None:
        """Release the client. An injected session is left open for its owner to close."""
        logger.debug(f"Closing {self.device_type} {self.device_number} client")

    async def __aenter__(self) -> "AlpacaClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Raw calls
    # -------------------------------------------------------------------------

    async def get(
        self,
        member: str,
        params: Optional[Mapping[str, Any]] = None,
        options: Optional[RequestOptions] = None,
    ) -> Any:
        """GET a device member; params go in the query string."""
        return await self._executor.execute(HttpMethod.GET, self.device_url(member), params, options)

    async def put(
        self,
        member: str,
        params: Optional[Mapping[str, Any]] = None,
        options: Optional[RequestOptions] = None,
    ) -> Any:
        """PUT a device member; params go in the form body."""
        return await self._executor.execute(HttpMethod.PUT, self.device_url(member), params, options)

    async def call_method(
        self,
        method: str,
        args: Sequence[Any] = (),
        options: Optional[RequestOptions] = None,
    ) -> Any:
        """Invoke a device method with positional arguments.

        Arguments are sent as Parameters[0], Parameters[1], ...
        """
        params = {f"Parameters[{index}]": value for index, value in enumerate(args)}
        return await self.put(method, params, options)

    async def get_image_bytes(
        self,
        member: str = "imagearray",
        options: Optional[RequestOptions] = None,
    ) -> bytes:
        """Fetch an image member as raw bytes, without decoding."""
        return await self._executor.execute_bytes(self.device_url(member), options=options)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    def register_property_type(self, name: str, kind: ValueKind) -> None:
        """Record the expected value kind for a property."""
        self._property_types[to_wire_name(name)] = kind

    def observe_property_types(self, values: Mapping[str, Any]) -> None:
        """Record expected kinds from previously observed values.

        Null values carry no type information and are ignored.
        """
        for name, value in values.items():
            kind = kind_of(value)
            if kind is not None:
                self.register_property_type(name, kind)

    async def get_property(
        self,
        name: str,
        options: Optional[RequestOptions] = None,
        expected: Optional[ValueKind] = None,
    ) -> Any:
        """Read a property.

        Args:
            name: Property name in any form
            options: Per-call request options
            expected: Expected value kind; defaults to the registered hint

        Raises:
            AlpacaError: Request failure, or AlpacaDeviceError when the value
                         does not match the expected kind
        """
        wire_name = to_wire_name(name)
        value = await self.get(wire_name, options=options)

        expected = expected or self._property_types.get(wire_name)
        if expected is not None and not matches_kind(value, expected):
            raise AlpacaDeviceError(
                f"Invalid property value type for {name}: expected {expected.value}, "
                f"got {type(value).__name__}",
                self.device_url(wire_name),
            )
        return value

    async def set_property(
        self,
        name: str,
        value: Any,
        options: Optional[RequestOptions] = None,
    ) -> None:
        """Write a property: PUT {ParameterName: wire value} to its member."""
        params = {to_parameter_name(name): to_wire_value(value)}
        await self.put(to_wire_name(name), params, options)

    async def get_properties(
        self,
        names: Iterable[str],
        options: Optional[RequestOptions] = None,
    ) -> Dict[str, Any]:
        """Read several properties concurrently.

        A property that fails is left out of the result and logged as a
        warning; it never fails the whole call.

        Returns:
            Mapping of application-form name to value
        """
        results: Dict[str, Any] = {}

        async def fetch(name: str) -> None:
            app_name = to_application_name(name)
            try:
                results[app_name] = await self.get_property(name, options)
            except Exception as e:
                message = e.message if isinstance(e, AlpacaError) else str(e)
                logger.warning(
                    f"Failed to get property '{to_wire_name(name)}' "
                    f"(mapped to '{app_name}'): {message}"
                )

        unique_names = list(dict.fromkeys(names))
        await asyncio.gather(*(fetch(name) for name in unique_names))
        return results

    async def get_device_state(self, options: Optional[RequestOptions] = None) -> Optional[Dict[str, Any]]:
        """Read devicestate as a flat {lower-cased name: value} mapping.

        Returns:
            The mapping ({} for an empty list), or None when the device
            returns an unsupported shape or the read fails
        """
        try:
            result = await self.get_property("devicestate", options)
        except AlpacaError as e:
            logger.warning(
                f"Error fetching device state for {self.device_type} {self.device_number}: {e.message}"
            )
            return None
        return normalize_device_state(result)

    async def probe_capability(
        self,
        name: str,
        options: Optional[RequestOptions] = None,
    ) -> Optional[bool]:
        """Query a boolean capability such as "canpark".

        Returns:
            The device's answer, or None when the capability is unknown
            (the probe failed or returned a non-boolean). Choosing a default
            for unknown capabilities is up to the caller.
        """
        try:
            value = await self.get_property(name, options)
        except AlpacaError as e:
            logger.debug(f"Capability probe '{to_wire_name(name)}' failed: {e.message}")
            return None

        value = from_wire_value(value, coerce=True)
        return value if isinstance(value, bool) else None
