"""
Request execution for the Alpaca device API.

The executor marshals parameters, bounds every attempt with a timeout,
classifies failures and retries the retry-eligible ones. The wire protocol
requires an asymmetry between verbs:

- GET: ClientID, ClientTransactionID and all parameters in the query string,
  no body
- PUT: the same entries as an application/x-www-form-urlencoded body, no
  query string
"""

import asyncio
import itertools
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, Mapping, Optional, TypeVar

import aiohttp

from alpacabridge.config import ClientConfig, RequestOptions
from alpacabridge.exceptions import AlpacaError, AlpacaNetworkError, AlpacaTimeoutError
from alpacabridge.response import interpret_response, raise_for_envelope
from alpacabridge.types import (
    ClientContext,
    HttpMethod,
    RequestEvent,
    RequestHook,
    ResponseEvent,
)
from alpacabridge.value_codec import from_wire_value, to_wire_params

logger = logging.getLogger(__name__)

T = TypeVar("T")

JSON_ACCEPT = "application/json"
IMAGEBYTES_ACCEPT = "application/imagebytes, application/json"


@dataclass
class RawResponse:
    """Status and body of one HTTP exchange."""
    status: int
    reason: str
    content_type: str
    body: bytes


def log_request_event(event: "RequestEvent | ResponseEvent") -> None:
    """Default request hook: one structured log line per event."""
    if isinstance(event, RequestEvent):
        logger.info(
            f"Alpaca request: {event.method.value} {event.url}",
            extra={"alpaca_params": dict(event.params), "alpaca_body": event.body},
        )
    elif event.error is not None:
        logger.info(
            f"Alpaca response: {event.url} attempt {event.attempt} failed: {event.error.message}",
            extra={"alpaca_error_kind": event.error.kind.value},
        )
    else:
        logger.info(
            f"Alpaca response: {event.url} attempt {event.attempt}",
            extra={"alpaca_response": event.response},
        )


class RequestExecutor:
    """Performs Alpaca requests for one client.

    Args:
        context: Identity of the owning client (ClientID source)
        config: Client configuration (default options, logging flag, coercion)
        session: Optional shared aiohttp session. When omitted, every attempt
                 opens and closes its own session.
        hook: Receives RequestEvent/ResponseEvent when config.log_requests is
              set. Defaults to log_request_event.
    """

    def __init__(
        self,
        context: ClientContext,
        config: Optional[ClientConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        hook: Optional[RequestHook] = None,
    ):
        self.context = context
        self.config = config or ClientConfig()
        self._session = session
        self._hook = hook or log_request_event
        self._transaction_ids = itertools.count(1)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def execute(
        self,
        method: HttpMethod,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        options: Optional[RequestOptions] = None,
    ) -> Any:
        """Perform a GET or PUT and return the decoded Value.

        Raises:
            AlpacaError: Classified error of the final attempt
        """
        method = HttpMethod(method)
        options = options or self.config.request_options

        def decode(raw: RawResponse, request_url: str) -> Any:
            value = interpret_response(
                raw.status,
                raw.body,
                request_url,
                reason=raw.reason,
                retry_unknown=options.retry_unknown,
            )
            return from_wire_value(value, coerce=self.config.coerce_values)

        return await self._run(method, url, params, options, JSON_ACCEPT, decode)

    async def execute_bytes(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        options: Optional[RequestOptions] = None,
    ) -> bytes:
        """Perform a GET and return the raw response body (e.g. ImageBytes)."""
        options = options or self.config.request_options

        def passthrough(raw: RawResponse, request_url: str) -> bytes:
            if not 200 <= raw.status < 300:
                interpret_response(raw.status, raw.body, request_url, reason=raw.reason)
            if raw.content_type == "application/json":
                raise_for_envelope(raw.status, raw.body, request_url)
            return raw.body

        return await self._run(HttpMethod.GET, url, params, options, IMAGEBYTES_ACCEPT, passthrough)

    def build_request(
        self,
        method: HttpMethod,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> "tuple[str, Optional[Dict[str, str]], Optional[Dict[str, str]]]":
        """Marshal parameters for a verb.

        Returns:
            (url, query, form_body); exactly one of query/form_body is set
        """
        wire = to_wire_params(params or {})
        wire["ClientID"] = str(self.context.client_id)
        wire["ClientTransactionID"] = str(next(self._transaction_ids))

        if method is HttpMethod.PUT:
            return url.split("?", 1)[0], None, wire
        return url, wire, None

    # -------------------------------------------------------------------------
    # Retry loop
    # -------------------------------------------------------------------------

    async def _run(
        self,
        method: HttpMethod,
        url: str,
        params: Optional[Mapping[str, Any]],
        options: RequestOptions,
        accept: str,
        decode: Callable[[RawResponse, str], T],
    ) -> T:
        request_url, query, body = self.build_request(method, url, params)
        self._emit(RequestEvent(method, request_url, dict(params or {}), body))

        attempt = 0
        while True:
            attempt += 1
            logger.debug(f"{method.value} {request_url} (attempt {attempt}/{options.max_attempts})")
            try:
                raw = await self._attempt(method, request_url, query, body, options, accept)
                result = decode(raw, request_url)
            except AlpacaError as error:
                self._emit(ResponseEvent(request_url, attempt, error=error))
                if not error.retry_eligible or attempt > options.max_retries:
                    raise
                logger.info(
                    f"Retrying {method.value} {request_url} "
                    f"({attempt}/{options.max_retries}) after {error.kind.value} error: {error.message}"
                )
                await asyncio.sleep(options.retry_delay)
                continue

            self._emit(ResponseEvent(request_url, attempt, response=result))
            return result

    async def _attempt(
        self,
        method: HttpMethod,
        url: str,
        query: Optional[Dict[str, str]],
        body: Optional[Dict[str, str]],
        options: RequestOptions,
        accept: str,
    ) -> RawResponse:
        """One HTTP exchange, bounded by options.timeout."""
        timeout = aiohttp.ClientTimeout(total=options.timeout)
        headers = {"Accept": accept, "User-Agent": self.config.user_agent}
        if self._session is not None and self._session.closed:
            raise AlpacaNetworkError("Session is closed", url)

        try:
            async with self._session_scope() as session:
                async with session.request(
                    method.value,
                    url,
                    params=query,
                    data=body,
                    headers=headers,
                    timeout=timeout,
                ) as response:
                    payload = await response.read()
                    return RawResponse(
                        status=response.status,
                        reason=response.reason or "",
                        content_type=response.content_type,
                        body=payload,
                    )
        except asyncio.TimeoutError:
            raise AlpacaTimeoutError(
                f"Request timed out after {options.timeout}s",
                url,
                timeout_seconds=options.timeout,
            ) from None
        except aiohttp.ClientError as e:
            raise AlpacaNetworkError(f"Network error occurred: {e}", url) from e

    @asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[aiohttp.ClientSession]:
        if self._session is not None:
            yield self._session
            return
        async with aiohttp.ClientSession() as session:
            yield session

    def _emit(self, event: "RequestEvent | ResponseEvent") -> None:
        if not self.config.log_requests:
            return
        try:
            self._hook(event)
        except Exception as e:
            logger.warning(f"Request hook failed: {e}")
