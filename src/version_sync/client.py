"""Single-shot synchronous and asynchronous HTTP request helpers."""

from __future__ import annotations

import asyncio
import json
import logging
import socket
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from contextlib import suppress
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote

import httpx

from .exceptions import VersionSyncTimeoutError, VersionSyncValidationError
from .request_options import METHODS, RequestOptions
from .security import sanitize_headers, validate_url

logger = logging.getLogger(__name__)

# encodeURIComponent leaves these unescaped in addition to letters, digits and "-_.~".
_URI_COMPONENT_SAFE = "!*'()"

_LOCAL_ADDRESSES = {4: "0.0.0.0", 6: "::"}


@dataclass(frozen=True)
class Response:
    headers: dict[str, str]
    body: Any
    status_code: int
    status_message: str


@dataclass(frozen=True)
class _PreparedRequest:
    method: str
    url: str
    scheme: str
    headers: dict[str, str]
    content: bytes | None
    timeout: float | None


def _resolve_request_options(options: RequestOptions | None) -> RequestOptions:
    return options or RequestOptions()


def _encode_params(params: Mapping[str, str]) -> str:
    return "&".join(f"{key}={quote(str(value), safe=_URI_COMPONENT_SAFE)}" for key, value in params.items())


def _build_target(url: str, params: Mapping[str, str] | None) -> tuple[str, str]:
    """Return the scheme and the full request URL with ``params`` appended."""
    parsed = validate_url(url)
    path = parsed.path or "/"
    if parsed.query:
        path += f"?{parsed.query}"
    if params:
        path += f"{'&' if parsed.query else '?'}{_encode_params(params)}"
    scheme = parsed.scheme.lower()
    return scheme, f"{scheme}://{parsed.netloc}{path}"


def _encode_body(data: bytes | str | None) -> bytes | None:
    if data is None:
        return None
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _decode_body(raw: bytes, parse_json: bool) -> Any:
    text = raw.decode("utf-8", errors="replace")
    if not parse_json:
        return text
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return text


def _build_response(response: httpx.Response, raw: bytes, parse_json: bool) -> Response:
    return Response(
        headers={key.lower(): value for key, value in response.headers.items()},
        body=_decode_body(raw, parse_json),
        status_code=response.status_code,
        status_message=response.reason_phrase,
    )


class _InFlight:
    """Handle on a sync response being read on a worker thread."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._response: httpx.Response | None = None
        self.aborted = False

    def attach(self, response: httpx.Response) -> None:
        with self._lock:
            self._response = response
            aborted = self.aborted
        if aborted:
            self._destroy(response)

    def abort(self) -> None:
        with self._lock:
            self.aborted = True
            response = self._response
        if response is not None:
            self._destroy(response)

    @staticmethod
    def _destroy(response: httpx.Response) -> None:
        # Shutting the socket down unblocks a read in progress on the worker.
        stream = response.extensions.get("network_stream")
        sock = stream.get_extra_info("socket") if stream is not None else None
        if sock is not None:
            with suppress(OSError):
                sock.shutdown(socket.SHUT_RDWR)
        response.close()


class _BaseHttpClient:
    def __init__(self, *, verify: bool = True) -> None:
        self.verify = verify

    def _prepare(self, url: str, request_options: RequestOptions) -> _PreparedRequest:
        method = str(request_options.method).lower()
        if method not in METHODS:
            raise VersionSyncValidationError(f"Unsupported method: {request_options.method}", url=url)
        if request_options.family not in (None, 4, 6):
            raise VersionSyncValidationError("family must be 4 or 6", url=url)
        timeout = request_options.timeout
        if timeout is not None and timeout < 0:
            raise VersionSyncValidationError("timeout must not be negative", url=url)

        scheme, target = _build_target(url, request_options.params)
        headers = dict(request_options.headers or {})
        content = _encode_body(request_options.data)
        if content is not None:
            headers["Content-Length"] = str(len(content))
        return _PreparedRequest(
            method=method.upper(),
            url=target,
            scheme=scheme,
            headers=headers,
            content=content,
            timeout=timeout or None,
        )

    def _transport_kwargs(self, scheme: str, family: int | None) -> dict[str, Any]:
        # Plain http never needs an SSL context.
        kwargs: dict[str, Any] = {"verify": self.verify if scheme == "https" else False}
        if family is not None:
            kwargs["local_address"] = _LOCAL_ADDRESSES[family]
        return kwargs

    @staticmethod
    def _log_request(prepared: _PreparedRequest) -> None:
        logger.debug("%s %s headers=%s", prepared.method, prepared.url, sanitize_headers(prepared.headers))

    @staticmethod
    def _timeout_error(prepared: _PreparedRequest, exc: Exception | None = None) -> VersionSyncTimeoutError:
        return VersionSyncTimeoutError("Request timeout", url=prepared.url, timeout=prepared.timeout, cause=exc)


class HttpClient(_BaseHttpClient):
    """Synchronous helper performing exactly one request per call.

    A ``transport`` passed here stays owned by the caller and is reused across
    calls; otherwise each call opens and closes its own connection.
    """

    def __init__(self, *, verify: bool = True, transport: httpx.BaseTransport | None = None) -> None:
        super().__init__(verify=verify)
        self._transport = transport

    def _open_client(self, scheme: str, family: int | None) -> httpx.Client:
        transport = self._transport or httpx.HTTPTransport(**self._transport_kwargs(scheme, family))
        return httpx.Client(transport=transport, follow_redirects=False, trust_env=False)

    def request(self, url: str, options: RequestOptions | None = None) -> Response:
        request_options = _resolve_request_options(options)
        prepared = self._prepare(url, request_options)
        shared = request_options.client
        if shared is not None and not isinstance(shared, httpx.Client):
            raise VersionSyncValidationError("client must be an httpx.Client", url=url)
        client = shared or self._open_client(prepared.scheme, request_options.family)
        try:
            return self._send(client, prepared, parse_json=request_options.json)
        finally:
            if shared is None and self._transport is None:
                client.close()

    def fetch_body(self, url: str, options: RequestOptions | None = None) -> Any:
        return self.request(url, options).body

    def _send(self, client: httpx.Client, prepared: _PreparedRequest, *, parse_json: bool) -> Response:
        self._log_request(prepared)
        if prepared.timeout is None:
            response, raw = self._exchange(client, prepared, None)
        else:
            response, raw = self._exchange_with_timer(client, prepared)

        logger.debug("%s %s -> %s", prepared.method, prepared.url, response.status_code)
        return _build_response(response, raw, parse_json)

    def _exchange_with_timer(self, client: httpx.Client, prepared: _PreparedRequest) -> tuple[httpx.Response, bytes]:
        """Run the exchange on a worker thread and stop waiting once the timeout elapses.

        On expiry the in-flight response is destroyed; httpx's own per-operation
        timeouts bound how long the worker can stay blocked before that.
        """
        inflight = _InFlight()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="version-sync")
        future = executor.submit(self._exchange, client, prepared, inflight)
        executor.shutdown(wait=False)
        try:
            return future.result(timeout=prepared.timeout)
        except FuturesTimeoutError as exc:
            inflight.abort()
            raise self._timeout_error(prepared, exc) from exc

    def _exchange(
        self,
        client: httpx.Client,
        prepared: _PreparedRequest,
        inflight: _InFlight | None,
    ) -> tuple[httpx.Response, bytes]:
        try:
            with client.stream(
                prepared.method,
                prepared.url,
                headers=prepared.headers,
                content=prepared.content,
                timeout=prepared.timeout,
            ) as response:
                if inflight is not None:
                    inflight.attach(response)
                chunks: list[bytes] = []
                for chunk in response.iter_bytes():
                    if inflight is not None and inflight.aborted:
                        raise self._timeout_error(prepared)
                    chunks.append(chunk)
        except httpx.TimeoutException as exc:
            raise self._timeout_error(prepared, exc) from exc
        return response, b"".join(chunks)


class AsyncHttpClient(_BaseHttpClient):
    """Asynchronous helper; the timeout cancels the in-flight request."""

    def __init__(self, *, verify: bool = True, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__(verify=verify)
        self._transport = transport

    def _open_client(self, scheme: str, family: int | None) -> httpx.AsyncClient:
        transport = self._transport or httpx.AsyncHTTPTransport(**self._transport_kwargs(scheme, family))
        return httpx.AsyncClient(transport=transport, follow_redirects=False, trust_env=False)

    async def request(self, url: str, options: RequestOptions | None = None) -> Response:
        request_options = _resolve_request_options(options)
        prepared = self._prepare(url, request_options)
        shared = request_options.client
        if shared is not None and not isinstance(shared, httpx.AsyncClient):
            raise VersionSyncValidationError("client must be an httpx.AsyncClient", url=url)
        client = shared or self._open_client(prepared.scheme, request_options.family)
        try:
            send = self._send(client, prepared, parse_json=request_options.json)
            if prepared.timeout is None:
                return await send
            try:
                return await asyncio.wait_for(send, prepared.timeout)
            except asyncio.TimeoutError as exc:
                raise self._timeout_error(prepared, exc) from exc
        finally:
            if shared is None and self._transport is None:
                await client.aclose()

    async def fetch_body(self, url: str, options: RequestOptions | None = None) -> Any:
        return (await self.request(url, options)).body

    async def _send(self, client: httpx.AsyncClient, prepared: _PreparedRequest, *, parse_json: bool) -> Response:
        self._log_request(prepared)
        # The surrounding wait_for is the only timer.
        async with client.stream(
            prepared.method,
            prepared.url,
            headers=prepared.headers,
            content=prepared.content,
            timeout=None,
        ) as response:
            chunks: list[bytes] = []
            async for chunk in response.aiter_bytes():
                chunks.append(chunk)

        logger.debug("%s %s -> %s", prepared.method, prepared.url, response.status_code)
        return _build_response(response, b"".join(chunks), parse_json)


def request(url: str, options: RequestOptions | None = None) -> Response:
    return HttpClient().request(url, options)


def fetch_body(url: str, options: RequestOptions | None = None) -> Any:
    return HttpClient().fetch_body(url, options)


async def arequest(url: str, options: RequestOptions | None = None) -> Response:
    return await AsyncHttpClient().request(url, options)


async def afetch_body(url: str, options: RequestOptions | None = None) -> Any:
    return await AsyncHttpClient().fetch_body(url, options)
