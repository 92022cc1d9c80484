"""HTTP client for the Transmission RPC endpoint."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Final, TypeVar

import aiohttp

from . import methods
from .errors import (
    TransmissionAuthenticationError,
    TransmissionAuthRetriesExhausted,
    TransmissionConnectionError,
    TransmissionMalformedResponse,
    TransmissionTimeout,
)
from .methods import (
    SessionGet,
    SessionGetFields,
    TorrentAdd,
    TorrentAddArgs,
    TorrentGet,
    TorrentGetArgs,
)
from .protocol import MethodDescriptor, ResponseEnvelope, decode_response, encode_request
from .session_id import SessionIdStore

_LOGGER = logging.getLogger(__name__)

SESSION_ID_HEADER: Final = "X-Transmission-Session-Id"
CONFLICT: Final = 409
RETRIES: Final = 5
DEFAULT_TIMEOUT: Final = 30.0
DEFAULT_PORT: Final = 9091
DEFAULT_RPC_PATH: Final = "/transmission/rpc"

R = TypeVar("R")


class TransmissionHttpClient:
    """Client for the Transmission daemon's JSON RPC endpoint.

    One instance owns one session id and may serve many concurrent calls.

    Usage:
        async with TransmissionHttpClient("http://127.0.0.1:9091/transmission/rpc") as client:
            response = await client.session_get([SessionGetFields.RPC_VERSION])
            print(response.arguments.rpc_version)
    """

    def __init__(
        self,
        url: str,
        *,
        session: aiohttp.ClientSession | None = None,
        retries: int = RETRIES,
        timeout: float = DEFAULT_TIMEOUT,
        auth: aiohttp.BasicAuth | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize client.

        Args:
            url: Full RPC endpoint URL
            session: Shared aiohttp session; one is created (and closed by
                close()) when omitted
            retries: Maximum number of requests sent per call while the
                daemon keeps answering 409 Conflict
            timeout: Total timeout per HTTP request (seconds)
            auth: HTTP basic auth credentials, if the daemon requires them
            session_id: Previously negotiated session id to start with
        """
        if retries < 1:
            raise ValueError("retries must be at least 1")
        self._url = url
        self._session = session
        self._owns_session = session is None
        self._retries = retries
        self._timeout = timeout
        self._auth = auth
        self._session_id = SessionIdStore(session_id)

    @classmethod
    def from_host(
        cls,
        host: str,
        port: int = DEFAULT_PORT,
        *,
        path: str = DEFAULT_RPC_PATH,
        https: bool = False,
        session: aiohttp.ClientSession | None = None,
        retries: int = RETRIES,
        timeout: float = DEFAULT_TIMEOUT,
        auth: aiohttp.BasicAuth | None = None,
    ) -> TransmissionHttpClient:
        """Build a client for the RPC endpoint of ``host:port``."""
        scheme = "https" if https else "http"
        if not path.startswith("/"):
            path = f"/{path}"
        return cls(
            f"{scheme}://{host}:{port}{path}",
            session=session,
            retries=retries,
            timeout=timeout,
            auth=auth,
        )

    @property
    def url(self) -> str:
        return self._url

    @property
    def retries(self) -> int:
        return self._retries

    @property
    def session_id(self) -> str | None:
        """Session id currently attached to requests."""
        return self._session_id.value

    async def __aenter__(self) -> TransmissionHttpClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _http_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    def _headers(self, session_id: str | None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if session_id:
            headers[SESSION_ID_HEADER] = session_id
        return headers

    async def _post(
        self, method: str, body: bytes, session_id: str | None
    ) -> tuple[int, str | None, bytes]:
        """Send one request; return status, session id header and body."""
        try:
            async with self._http_session().post(
                self._url,
                data=body,
                headers=self._headers(session_id),
                auth=self._auth,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                _LOGGER.debug("[%s] Status code = %d", method, resp.status)
                if resp.status == CONFLICT:
                    return resp.status, resp.headers.get(SESSION_ID_HEADER), b""
                return resp.status, None, await resp.read()
        except TimeoutError as err:
            raise TransmissionTimeout(
                "RPC request timed out", method=method
            ) from err
        except aiohttp.ClientError as err:
            raise TransmissionConnectionError(
                f"RPC request failed: {err}", method=method
            ) from err

    async def invoke(
        self,
        descriptor: MethodDescriptor[R],
        *,
        tag: int | None = None,
    ) -> ResponseEnvelope[R]:
        """Call a remote method and decode its reply.

        A 409 Conflict is the daemon's session handshake: the new session id
        from the response header is installed and the request is sent again.
        Network failures and malformed replies are not retried.

        Args:
            descriptor: Method name, arguments and expected result type
            tag: Optional request tag echoed back by the daemon

        Returns:
            Response envelope; its result string is not checked

        Raises:
            TransmissionAuthRetriesExhausted: If every attempt got 409
            TransmissionMalformedResponse: If the reply is not a valid envelope;
                TransmissionAuthenticationError when its status was 401 or 403
            TransmissionTimeout: If a request timed out
            TransmissionConnectionError: If the network request failed
        """
        method = descriptor.method
        body = encode_request(descriptor, tag=tag)
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("[%s] Sending request: %s", method, body.decode("utf-8"))

        for attempt in range(1, self._retries + 1):
            seen = self._session_id.read()
            status, new_session_id, payload = await self._post(
                method, body, seen.value
            )

            if status == CONFLICT:
                if not new_session_id:
                    _LOGGER.warning(
                        "[%s] 409 Conflict without %s header", method, SESSION_ID_HEADER
                    )
                    raise TransmissionMalformedResponse(
                        f"409 Conflict without {SESSION_ID_HEADER} header",
                        method=method,
                        status=status,
                    )
                if self._session_id.replace(new_session_id, seen=seen):
                    _LOGGER.info(
                        "[%s] Received new session id (attempt %d/%d)",
                        method,
                        attempt,
                        self._retries,
                    )
                continue

            try:
                return decode_response(
                    payload, descriptor.result_type, method=method, status=status
                )
            except TransmissionMalformedResponse as err:
                if status in (401, 403):
                    raise TransmissionAuthenticationError(
                        f"Daemon rejected credentials with HTTP {status}",
                        method=method,
                        status=status,
                    ) from err
                raise

        _LOGGER.warning(
            "[%s] Session id not accepted after %d attempts", method, self._retries
        )
        raise TransmissionAuthRetriesExhausted(method, self._retries)

    async def session_get(
        self, fields: list[SessionGetFields] | None = None
    ) -> ResponseEnvelope[SessionGet]:
        """Fetch daemon session settings (all fields when ``fields`` is None)."""
        return await self.invoke(methods.session_get(fields))

    async def torrent_add(self, args: TorrentAddArgs) -> ResponseEnvelope[TorrentAdd]:
        """Add a torrent by filename/URL/magnet link or base64 metainfo."""
        return await self.invoke(methods.torrent_add(args))

    async def torrent_get(
        self, args: TorrentGetArgs | None = None
    ) -> ResponseEnvelope[TorrentGet]:
        """Fetch torrent state."""
        return await self.invoke(methods.torrent_get(args))
