"""Async client for the Transmission daemon's JSON RPC protocol."""

__version__ = "0.1.0"

from .errors import (
    TransmissionAuthenticationError,
    TransmissionAuthRetriesExhausted,
    TransmissionClientError,
    TransmissionConnectionError,
    TransmissionMalformedResponse,
    TransmissionTimeout,
)
from .http import RETRIES, SESSION_ID_HEADER, TransmissionHttpClient
from .methods import (
    BandwidthPriority,
    SessionGet,
    SessionGetArgs,
    SessionGetFields,
    Torrent,
    TorrentAdd,
    TorrentAddArgs,
    TorrentGet,
    TorrentGetArgs,
    TorrentGetFields,
    TorrentGetFormat,
    TorrentStatus,
)
from .protocol import (
    MethodDescriptor,
    ResponseEnvelope,
    WireModel,
    build_request,
    decode_response,
    encode_request,
)
from .session_id import SessionIdStore

__all__ = [
    "RETRIES",
    "SESSION_ID_HEADER",
    "BandwidthPriority",
    "MethodDescriptor",
    "ResponseEnvelope",
    "SessionGet",
    "SessionGetArgs",
    "SessionGetFields",
    "SessionIdStore",
    "Torrent",
    "TorrentAdd",
    "TorrentAddArgs",
    "TorrentGet",
    "TorrentGetArgs",
    "TorrentGetFields",
    "TorrentGetFormat",
    "TorrentStatus",
    "TransmissionAuthRetriesExhausted",
    "TransmissionAuthenticationError",
    "TransmissionClientError",
    "TransmissionConnectionError",
    "TransmissionHttpClient",
    "TransmissionMalformedResponse",
    "TransmissionTimeout",
    "WireModel",
    "__version__",
    "build_request",
    "decode_response",
    "encode_request",
]
