"""Argument and result shapes for the supported Transmission RPC methods.

Field names on the wire are inconsistent across methods: session and
torrent-add fields are kebab-case, torrent fields are camelCase with a few
kebab-case exceptions. Each dataclass field declares its wire name.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Final

from .protocol import MethodDescriptor, WireModel, expect, list_of, wire_field

SESSION_GET: Final = "session-get"
TORRENT_ADD: Final = "torrent-add"
TORRENT_GET: Final = "torrent-get"


class SessionGetFields(Enum):
    """Session fields that can be requested from session-get."""

    RPC_VERSION = "rpc-version"
    RPC_VERSION_MINIMUM = "rpc-version-minimum"
    VERSION = "version"
    CONFIG_DIR = "config-dir"
    DOWNLOAD_DIR = "download-dir"
    PEER_LIMIT_GLOBAL = "peer-limit-global"
    PEER_PORT = "peer-port"


class TorrentGetFields(Enum):
    """Torrent fields that can be requested from torrent-get."""

    ERROR = "error"
    ERROR_STRING = "errorString"
    ETA = "eta"  # seconds
    HASH_STRING = "hashString"
    ID = "id"
    LEFT_UNTIL_DONE = "leftUntilDone"  # bytes
    NAME = "name"
    PEER_LIMIT = "peer-limit"
    PERCENT_DONE = "percentDone"  # 0..1
    RATE_DOWNLOAD = "rateDownload"  # bytes per second
    SIZE_WHEN_DONE = "sizeWhenDone"
    STATUS = "status"
    TOTAL_SIZE = "totalSize"


class TorrentGetFormat(Enum):
    """Layout of the torrents array in a torrent-get reply."""

    OBJECTS = "objects"
    TABLE = "table"


class TorrentStatus(IntEnum):
    """Torrent activity state reported in the status field."""

    STOPPED = 0
    CHECK_WAIT = 1
    CHECK = 2
    DOWNLOAD_WAIT = 3
    DOWNLOAD = 4
    SEED_WAIT = 5
    SEED = 6


class BandwidthPriority(IntEnum):
    """Torrent bandwidth priority."""

    LOW = -1
    NORMAL = 0
    HIGH = 1


_int = expect(int)
_str = expect(str)
_int_list = list_of(_int)


def _float(value: Any) -> float:
    return float(expect(int, float)(value))


def _status(value: Any) -> TorrentStatus | int:
    value = _int(value)
    try:
        return TorrentStatus(value)
    except ValueError:
        return value


# -----------------------------------------------------------------------------
# session-get
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SessionGetArgs(WireModel):
    """Arguments for session-get. All session fields are returned when unset."""

    fields: list[SessionGetFields] | None = wire_field("fields")


@dataclass(frozen=True)
class SessionGet(WireModel):
    """Result of session-get."""

    rpc_version: int | None = wire_field("rpc-version", decode=_int)
    rpc_version_minimum: int | None = wire_field("rpc-version-minimum", decode=_int)
    version: str | None = wire_field("version", decode=_str)
    config_dir: str | None = wire_field("config-dir", decode=_str)
    download_dir: str | None = wire_field("download-dir", decode=_str)
    peer_limit_global: int | None = wire_field("peer-limit-global", decode=_int)
    peer_port: int | None = wire_field("peer-port", decode=_int)


# -----------------------------------------------------------------------------
# torrents
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Torrent(WireModel):
    """Torrent state. Only the requested fields are populated."""

    error: int | None = wire_field("error", decode=_int)
    error_string: str | None = wire_field("errorString", decode=_str)
    eta: int | None = wire_field("eta", decode=_int)
    hash_string: str | None = wire_field("hashString", decode=_str)
    id: int | None = wire_field("id", decode=_int)
    left_until_done: int | None = wire_field("leftUntilDone", decode=_int)
    name: str | None = wire_field("name", decode=_str)
    peer_limit: int | None = wire_field("peer-limit", decode=_int)
    percent_done: float | None = wire_field("percentDone", decode=_float)
    rate_download: int | None = wire_field("rateDownload", decode=_int)
    size_when_done: int | None = wire_field("sizeWhenDone", decode=_int)
    status: TorrentStatus | int | None = wire_field("status", decode=_status)
    total_size: int | None = wire_field("totalSize", decode=_int)


def _torrent(value: Any) -> Torrent:
    return Torrent.from_wire(value)


@dataclass(frozen=True)
class TorrentAddArgs(WireModel):
    """Arguments for torrent-add.

    The daemon needs either ``filename`` (URL, magnet link or path) or
    ``metainfo`` (base64 .torrent contents); both are passed through as-is.
    """

    cookies: str | None = wire_field("cookies")
    download_dir: str | None = wire_field("download-dir")
    filename: str | None = wire_field("filename")
    labels: list[str] | None = wire_field("labels")
    metainfo: str | None = wire_field("metainfo")
    paused: bool | None = wire_field("paused")
    peer_limit: int | None = wire_field("peer-limit")
    bandwidth_priority: BandwidthPriority | None = wire_field("bandwidthPriority")
    files_wanted: list[int] | None = wire_field("files-wanted")
    files_unwanted: list[int] | None = wire_field("files-unwanted")
    priority_high: list[int] | None = wire_field("priority-high")
    priority_low: list[int] | None = wire_field("priority-low")
    priority_normal: list[int] | None = wire_field("priority-normal")


@dataclass(frozen=True)
class TorrentAdd(WireModel):
    """Result of torrent-add. Exactly one field is set on success."""

    torrent_added: Torrent | None = wire_field("torrent-added", decode=_torrent)
    torrent_duplicate: Torrent | None = wire_field(
        "torrent-duplicate", decode=_torrent
    )


@dataclass(frozen=True)
class TorrentGetArgs(WireModel):
    """Arguments for torrent-get.

    ``ids`` accepts a torrent id, a hash string, a list mixing both, or
    ``"recently-active"``. All torrents are returned when unset.
    """

    fields: list[TorrentGetFields] | None = wire_field("fields")
    ids: list[int | str] | int | str | None = wire_field("ids")
    format: TorrentGetFormat | None = wire_field("format")


def unfold_table(rows: list[Any]) -> list[dict[str, Any]]:
    """Turn a table-format torrents array into one mapping per torrent.

    The first row holds the field names; every following row holds values.
    """
    if not rows:
        return []
    keys = rows[0]
    if not isinstance(keys, list):
        raise TypeError("torrent table header must be a list")
    torrents: list[dict[str, Any]] = []
    for row in rows[1:]:
        if not isinstance(row, list) or len(row) != len(keys):
            raise ValueError("torrent table row does not match its header")
        torrents.append(dict(zip(keys, row, strict=True)))
    return torrents


@dataclass(frozen=True)
class TorrentGet(WireModel):
    """Result of torrent-get."""

    torrents: list[Torrent] = wire_field(
        "torrents", decode=list_of(_torrent), required=True
    )
    removed: list[int] | None = wire_field("removed", decode=_int_list)

    @classmethod
    def from_wire(cls, data: Any) -> TorrentGet:
        if isinstance(data, Mapping):
            torrents = data.get("torrents")
            if isinstance(torrents, list) and torrents and isinstance(torrents[0], list):
                data = {**data, "torrents": unfold_table(torrents)}
        return super().from_wire(data)


# -----------------------------------------------------------------------------
# Method descriptors
# -----------------------------------------------------------------------------


def session_get(
    fields: list[SessionGetFields] | None = None,
) -> MethodDescriptor[SessionGet]:
    """Describe a session-get call."""
    return MethodDescriptor(SESSION_GET, SessionGet, SessionGetArgs(fields=fields))


def torrent_add(args: TorrentAddArgs) -> MethodDescriptor[TorrentAdd]:
    """Describe a torrent-add call."""
    return MethodDescriptor(TORRENT_ADD, TorrentAdd, args)


def torrent_get(args: TorrentGetArgs | None = None) -> MethodDescriptor[TorrentGet]:
    """Describe a torrent-get call.

    Without arguments every known torrent field is requested, since the daemon
    rejects torrent-get without a field list.
    """
    if args is None:
        args = TorrentGetArgs(fields=list(TorrentGetFields))
    return MethodDescriptor(TORRENT_GET, TorrentGet, args)
