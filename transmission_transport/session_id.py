"""Per-client store for the X-Transmission-Session-Id token."""

from __future__ import annotations

import logging
from dataclasses import dataclass

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionIdSnapshot:
    """Token value read by a request, tagged with the store generation."""

    value: str | None
    generation: int


class SessionIdStore:
    """Holds the current session id shared by every call on one client.

    Reads and writes never await, so on a single event loop a reader sees
    either the previous or the new snapshot. The generation increases on
    every install and lets a caller detect that another call has already
    replaced the token its request was sent with.
    """

    def __init__(self, value: str | None = None) -> None:
        self._snapshot = SessionIdSnapshot(value=value, generation=0)

    @property
    def value(self) -> str | None:
        """Current session id, or None before the first handshake."""
        return self._snapshot.value

    @property
    def generation(self) -> int:
        return self._snapshot.generation

    def read(self) -> SessionIdSnapshot:
        """Return the current token and its generation."""
        return self._snapshot

    def replace(self, value: str, *, seen: SessionIdSnapshot) -> bool:
        """Install ``value`` unless a newer token was installed after ``seen``.

        A token dropped this way is learned again from the next 409 if the
        daemon really rotated it.

        Returns:
            True if the store now holds ``value`` as a result of this call.
        """
        current = self._snapshot
        if current.generation != seen.generation:
            _LOGGER.debug(
                "Session id already replaced (generation %d > %d), keeping current",
                current.generation,
                seen.generation,
            )
            return False
        self._snapshot = SessionIdSnapshot(
            value=value, generation=current.generation + 1
        )
        return True
