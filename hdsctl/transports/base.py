"""Device link interfaces."""

from __future__ import annotations

from typing import Protocol


class DeviceLink(Protocol):
    """Point-to-point bulk link to one instrument.

    Every call is bound by the link's own transfer timeout. A read that
    returns no bytes means "no data yet" and is not an error.
    """

    def open(self) -> None:
        """Acquire the device; raise TransportConnectError on failure."""

    def write(self, data: bytes) -> int:
        """Write `data` and return the number of bytes transferred."""

    def read(self, size: int) -> bytes:
        """Read up to `size` bytes."""

    def close(self) -> None:
        """Release the device. Safe to call more than once."""
