"""Serialized, throttled and cached command execution against a device link."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol

from hdsctl.core.config import Settings
from hdsctl.core.errors import (
    DeviceIdentityError,
    MalformedStatusBlockError,
    ShortWriteError,
    TransportError,
    UnexpectedResponseLengthError,
)
from hdsctl.core.model import AccessMode, CacheEntry, ParameterDefinition, Request
from hdsctl.core.status_block import decode_status_block
from hdsctl.transports.base import DeviceLink

LOGGER = logging.getLogger(__name__)

IDENTITY_DEFINITION = ParameterDefinition(
    path="*IDN",
    short_id="*IDN",
    camel_id="idn",
    mode=AccessMode.READ_ONLY,
)


class Executor(Protocol):
    def execute(self, request: Request, *, use_cache: bool = True) -> bytes | None:
        """Run one request; return the response for a query, None for a set."""


class CachedExecutor:
    """Sole owner of the device link.

    One request is in flight at a time. Physical transfers are spaced by at
    least `Settings.throttle_s`, and query responses are served from cache
    for `Settings.cache_ttl_s`. Construction verifies the instrument identity.
    """

    def __init__(
        self,
        link: DeviceLink,
        settings: Settings | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.link = link
        self.settings = settings or Settings()
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self.cache: dict[str, CacheEntry] = {}
        self.link.open()
        self._last_transfer = self._clock()
        self.identity = self._verify_identity()

    def __enter__(self) -> CachedExecutor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.link.close()

    def _verify_identity(self) -> str:
        try:
            response = self.execute(Request(definition=IDENTITY_DEFINITION, query=True))
        except TransportError:
            self.link.close()
            raise
        identity = (response or b"").decode("utf-8", errors="replace").strip()
        if not identity.upper().startswith(self.settings.identity_prefix.upper()):
            self.link.close()
            raise DeviceIdentityError(f"Unsupported device: {identity!r}")
        LOGGER.info("Connected to %s", identity)
        return identity

    def _throttle(self) -> None:
        remaining = self._last_transfer + self.settings.throttle_s - self._clock()
        if remaining > 0:
            self._sleep(remaining)
        self._last_transfer = self._clock()

    def _cached(self, path: str) -> bytes | None:
        entry = self.cache.get(path)
        if entry is None:
            return None
        if self._clock() - entry.timestamp > self.settings.cache_ttl_s:
            return None
        return entry.value

    def _strip_head(self, path: str, response: bytes) -> bytes:
        if path == self.settings.status_head_path:
            return response[self.settings.frame_prefix_length :]
        return response

    def execute(self, request: Request, *, use_cache: bool = True) -> bytes | None:
        path = request.definition.path
        with self._lock:
            if request.query and use_cache:
                cached = self._cached(path)
                if cached is not None:
                    LOGGER.debug("cache hit %s", path)
                    return self._strip_head(path, cached)

            command = request.command_text()
            payload = command.encode("utf-8")
            self._throttle()
            LOGGER.debug("write %s", command)
            written = self.link.write(payload)
            if written != len(payload):
                raise ShortWriteError(f"Only {written} of {len(payload)} bytes written for {command}")

            if not request.query:
                return None

            response = self.link.read(self.settings.read_size)
            LOGGER.debug("read %d bytes for %s", len(response), command)
            if path.startswith(self.settings.bulk_data_prefix) and len(response) < self.settings.bulk_data_min_length:
                raise UnexpectedResponseLengthError(f"Unexpected length {len(response)} for {command}")

            now = self._clock()
            self.cache[path] = CacheEntry(value=response, timestamp=now)
            if path != self.settings.status_head_path:
                return response

            body = self._strip_head(path, response)
            try:
                entries = decode_status_block(
                    body,
                    timestamp=now,
                    channels=self.settings.channels,
                    offset_divisor=self.settings.offset_divisor,
                )
            except MalformedStatusBlockError as exc:
                LOGGER.warning("Discarding status block: %s", exc)
            else:
                self.cache.update(entries)
            return body
