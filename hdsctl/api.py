"""Stable public API for building tooling on top of hdsctl.

This module is the supported integration surface for third-party callers
(web front ends, notebooks, scripts). Avoid importing from internal modules
unless intentionally depending on non-stable internals.
"""

from __future__ import annotations

from collections.abc import Callable

from hdsctl.core.config import Settings
from hdsctl.core.errors import (
    CatalogLoadError,
    CatalogValidationError,
    ConfigError,
    DeviceIdentityError,
    HdsctlError,
    MalformedStatusBlockError,
    ScriptExecutionError,
    ShortWriteError,
    TransportConnectError,
    TransportError,
    TransportTimeoutError,
    UnexpectedArgumentsError,
    UnexpectedResponseLengthError,
    UnknownCommandError,
    UnknownFieldError,
)
from hdsctl.core.fields import Field
from hdsctl.core.model import AccessMode, ParameterDefinition, Request
from hdsctl.core.service import HdsService
from hdsctl.core.streamer import DiffStreamer, PushChannel
from hdsctl.transports.base import DeviceLink
from hdsctl.transports.mock import MockDeviceLink

__all__ = [
    "HdsctlError",
    "CatalogLoadError",
    "CatalogValidationError",
    "ConfigError",
    "DeviceIdentityError",
    "MalformedStatusBlockError",
    "ScriptExecutionError",
    "ShortWriteError",
    "TransportConnectError",
    "TransportError",
    "TransportTimeoutError",
    "UnexpectedArgumentsError",
    "UnexpectedResponseLengthError",
    "UnknownCommandError",
    "UnknownFieldError",
    "AccessMode",
    "DeviceLink",
    "Field",
    "MockDeviceLink",
    "ParameterDefinition",
    "PushChannel",
    "Request",
    "Settings",
    "Client",
]


class Client:
    """Public client for one connected instrument.

    Opening a `Client` opens the device link and verifies the instrument
    identity; use it as a context manager to release the link.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        link: DeviceLink | None = None,
    ) -> None:
        self._service = HdsService(settings=settings, link=link)

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._service.close()

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_fields(self) -> list[ParameterDefinition]:
        return self._service.list_fields()

    def get_field(self, identifier: str | Field) -> str:
        return self._service.get_field(identifier)

    def set_field(self, identifier: str | Field, value: str) -> None:
        self._service.set_field(identifier, value)

    def query(self, command: str) -> str:
        return self._service.query_string(command)

    def set(self, command: str) -> None:
        self._service.set(command)

    def get_wave(self, channel: int) -> bytes:
        return self._service.get_wave(channel)

    def execute_script(self, text: str, emit: Callable[[str], None] = print) -> None:
        self._service.execute_script(text, emit=emit)

    async def stream(self, channel: PushChannel, *, interval_s: float | None = None) -> None:
        """Serve live state updates to one subscriber until its channel closes.

        `channel` is anything with ``async send(str)`` and ``async recv() -> str``
        that raises once the subscriber is gone. A queue-backed adapter::

            class QueueChannel:
                def __init__(self, outbox: asyncio.Queue, inbox: asyncio.Queue) -> None:
                    self.outbox, self.inbox = outbox, inbox

                async def send(self, message: str) -> None:
                    await self.outbox.put(message)  # JSON object of changed fields

                async def recv(self) -> str:
                    return await self.inbox.get()  # "ch1Offs: 1.5"

            await client.stream(QueueChannel(outbox, inbox))
        """
        await DiffStreamer(self._service, interval_s=interval_s).serve(channel)
