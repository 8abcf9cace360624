"""Service layer used by the CLI, the public API and the diff streamer."""

from __future__ import annotations

import logging
from collections.abc import Callable

from hdsctl.core.catalog_loader import load_catalog
from hdsctl.core.config import Settings, load_settings
from hdsctl.core.errors import HdsctlError, ScriptExecutionError, UnknownFieldError
from hdsctl.core.executor import CachedExecutor, Executor
from hdsctl.core.fields import wave_field
from hdsctl.core.model import Catalog, ParameterDefinition, Request
from hdsctl.core.parser import is_query, iter_script, parse_one
from hdsctl.transports.base import DeviceLink
from hdsctl.transports.usb_bulk import UsbBulkLink

LOGGER = logging.getLogger(__name__)


class HdsService:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        link: DeviceLink | None = None,
        catalog: Catalog | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.load_warnings: tuple[str, ...] = ()
        if catalog is None:
            loaded = load_catalog(self.settings)
            catalog = loaded.catalog
            self.load_warnings = loaded.warnings
        self.catalog = catalog
        self.executor = executor or CachedExecutor(link or UsbBulkLink(self.settings), self.settings)

    def close(self) -> None:
        close = getattr(self.executor, "close", None)
        if close is not None:
            close()

    def list_fields(self) -> list[ParameterDefinition]:
        return list(self.catalog.definitions)

    def _definition(self, identifier: str) -> ParameterDefinition:
        definition = self.catalog.lookup_by_id(identifier)
        if definition is None:
            raise UnknownFieldError(f"Invalid field: {getattr(identifier, 'value', identifier)}")
        return definition

    def _execute(self, request: Request, *, use_cache: bool = True) -> bytes | None:
        """Execute `request`; failures are re-raised naming the command that was sent."""
        try:
            return self.executor.execute(request, use_cache=use_cache)
        except HdsctlError as exc:
            verb = "get" if request.query else "set"
            raise _with_command(exc, f"failed to {verb} {request.command_text()}: {exc}") from exc

    def get_field(self, identifier: str, *, use_cache: bool = True) -> str:
        definition = self._definition(identifier)
        return _to_text(self._execute(Request(definition=definition, query=True), use_cache=use_cache))

    def set_field(self, identifier: str, value: str) -> None:
        definition = self._definition(identifier)
        self.set(f"{definition.path} {value}")

    def query(self, line: str) -> bytes:
        return self._execute(parse_one(self.catalog, line)) or b""

    def query_string(self, line: str) -> str:
        return _to_text(self.query(line))

    def set(self, line: str) -> None:
        self._execute(parse_one(self.catalog, line))

    def get_wave(self, channel: int) -> bytes:
        """Screen samples of `channel`, without the frame prefix."""
        if channel not in self.settings.channels:
            raise UnknownFieldError(f"Invalid channel number: {channel}")
        response = self._execute(Request(definition=self._definition(wave_field(channel)), query=True))
        return (response or b"")[self.settings.frame_prefix_length :]

    def execute_script(self, text: str, emit: Callable[[str], None] = print) -> None:
        """Run every statement of `text`; query results are passed to `emit`.

        The first failing statement aborts the script with `ScriptExecutionError`.
        """
        for command in iter_script(text):
            verb = "get" if is_query(command) else "set"
            try:
                request = parse_one(self.catalog, command)
                response = self.executor.execute(request)
            except HdsctlError as exc:
                raise ScriptExecutionError(f"failed to {verb} {command}: {exc}", command) from exc
            if request.query:
                emit(_to_text(response))


def _with_command(exc: HdsctlError, message: str) -> HdsctlError:
    # The re-raised error keeps the class of the original.
    return type(exc)(message)


def _to_text(response: bytes | None) -> str:
    return (response or b"").decode("utf-8", errors="replace").strip()
