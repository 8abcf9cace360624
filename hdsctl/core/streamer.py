"""Live state streaming: poll, diff, and push only what changed.

One `DiffStreamer.serve` call handles one subscriber. It runs two tasks on
the subscriber's channel: a poll loop that sends a JSON object holding the
fields that changed since the previous cycle, and an inbound loop that
applies ``identifier: value`` writes and echoes the value the instrument
reports afterwards. Either task ending (normally, or because the channel
failed) cancels the other.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from hdsctl.core.errors import HdsctlError
from hdsctl.core.fields import (
    CHANNEL_DISPLAY,
    HIDDEN_DOMAIN_PREFIX,
    Field,
    channel_field,
    streamed_field_ids,
)
from hdsctl.core.service import HdsService

LOGGER = logging.getLogger(__name__)

WAVE_KEY_PREFIX = "wave"
RANGE_SUFFIX = ".range"


class PushChannel(Protocol):
    async def send(self, message: str) -> None:
        """Send one text message; raise when the connection is gone."""

    async def recv(self) -> str:
        """Receive one text message; raise when the connection is gone."""


def wave_key(channel: int) -> str:
    return f"{WAVE_KEY_PREFIX}{channel}"


def render_wave(samples: bytes) -> str:
    """Signed 8-bit samples as space separated integers."""
    return " ".join(str(b - 256 if b > 127 else b) for b in samples)


def compute_delta(previous: Mapping[str, Any], current: Mapping[str, Any]) -> dict[str, Any]:
    delta: dict[str, Any] = {}
    for key, value in current.items():
        if key.startswith(WAVE_KEY_PREFIX):
            delta[key] = value
        elif key not in previous or str(previous[key]) != str(value):
            delta[key] = value
    return delta


def parse_inbound(message: str) -> tuple[str, str] | None:
    identifier, separator, value = message.partition(":")
    if not separator or not identifier.strip():
        return None
    return identifier.strip(), value.strip()


class DiffStreamer:
    def __init__(self, service: HdsService, *, interval_s: float | None = None) -> None:
        self.service = service
        self.interval_s = service.settings.poll_interval_s if interval_s is None else interval_s
        self.channels = tuple(service.settings.channels)
        self.field_ids = streamed_field_ids(self.channels)

    def snapshot(self) -> dict[str, Any]:
        """Poll the instrument once. Blocking; fields that fail are left out."""
        data: dict[str, Any] = {}
        try:
            self.service.get_field(Field.STATUS_HEAD)
        except HdsctlError as exc:
            LOGGER.warning("Status head query failed: %s", exc)

        for channel in self.channels:
            try:
                if self.service.get_field(channel_field(CHANNEL_DISPLAY, channel)) != "ON":
                    continue
                data[wave_key(channel)] = render_wave(self.service.get_wave(channel))
            except HdsctlError as exc:
                LOGGER.warning("Wave fetch for channel %d failed: %s", channel, exc)

        for field_id in self.field_ids:
            definition = self.service.catalog.lookup_by_id(field_id)
            if definition is None:
                LOGGER.warning("Unknown field: %s", field_id)
                continue
            try:
                data[field_id] = self.service.get_field(field_id)
            except HdsctlError as exc:
                LOGGER.warning("Fetching %s failed: %s", field_id, exc)
                continue
            if definition.domain is not None and not field_id.startswith(HIDDEN_DOMAIN_PREFIX):
                data[f"{field_id}{RANGE_SUFFIX}"] = list(definition.domain)
        return data

    def apply(self, identifier: str, value: str) -> str | None:
        """Write a value, then read back what the instrument accepted. Blocking."""
        try:
            self.service.set_field(identifier, value)
        except HdsctlError as exc:
            LOGGER.warning("Setting %s to %r failed: %s", identifier, value, exc)
        try:
            return self.service.get_field(identifier, use_cache=False)
        except HdsctlError as exc:
            LOGGER.warning("Reading back %s failed: %s", identifier, exc)
            return None

    async def serve(self, channel: PushChannel) -> None:
        send_lock = asyncio.Lock()

        async def send(payload: dict[str, Any]) -> None:
            message = json.dumps(payload)
            async with send_lock:
                await channel.send(message)

        tasks = [
            asyncio.create_task(self._poll_loop(send), name="hdsctl-poll"),
            asyncio.create_task(self._inbound_loop(channel, send), name="hdsctl-inbound"),
        ]
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                task.cancel()
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for task, result in zip(tasks, results):
                if isinstance(result, Exception):
                    LOGGER.warning("%s ended with an error: %r", task.get_name(), result)
        LOGGER.info("Subscriber disconnected")

    async def _poll_loop(self, send) -> None:
        previous: dict[str, Any] = {}
        while True:
            await asyncio.sleep(self.interval_s)
            current = await asyncio.to_thread(self.snapshot)
            delta = compute_delta(previous, current)
            if delta:
                try:
                    await send(delta)
                except Exception as exc:
                    LOGGER.info("Push channel write failed: %s", exc)
                    return
            previous = current

    async def _inbound_loop(self, channel: PushChannel, send) -> None:
        while True:
            try:
                message = await channel.recv()
            except Exception as exc:
                LOGGER.info("Push channel read failed: %s", exc)
                return
            parsed = parse_inbound(message)
            if parsed is None:
                LOGGER.warning("Ignoring malformed message: %r", message)
                continue
            identifier, value = parsed
            accepted = await asyncio.to_thread(self.apply, identifier, value)
            if accepted is None:
                continue
            try:
                await send({identifier: accepted})
            except Exception as exc:
                LOGGER.info("Push channel write failed: %s", exc)
                return
