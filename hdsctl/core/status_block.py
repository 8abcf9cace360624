"""Decode the screen status head into cache entries.

The head query returns a JSON document describing the current timebase,
acquisition, per-channel and trigger settings. Decoding it lets one transfer
refresh many cached values at once. The document is applied all-or-nothing:
a missing section or an unexpected shape raises `MalformedStatusBlockError`
and no entry is produced.

Example document (abridged)::

    {"TIMEBASE": {"SCALE": "20ns", "HOFFSET": 0},
     "SAMPLE": {"TYPE": "SAMPle", "DEPMEM": "4K"},
     "CHANNEL": [{"DISPLAY": "ON", "COUPLING": "DC", "PROBE": "10X",
                  "SCALE": "50.0mV", "OFFSET": -25}, ...],
     "Trig": {"Items": {"Channel": "CH1", "Level": "1.00V", "Edge": "RISE",
                        "Coupling": "DC", "Sweep": "AUTO"}}}
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from hdsctl.core.errors import MalformedStatusBlockError
from hdsctl.core.model import CacheEntry

_CHANNEL_TEXT_FIELDS = (
    ("DISPLAY", "DISPlay"),
    ("COUPLING", "COUPling"),
    ("PROBE", "PROBe"),
    ("SCALE", "SCALe"),
)

_TRIGGER_FIELDS = (
    ("Channel", ":TRIGger:SINGle:SOURce"),
    ("Coupling", ":TRIGger:SINGle:COUPling"),
    ("Edge", ":TRIGger:SINGle:EDGe"),
    ("Level", ":TRIGger:SINGle:EDGe:LEVel"),
    ("Sweep", ":TRIGger:SINGle:SWEep"),
)


def _section(doc: dict[str, Any], key: str) -> dict[str, Any]:
    value = doc.get(key)
    if not isinstance(value, dict):
        raise MalformedStatusBlockError(f"status block section '{key}' missing or not an object")
    return value


def _text(section: dict[str, Any], key: str) -> str:
    value = section.get(key)
    if not isinstance(value, str):
        raise MalformedStatusBlockError(f"status block field '{key}' missing or not a string")
    return value


def _number(section: dict[str, Any], key: str) -> float:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedStatusBlockError(f"status block field '{key}' missing or not a number")
    return float(value)


def decode_status_block(
    payload: bytes,
    *,
    timestamp: float,
    channels: Sequence[int] = (1, 2),
    offset_divisor: float = 25.0,
) -> dict[str, CacheEntry]:
    """Map a status head document to cache entries keyed by mnemonic path."""
    try:
        doc = json.loads(payload.decode("utf-8", errors="replace"))
    except json.JSONDecodeError as exc:
        raise MalformedStatusBlockError(f"status block is not valid JSON: {exc}") from exc
    if not isinstance(doc, dict):
        raise MalformedStatusBlockError("status block root is not an object")

    values: dict[str, str] = {}

    timebase = _section(doc, "TIMEBASE")
    values[":HORizontal:SCALe"] = _text(timebase, "SCALE")
    values[":HORizontal:OFFSet"] = f"{_number(timebase, 'HOFFSET'):f}"

    sample = _section(doc, "SAMPLE")
    values[":ACQuire:MODe"] = _text(sample, "TYPE")
    values[":ACQuire:DEPMem"] = _text(sample, "DEPMEM")

    channel_list = doc.get("CHANNEL")
    if not isinstance(channel_list, list):
        raise MalformedStatusBlockError("status block section 'CHANNEL' missing or not a list")
    for channel in channels:
        if channel > len(channel_list) or not isinstance(channel_list[channel - 1], dict):
            raise MalformedStatusBlockError(f"status block has no entry for channel {channel}")
        section = channel_list[channel - 1]
        for key, suffix in _CHANNEL_TEXT_FIELDS:
            values[f":CH{channel}:{suffix}"] = _text(section, key)
        values[f":CH{channel}:OFFSet"] = f"{_number(section, 'OFFSET') / offset_divisor:.2f}"

    items = _section(_section(doc, "Trig"), "Items")
    for key, path in _TRIGGER_FIELDS:
        values[path] = _text(items, key)

    return {
        path: CacheEntry(value=value.encode("utf-8"), timestamp=timestamp)
        for path, value in values.items()
    }
