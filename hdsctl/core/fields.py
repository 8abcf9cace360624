"""Field identifiers the engine addresses directly."""

from __future__ import annotations

from enum import Enum


class Field(str, Enum):
    IDENTITY = "idn"
    STATUS_HEAD = "datWavScrHead"
    HOR_SCALE = "horScal"
    HOR_OFFSET = "horOffs"
    ACQ_MODE = "acqMod"
    ACQ_DEPTH = "acqDepm"
    FUNC = "func"
    FUNC_OFFSET = "funcOffs"
    FUNC_OUTPUT = "chan"
    FUNC_FREQUENCY = "funcFreq"
    FUNC_AMPLITUDE = "funcAmpl"
    FUNC_LOW = "funcLow"
    FUNC_HIGH = "funcHigh"
    TRIG_SOURCE = "trigSingSour"
    TRIG_COUPLING = "trigSingCoup"
    TRIG_EDGE = "trigSingEdg"
    TRIG_SWEEP = "trigSingSwe"
    TRIG_LEVEL = "trigSingEdgLev"
    DMM_MEASUREMENT = "dmmMeas"


CHANNEL_DISPLAY = "Disp"
CHANNEL_SUFFIXES = (CHANNEL_DISPLAY, "Scal", "Offs", "Prob", "Coup")

# Order matters: it is the order fields are polled and first sent to a viewer.
STREAMED_FIELDS = (
    Field.HOR_SCALE,
    Field.HOR_OFFSET,
    Field.ACQ_MODE,
    Field.ACQ_DEPTH,
    Field.FUNC,
    Field.FUNC_OFFSET,
    Field.FUNC_OUTPUT,
    Field.FUNC_FREQUENCY,
    Field.FUNC_AMPLITUDE,
    Field.FUNC_LOW,
    Field.FUNC_HIGH,
    Field.TRIG_SOURCE,
    Field.TRIG_COUPLING,
    Field.TRIG_EDGE,
    Field.TRIG_SWEEP,
    Field.TRIG_LEVEL,
    Field.DMM_MEASUREMENT,
)

# Multimeter domains describe modes, not values a viewer can pick from.
HIDDEN_DOMAIN_PREFIX = "dmm"


def channel_field(suffix: str, channel: int) -> str:
    return f"ch{channel}{suffix}"


def wave_field(channel: int) -> str:
    return f"datWavScrCh{channel}"


def streamed_field_ids(channels: tuple[int, ...] | list[int]) -> list[str]:
    ids = [channel_field(suffix, channel) for channel in channels for suffix in CHANNEL_SUFFIXES]
    ids.extend(field.value for field in STREAMED_FIELDS)
    return ids
