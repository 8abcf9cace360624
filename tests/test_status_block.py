from __future__ import annotations

import json

import pytest

from hdsctl.core.errors import MalformedStatusBlockError
from hdsctl.core.status_block import decode_status_block

HEADER = {
    "TIMEBASE": {"SCALE": "20ns", "HOFFSET": 0},
    "SAMPLE": {
        "FULLSCREEN": 300,
        "DATALEN": 300,
        "SAMPLERATE": "250MSa/s",
        "TYPE": "SAMPle",
        "DEPMEM": "4K",
    },
    "CHANNEL": [
        {
            "NAME": "CH1",
            "DISPLAY": "ON",
            "COUPLING": "DC",
            "PROBE": "10X",
            "SCALE": "50.0mV",
            "OFFSET": -25,
            "FREQUENCE": 10000000.0,
        },
        {
            "NAME": "CH2",
            "DISPLAY": "OFF",
            "COUPLING": "DC",
            "PROBE": "10X",
            "SCALE": "100mV",
            "OFFSET": 36,
            "FREQUENCE": 0.0,
        },
    ],
    "DATATYPE": "SCREEN",
    "RUNSTATUS": "TRIG",
    "IDN": "owon_v1.2",
    "MODEL": "HDS272S_1",
    "Trig": {
        "Mode": "SINGle",
        "Type": "Edge",
        "Items": {
            "Channel": "CH1",
            "Level": "1.00V",
            "Edge": "RISE",
            "Coupling": "DC",
            "Sweep": "AUTO",
        },
    },
}


def test_decode_well_formed_header() -> None:
    entries = decode_status_block(json.dumps(HEADER).encode(), timestamp=12.5)

    values = {path: entry.value.decode() for path, entry in entries.items()}
    assert values[":HORizontal:SCALe"] == "20ns"
    assert values[":HORizontal:OFFSet"] == "0.000000"
    assert values[":ACQuire:MODe"] == "SAMPle"
    assert values[":ACQuire:DEPMem"] == "4K"
    assert values[":CH1:DISPlay"] == "ON"
    assert values[":CH1:OFFSet"] == "-1.00"
    assert values[":CH2:OFFSet"] == "1.44"
    assert values[":CH2:SCALe"] == "100mV"
    assert values[":TRIGger:SINGle:SOURce"] == "CH1"
    assert values[":TRIGger:SINGle:EDGe:LEVel"] == "1.00V"
    assert values[":TRIGger:SINGle:SWEep"] == "AUTO"
    assert len(entries) == 19
    assert {entry.timestamp for entry in entries.values()} == {12.5}


def test_missing_timebase_rejected() -> None:
    doc = {key: value for key, value in HEADER.items() if key != "TIMEBASE"}
    with pytest.raises(MalformedStatusBlockError):
        decode_status_block(json.dumps(doc).encode(), timestamp=0.0)


@pytest.mark.parametrize(
    "payload",
    [b"", b"\x00\x01garbage", b"[1, 2, 3]", json.dumps({**HEADER, "CHANNEL": [HEADER["CHANNEL"][0]]}).encode()],
)
def test_malformed_payload_rejected(payload: bytes) -> None:
    with pytest.raises(MalformedStatusBlockError):
        decode_status_block(payload, timestamp=0.0)
