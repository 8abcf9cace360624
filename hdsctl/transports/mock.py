"""In-process instrument emulator speaking the bulk link byte protocol."""

from __future__ import annotations

import json
import math

from hdsctl.core.config import Settings
from hdsctl.core.errors import TransportError

MOCK_IDENTITY = "OWON,HDS272S,1000000,V1.2.0"
WAVE_POINTS = 300

_DEFAULT_VALUES = {
    ":HORizontal:SCALe": "1.0ms",
    ":HORizontal:OFFSet": "0",
    ":ACQuire:MODe": "SAMPle",
    ":ACQuire:DEPMem": "4K",
    ":CH1:DISPlay": "ON",
    ":CH1:COUPling": "DC",
    ":CH1:PROBe": "10X",
    ":CH1:SCALe": "1.00V",
    ":CH1:OFFSet": "0",
    ":CH2:DISPlay": "OFF",
    ":CH2:COUPling": "DC",
    ":CH2:PROBe": "10X",
    ":CH2:SCALe": "1.00V",
    ":CH2:OFFSet": "0",
    ":TRIGger:STATus": "AUTO",
    ":TRIGger:SINGle:SOURce": "CH1",
    ":TRIGger:SINGle:COUPling": "DC",
    ":TRIGger:SINGle:EDGe": "RISE",
    ":TRIGger:SINGle:EDGe:LEVel": "0.00mV",
    ":TRIGger:SINGle:SWEep": "AUTO",
    ":FUNCtion": "SINE",
    ":FUNCtion:FREQuency": "1000",
    ":FUNCtion:AMPLitude": "2000",
    ":FUNCtion:OFFSet": "0",
    ":FUNCtion:HIGHt": "1000",
    ":FUNCtion:LOW": "-1000",
    ":CHANnel": "OFF",
    ":DMM:MEAS": "0.000",
}


class MockDeviceLink:
    """Answers queries from a value table and records sets into it.

    Commands must use full mnemonic paths, which is what the executor sends.
    """

    def __init__(self, settings: Settings | None = None, values: dict[str, str] | None = None) -> None:
        self.settings = settings or Settings()
        self.values = {**_DEFAULT_VALUES, **(values or {})}
        self.writes: list[bytes] = []
        self.is_open = False
        self._pending = b""

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def write(self, data: bytes) -> int:
        if not self.is_open:
            raise TransportError("mock link is not open")
        self.writes.append(data)
        command = data.decode("utf-8")
        if command.endswith("?"):
            self._pending = self._respond(command[:-1])
        else:
            path, _, argument = command.partition(" ")
            self.values[path] = argument
            self._pending = b""
        return len(data)

    def read(self, size: int) -> bytes:
        response, self._pending = self._pending[:size], self._pending[size:]
        return response

    def _respond(self, path: str) -> bytes:
        if path == "*IDN":
            return MOCK_IDENTITY.encode("utf-8")
        if path == self.settings.status_head_path:
            return self._frame(json.dumps(self._status_document()).encode("utf-8"))
        if path.startswith(self.settings.bulk_data_prefix + "CH"):
            return self._frame(self._wave(path[len(self.settings.bulk_data_prefix) + 2 :]))
        return self.values.get(path, "").encode("utf-8")

    def _frame(self, body: bytes) -> bytes:
        return len(body).to_bytes(self.settings.frame_prefix_length, "little") + body

    def _number(self, path: str) -> float:
        try:
            return float(self.values.get(path, "0"))
        except ValueError:
            return 0.0

    def _wave(self, channel: str) -> bytes:
        shift = int(self._number(f":CH{channel}:OFFSet") * self.settings.offset_divisor)
        samples = bytearray()
        for i in range(WAVE_POINTS):
            sample = max(-127, min(127, shift + int(100 * math.sin(i / 50))))
            samples.append(sample & 0xFF)
        return bytes(samples)

    def _status_document(self) -> dict:
        v = self.values
        return {
            "TIMEBASE": {"SCALE": v[":HORizontal:SCALe"], "HOFFSET": self._number(":HORizontal:OFFSet")},
            "SAMPLE": {"TYPE": v[":ACQuire:MODe"], "DEPMEM": v[":ACQuire:DEPMem"], "DATALEN": WAVE_POINTS},
            "CHANNEL": [
                {
                    "NAME": f"CH{channel}",
                    "DISPLAY": v.get(f":CH{channel}:DISPlay", "OFF"),
                    "COUPLING": v.get(f":CH{channel}:COUPling", "DC"),
                    "PROBE": v.get(f":CH{channel}:PROBe", "10X"),
                    "SCALE": v.get(f":CH{channel}:SCALe", "1.00V"),
                    "OFFSET": int(self._number(f":CH{channel}:OFFSet") * self.settings.offset_divisor),
                }
                for channel in self.settings.channels
            ],
            "DATATYPE": "SCREEN",
            "Trig": {
                "Mode": "SINGle",
                "Type": "Edge",
                "Items": {
                    "Channel": v[":TRIGger:SINGle:SOURce"],
                    "Level": v[":TRIGger:SINGle:EDGe:LEVel"],
                    "Edge": v[":TRIGger:SINGle:EDGe"],
                    "Coupling": v[":TRIGger:SINGle:COUPling"],
                    "Sweep": v[":TRIGger:SINGle:SWEep"],
                },
            },
        }
