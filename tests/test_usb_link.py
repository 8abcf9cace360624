from __future__ import annotations

import pytest
import usb.core

from hdsctl.core.errors import TransportConnectError, TransportError, TransportTimeoutError
from hdsctl.transports.usb_bulk import UsbBulkLink


class FakeDevice:
    def __init__(self, read_error: Exception | None = None) -> None:
        self.read_error = read_error
        self.written: list[tuple[int, bytes, int]] = []

    def write(self, endpoint: int, data: bytes, timeout: int) -> int:
        self.written.append((endpoint, data, timeout))
        return len(data)

    def read(self, endpoint: int, size: int, timeout: int):
        if self.read_error is not None:
            raise self.read_error
        return bytearray(b"OWON")


def test_missing_device_raises_clean_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(usb.core, "find", lambda **kwargs: None)

    with pytest.raises(TransportConnectError):
        UsbBulkLink().open()


def test_missing_backend_raises_clean_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def no_backend(**kwargs):
        raise usb.core.NoBackendError("No backend available")

    monkeypatch.setattr(usb.core, "find", no_backend)

    with pytest.raises(TransportConnectError):
        UsbBulkLink().open()


def test_transfer_before_open_fails() -> None:
    with pytest.raises(TransportError):
        UsbBulkLink().write(b"*IDN?")


def test_write_and_read_use_configured_endpoints() -> None:
    link = UsbBulkLink()
    device = FakeDevice()
    link._device = device

    assert link.write(b"*IDN?") == 5
    assert device.written == [(0x01, b"*IDN?", 1000)]
    assert link.read(10000) == b"OWON"


def test_read_timeout_is_mapped() -> None:
    link = UsbBulkLink()
    link._device = FakeDevice(read_error=usb.core.USBTimeoutError("timeout", errno=110))

    with pytest.raises(TransportTimeoutError):
        link.read(10000)
