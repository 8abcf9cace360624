"""USB bulk-transfer link implementation using pyusb."""

from __future__ import annotations

import logging

import usb.core
import usb.util

from hdsctl.core.config import Settings
from hdsctl.core.errors import TransportConnectError, TransportError, TransportTimeoutError

LOGGER = logging.getLogger(__name__)


class UsbBulkLink:
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._device: usb.core.Device | None = None

    @property
    def _timeout_ms(self) -> int:
        return int(self.settings.timeout_s * 1000)

    def open(self) -> None:
        vendor_id, product_id = self.settings.vendor_id, self.settings.product_id
        try:
            device = usb.core.find(idVendor=vendor_id, idProduct=product_id)
        except usb.core.NoBackendError as exc:
            raise TransportConnectError(
                "No libusb backend available. Install libusb-1.0 and retry."
            ) from exc
        if device is None:
            raise TransportConnectError(
                f"No instrument found with USB id {vendor_id:04x}:{product_id:04x}"
            )

        try:
            if device.is_kernel_driver_active(0):
                device.detach_kernel_driver(0)
        except (NotImplementedError, usb.core.USBError):
            LOGGER.debug("Kernel driver state unavailable for %04x:%04x", vendor_id, product_id)

        try:
            device.set_configuration()
            usb.util.claim_interface(device, 0)
        except usb.core.USBError as exc:
            raise TransportConnectError(
                f"Could not claim USB device {vendor_id:04x}:{product_id:04x}: {exc}"
            ) from exc
        self._device = device

    def _require_device(self) -> usb.core.Device:
        if self._device is None:
            raise TransportError("USB link is not open")
        return self._device

    def write(self, data: bytes) -> int:
        device = self._require_device()
        try:
            return device.write(self.settings.out_endpoint, data, timeout=self._timeout_ms)
        except usb.core.USBTimeoutError as exc:
            raise TransportTimeoutError("USB bulk write timed out") from exc
        except usb.core.USBError as exc:
            raise TransportError(f"USB bulk write failed: {exc}") from exc

    def read(self, size: int) -> bytes:
        device = self._require_device()
        try:
            data = device.read(self.settings.in_endpoint, size, timeout=self._timeout_ms)
        except usb.core.USBTimeoutError as exc:
            raise TransportTimeoutError("USB bulk read timed out") from exc
        except usb.core.USBError as exc:
            raise TransportError(f"USB bulk read failed: {exc}") from exc
        return bytes(data)

    def close(self) -> None:
        if self._device is None:
            return
        device, self._device = self._device, None
        try:
            usb.util.release_interface(device, 0)
        except usb.core.USBError as exc:
            LOGGER.debug("Releasing USB interface failed: %s", exc)
        usb.util.dispose_resources(device)
