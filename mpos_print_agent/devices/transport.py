"""
USB Transport
=============

Claims a printer's interface and pushes a finished byte stream through its
bulk OUT endpoint with PyUSB.

Lifecycle per print job:
    open(descriptor)  - find device, detach kernel driver, claim interface 0,
                        locate the OUT endpoint
    write(handle, data)
    close(handle)     - release interface, dispose resources; exactly once

``session()`` wraps the three so every exit path closes the handle. Jobs for
the same physical device are serialized through ``DeviceLockRegistry``; an
open that timed out keeps the device reserved until its worker has finished
and closed whatever it claimed.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional, Tuple

import usb.core
import usb.util

from ..config import USB_OPEN_TIMEOUT, USB_WRITE_TIMEOUT, PRINT_LOCK_TIMEOUT
from ..exceptions import (
    ThermalPrinterNotFoundError,
    TransferError,
    TransportSetupError,
    TransportTimeoutError,
    UsbOutEndpointNotFoundError,
)
from ..logging_config import get_logger
from ..models import DeviceDescriptor

logger = get_logger(__name__)


def _find_device(descriptor: DeviceDescriptor):
    return usb.core.find(
        idVendor=descriptor.vendor_id,
        idProduct=descriptor.product_id,
        bus=descriptor.bus_number,
        address=descriptor.device_address,
    )


def _is_out_endpoint(endpoint) -> bool:
    return usb.util.endpoint_direction(endpoint.bEndpointAddress) == usb.util.ENDPOINT_OUT


class OpenPrinterHandle:
    """A claimed interface and its OUT endpoint, owned by one print job."""

    def __init__(self, descriptor: DeviceDescriptor, device, interface_number: int, endpoint):
        self.descriptor = descriptor
        self.device = device
        self.interface_number = interface_number
        self.endpoint = endpoint
        self.closed = False

    def __repr__(self):
        state = 'closed' if self.closed else 'open'
        return f"<OpenPrinterHandle {self.descriptor.label} ep=0x{self.endpoint.bEndpointAddress:02x} {state}>"


class DeviceLockRegistry:
    """One lock per physical device, keyed by (bus, address)."""

    def __init__(self, timeout: Optional[float] = PRINT_LOCK_TIMEOUT):
        self.timeout = timeout
        self._guard = threading.Lock()
        self._locks: Dict[Tuple[int, int], threading.Lock] = {}

    @contextmanager
    def hold(self, descriptor: DeviceDescriptor) -> Iterator[None]:
        """
        Hold the device's lock for the duration of the block.

        Raises:
            TransportTimeoutError: another job kept the device longer than the timeout
        """
        key = (descriptor.bus_number, descriptor.device_address)
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())

        acquired = lock.acquire(timeout=self.timeout) if self.timeout is not None else lock.acquire()
        if not acquired:
            raise TransportTimeoutError('device lock', self.timeout, descriptor.label)
        try:
            yield
        finally:
            lock.release()


class UsbTransport:
    """Raw USB bulk transport for receipt printers."""

    def __init__(
        self,
        find_device: Optional[Callable[[DeviceDescriptor], object]] = None,
        open_timeout: Optional[float] = USB_OPEN_TIMEOUT,
        write_timeout_ms: int = USB_WRITE_TIMEOUT,
        interface_index: int = 0,
    ):
        self._find_device = find_device or _find_device
        self.open_timeout = open_timeout
        self.write_timeout_ms = write_timeout_ms
        self.interface_index = interface_index
        # Opens that timed out but are still running, keyed by (bus, address)
        self._abandoned: Dict[Tuple[int, int], threading.Event] = {}
        self._abandoned_guard = threading.Lock()

    # =========================================================================
    # Open
    # =========================================================================

    def open(self, descriptor: DeviceDescriptor) -> OpenPrinterHandle:
        """
        Open and claim the printer.

        Raises:
            ThermalPrinterNotFoundError: device vanished since enumeration
            TransportSetupError: configuration or claim failed
            UsbOutEndpointNotFoundError: interface has no OUT endpoint
            TransportTimeoutError: open did not finish within ``open_timeout``,
                or an earlier timed-out open of the same device is still running
        """
        if self.open_timeout is None:
            return self._open(descriptor)

        key = (descriptor.bus_number, descriptor.device_address)
        with self._abandoned_guard:
            pending = self._abandoned.get(key)
        if pending is not None and not pending.wait(self.open_timeout):
            raise TransportTimeoutError('open', self.open_timeout, descriptor.label)

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='usb-open')
        future = executor.submit(self._open, descriptor)
        try:
            return future.result(timeout=self.open_timeout)
        except FutureTimeoutError:
            # The caller gives up; the device stays reserved until the worker
            # finishes and whatever it opened is closed again.
            settled = threading.Event()
            with self._abandoned_guard:
                self._abandoned[key] = settled
            future.add_done_callback(lambda f: self._close_abandoned(key, settled, f))
            raise TransportTimeoutError('open', self.open_timeout, descriptor.label)
        finally:
            executor.shutdown(wait=False)

    def _close_abandoned(self, key: Tuple[int, int], settled: threading.Event, future):
        try:
            if future.cancelled() or future.exception() is not None:
                return
            handle = future.result()
            logger.warning("Closing %s opened after timeout", handle.descriptor.label)
            self.close(handle)
        finally:
            with self._abandoned_guard:
                if self._abandoned.get(key) is settled:
                    del self._abandoned[key]
            settled.set()

    def _open(self, descriptor: DeviceDescriptor) -> OpenPrinterHandle:
        label = descriptor.label
        try:
            device = self._find_device(descriptor)
        except usb.core.USBError as e:
            raise TransportSetupError(f"Cannot open printer: {e}", label) from e
        if device is None:
            raise ThermalPrinterNotFoundError(
                "Printer disconnected before it could be opened", {'device': label}
            )

        interface_number = None
        try:
            try:
                device.set_configuration()
            except usb.core.USBError as e:
                # Already configured, or busy under a kernel driver
                logger.debug("set_configuration on %s: %s", label, e)

            interface = device.get_active_configuration()[(self.interface_index, 0)]
            self._detach_kernel_driver(device, interface.bInterfaceNumber, label)
            usb.util.claim_interface(device, interface.bInterfaceNumber)
            interface_number = interface.bInterfaceNumber

            endpoint = usb.util.find_descriptor(interface, custom_match=_is_out_endpoint)
            if endpoint is None:
                raise UsbOutEndpointNotFoundError(label)
        except UsbOutEndpointNotFoundError:
            self._release(device, interface_number, label)
            raise
        except (usb.core.USBError, NotImplementedError, IndexError) as e:
            self._release(device, interface_number, label)
            raise TransportSetupError(f"Cannot claim printer interface: {e}", label) from e

        logger.debug("Claimed %s interface %d, OUT endpoint 0x%02x",
                     label, interface_number, endpoint.bEndpointAddress)
        return OpenPrinterHandle(descriptor, device, interface_number, endpoint)

    @staticmethod
    def _detach_kernel_driver(device, interface_number: int, label: str):
        """
        Detach a bound kernel driver (usblp on Linux).

        Not fatal: some platforms report the driver state wrongly or do not
        implement the query at all, and the claim that follows is the real test.
        """
        try:
            if device.is_kernel_driver_active(interface_number):
                device.detach_kernel_driver(interface_number)
                logger.debug("Detached kernel driver from %s", label)
        except NotImplementedError:
            logger.debug("Kernel driver query not supported for %s", label)
        except usb.core.USBError as e:
            logger.debug("Kernel driver detach on %s failed, continuing: %s", label, e)

    # =========================================================================
    # Write / Close
    # =========================================================================

    def write(self, handle: OpenPrinterHandle, data: bytes) -> int:
        """
        Bulk-transfer ``data`` in one call. Anything short of the full buffer is a failure.

        Returns:
            Number of bytes written

        Raises:
            TransferError: transfer failed or was short
            TransportTimeoutError: printer did not accept the data in time
        """
        label = handle.descriptor.label
        if handle.closed:
            raise TransferError("Printer handle already closed", label)

        try:
            written = handle.endpoint.write(data, timeout=self.write_timeout_ms)
        except usb.core.USBTimeoutError as e:
            raise TransportTimeoutError('write', self.write_timeout_ms / 1000, label) from e
        except usb.core.USBError as e:
            raise TransferError(f"Bulk transfer failed: {e}", label) from e

        if written != len(data):
            raise TransferError(f"Short write: {written} of {len(data)} bytes", label)
        logger.debug("Wrote %d bytes to %s", written, label)
        return written

    def close(self, handle: OpenPrinterHandle):
        """Release the interface and the OS handle. Second calls are ignored."""
        if handle.closed:
            return
        handle.closed = True
        self._release(handle.device, handle.interface_number, handle.descriptor.label)

    @staticmethod
    def _release(device, interface_number: Optional[int], label: str):
        if interface_number is not None:
            try:
                usb.util.release_interface(device, interface_number)
            except usb.core.USBError as e:
                logger.warning("Releasing interface on %s failed: %s", label, e)
        usb.util.dispose_resources(device)

    @contextmanager
    def session(self, descriptor: DeviceDescriptor) -> Iterator[OpenPrinterHandle]:
        """Open the printer for the duration of the block; always closes."""
        handle = self.open(descriptor)
        try:
            yield handle
        finally:
            self.close(handle)
