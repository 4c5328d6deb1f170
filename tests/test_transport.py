"""
Tests for the USB transport: claim, endpoint lookup, write, and release.
"""

import threading
import time

import pytest
import usb.core

from mpos_print_agent.devices import DeviceLockRegistry, UsbTransport
from mpos_print_agent.exceptions import (
    ThermalPrinterNotFoundError,
    TransferError,
    TransportSetupError,
    TransportTimeoutError,
    UsbOutEndpointNotFoundError,
)
from mpos_print_agent.models import DeviceDescriptor

from conftest import FakeEndpoint, FakeUsbDevice


def descriptor_for(device):
    return DeviceDescriptor(
        vendor_id=device.idVendor, product_id=device.idProduct,
        bus_number=device.bus, device_address=device.address,
        product='TM-T20II',
    )


@pytest.fixture
def printer(devices):
    device = FakeUsbDevice()
    devices.append(device)
    return device


class TestOpen:

    def test_claims_interface_and_finds_out_endpoint(self, transport, printer):
        handle = transport.open(descriptor_for(printer))

        assert printer.claimed == [0]
        assert handle.endpoint.bEndpointAddress == 0x01
        assert not handle.closed
        transport.close(handle)

    def test_detaches_active_kernel_driver(self, transport, devices):
        device = FakeUsbDevice(kernel_driver_active=True)
        devices.append(device)

        with transport.session(descriptor_for(device)):
            pass

        assert device.detached == [0]

    def test_detach_failure_is_tolerated(self, transport, devices):
        device = FakeUsbDevice(
            kernel_driver_active=True,
            detach_error=usb.core.USBError('Entity not found', None, 2),
        )
        devices.append(device)

        with transport.session(descriptor_for(device)) as handle:
            transport.write(handle, b'\x1b@')

        assert device.claimed == [0]

    def test_missing_out_endpoint_still_closes(self, transport, devices):
        device = FakeUsbDevice(endpoints=[FakeEndpoint(0x81)])
        devices.append(device)

        with pytest.raises(UsbOutEndpointNotFoundError) as exc_info:
            transport.open(descriptor_for(device))

        assert exc_info.value.code == 'USB_OUT_ENDPOINT_NOT_FOUND'
        assert device.released == [0]
        assert device.disposed == 1

    def test_claim_failure(self, transport, devices):
        device = FakeUsbDevice(claim_error=usb.core.USBError('Resource busy', None, 16))
        devices.append(device)

        with pytest.raises(TransportSetupError):
            transport.open(descriptor_for(device))

        assert device.released == []
        assert device.disposed == 1

    def test_vanished_device(self, transport):
        ghost = FakeUsbDevice(address=42)

        with pytest.raises(ThermalPrinterNotFoundError):
            transport.open(descriptor_for(ghost))

    def test_open_timeout_closes_late_handle(self, printer, fake_usb):
        release = threading.Event()

        def slow_find(descriptor):
            release.wait(2)
            return printer

        transport = UsbTransport(find_device=slow_find, open_timeout=0.05)
        with pytest.raises(TransportTimeoutError):
            transport.open(descriptor_for(printer))

        release.set()
        deadline = time.time() + 2
        while printer.disposed == 0 and time.time() < deadline:
            time.sleep(0.01)

        assert printer.claimed == [0]
        assert printer.released == [0]
        assert printer.disposed == 1

    def test_device_stays_reserved_while_timed_out_open_runs(self, printer, fake_usb):
        release = threading.Event()
        calls = []

        def slow_find(descriptor):
            calls.append(descriptor)
            if len(calls) == 1:
                release.wait(2)
            return printer

        transport = UsbTransport(find_device=slow_find, open_timeout=0.05)
        with pytest.raises(TransportTimeoutError):
            transport.open(descriptor_for(printer))
        with pytest.raises(TransportTimeoutError):
            transport.open(descriptor_for(printer))

        assert len(calls) == 1
        release.set()
        deadline = time.time() + 2
        while printer.disposed == 0 and time.time() < deadline:
            time.sleep(0.01)
        assert printer.claimed == [0]

    def test_next_open_proceeds_once_abandoned_handle_is_closed(self, printer, fake_usb):
        release = threading.Event()
        calls = []

        def slow_find(descriptor):
            calls.append(descriptor)
            if len(calls) == 1:
                release.wait(2)
            return printer

        transport = UsbTransport(find_device=slow_find, open_timeout=0.5)
        with pytest.raises(TransportTimeoutError):
            transport.open(descriptor_for(printer))

        threading.Timer(0.05, release.set).start()
        handle = transport.open(descriptor_for(printer))

        assert printer.claimed == [0, 0]
        assert printer.released == [0]
        transport.close(handle)
        assert printer.released == [0, 0]


class TestWrite:

    def test_writes_whole_buffer(self, transport, printer):
        with transport.session(descriptor_for(printer)) as handle:
            sent = transport.write(handle, b'hello\n')

        assert sent == 6
        assert handle.endpoint.writes == [b'hello\n']

    def test_usb_error_is_transfer_error(self, transport, devices):
        endpoint = FakeEndpoint(0x02, error=usb.core.USBError('Pipe error', None, 32))
        device = FakeUsbDevice(endpoints=[endpoint])
        devices.append(device)

        with pytest.raises(TransferError):
            with transport.session(descriptor_for(device)) as handle:
                transport.write(handle, b'data')

        assert device.disposed == 1

    def test_timeout(self, transport, devices):
        endpoint = FakeEndpoint(0x02, error=usb.core.USBTimeoutError('Operation timed out', None, 110))
        devices.append(FakeUsbDevice(endpoints=[endpoint]))

        with pytest.raises(TransportTimeoutError) as exc_info:
            with transport.session(descriptor_for(devices[0])) as handle:
                transport.write(handle, b'data')
        assert exc_info.value.code == 'USB_TIMEOUT'

    def test_short_write_fails(self, transport, devices):
        devices.append(FakeUsbDevice(endpoints=[FakeEndpoint(0x02, short_by=1)]))

        with pytest.raises(TransferError):
            with transport.session(descriptor_for(devices[0])) as handle:
                transport.write(handle, b'data')

    def test_write_after_close(self, transport, printer):
        handle = transport.open(descriptor_for(printer))
        transport.close(handle)

        with pytest.raises(TransferError):
            transport.write(handle, b'data')


class TestClose:

    def test_close_is_idempotent(self, transport, printer):
        handle = transport.open(descriptor_for(printer))

        transport.close(handle)
        transport.close(handle)

        assert printer.released == [0]
        assert printer.disposed == 1

    def test_session_closes_on_error(self, transport, printer):
        with pytest.raises(RuntimeError):
            with transport.session(descriptor_for(printer)):
                raise RuntimeError('layout bug')

        assert printer.released == [0]
        assert printer.disposed == 1


class TestDeviceLocks:

    def test_same_device_is_serialized(self, printer):
        locks = DeviceLockRegistry(timeout=0.05)
        descriptor = descriptor_for(printer)

        with locks.hold(descriptor):
            with pytest.raises(TransportTimeoutError):
                with locks.hold(descriptor):
                    pass

    def test_different_devices_do_not_block(self):
        locks = DeviceLockRegistry(timeout=0.05)
        first = descriptor_for(FakeUsbDevice(address=2))
        second = descriptor_for(FakeUsbDevice(address=3))

        with locks.hold(first):
            with locks.hold(second):
                pass
