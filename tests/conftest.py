"""
Shared fixtures: fake PyUSB devices and a fully wired agent.

Nothing here touches real hardware; ``fake_usb`` swaps the ``usb.util``
helpers the agent calls for versions that operate on FakeUsbDevice.
"""

import pytest
import usb.core
import usb.util

from mpos_print_agent.app import create_app
from mpos_print_agent.devices import (
    DeviceEnumerator, DeviceLockRegistry, PrinterClassifier, PrinterResolver, UsbTransport,
)
from mpos_print_agent.orchestrator import PrintOrchestrator
from mpos_print_agent.state import AgentState

EPSON_VID = 0x04B8
EPSON_PID = 0x0202


class FakeEndpoint:
    def __init__(self, address, error=None, short_by=0):
        self.bEndpointAddress = address
        self.error = error
        self.short_by = short_by
        self.writes = []

    def write(self, data, timeout=None):
        if self.error is not None:
            raise self.error
        self.writes.append(bytes(data))
        return len(data) - self.short_by


class FakeInterface:
    def __init__(self, number=0, interface_class=7, endpoints=None):
        self.bInterfaceNumber = number
        self.bInterfaceClass = interface_class
        self.endpoints = endpoints if endpoints is not None else [FakeEndpoint(0x81), FakeEndpoint(0x01)]

    def __iter__(self):
        return iter(self.endpoints)


class FakeConfiguration:
    def __init__(self, interfaces):
        self.interfaces = interfaces

    def __getitem__(self, index):
        number, alternate = index
        if number >= len(self.interfaces) or alternate != 0:
            raise IndexError(index)
        return self.interfaces[number]


class FakeUsbDevice:
    """Just enough of usb.core.Device for the enumerator and transport."""

    def __init__(self, vendor_id=EPSON_VID, product_id=EPSON_PID, bus=1, address=5,
                 manufacturer='EPSON', product='TM-T20II', serial='X4ZF012345',
                 interface_class=7, endpoints=None, open_error=None, claim_error=None,
                 kernel_driver_active=False, detach_error=None, no_interfaces=False):
        self.idVendor = vendor_id
        self.idProduct = product_id
        self.bus = bus
        self.address = address
        self.strings = {}
        self.iManufacturer = self._add_string(1, manufacturer)
        self.iProduct = self._add_string(2, product)
        self.iSerialNumber = self._add_string(3, serial)
        interfaces = [] if no_interfaces else [FakeInterface(0, interface_class, endpoints)]
        self.configuration = FakeConfiguration(interfaces)
        self.open_error = open_error
        self.claim_error = claim_error
        self.kernel_driver_active = kernel_driver_active
        self.detach_error = detach_error

        self.disposed = 0
        self.claimed = []
        self.released = []
        self.detached = []

    def _add_string(self, index, value):
        if value is None:
            return 0
        self.strings[index] = value
        return index

    @property
    def interface(self):
        return self.configuration.interfaces[0]

    def __getitem__(self, index):
        if index != 0:
            raise IndexError(index)
        return self.configuration

    def set_configuration(self):
        if self.open_error is not None:
            raise self.open_error

    def get_active_configuration(self):
        if self.open_error is not None:
            raise self.open_error
        return self.configuration

    def is_kernel_driver_active(self, interface):
        return self.kernel_driver_active

    def detach_kernel_driver(self, interface):
        if self.detach_error is not None:
            raise self.detach_error
        self.detached.append(interface)
        self.kernel_driver_active = False


def access_denied():
    return usb.core.USBError('Access denied (insufficient permissions)', None, 13)


@pytest.fixture
def fake_usb(monkeypatch):
    """Route the usb.util helpers used by the agent to FakeUsbDevice."""

    def get_langids(device):
        if device.open_error is not None:
            raise device.open_error
        return (0x0409,)

    def get_string(device, index, langid=None):
        return device.strings[index]

    def dispose_resources(device):
        device.disposed += 1

    def claim_interface(device, interface):
        if device.claim_error is not None:
            raise device.claim_error
        device.claimed.append(interface)

    def release_interface(device, interface):
        device.released.append(interface)

    monkeypatch.setattr(usb.util, 'get_langids', get_langids)
    monkeypatch.setattr(usb.util, 'get_string', get_string)
    monkeypatch.setattr(usb.util, 'dispose_resources', dispose_resources)
    monkeypatch.setattr(usb.util, 'claim_interface', claim_interface)
    monkeypatch.setattr(usb.util, 'release_interface', release_interface)


@pytest.fixture
def devices():
    """Mutable list of attached devices, shared by enumerator and transport."""
    return []


@pytest.fixture
def enumerator(devices, fake_usb):
    return DeviceEnumerator(find_devices=lambda: list(devices))


@pytest.fixture
def transport(devices, fake_usb):
    def find_device(descriptor):
        for device in devices:
            if (device.bus, device.address) == (descriptor.bus_number, descriptor.device_address):
                return device
        return None
    return UsbTransport(find_device=find_device, open_timeout=2, write_timeout_ms=1000)


@pytest.fixture
def state():
    return AgentState()


@pytest.fixture
def resolver(state, enumerator):
    return PrinterResolver(state, enumerator, PrinterClassifier())


@pytest.fixture
def orchestrator(state, resolver, transport):
    return PrintOrchestrator(state, resolver, transport, locks=DeviceLockRegistry(timeout=2))


@pytest.fixture
def app(orchestrator):
    app = create_app(orchestrator)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sale_payload():
    return {
        'sale': {
            'id': 'S-1001',
            'number': '000123',
            'date': '2026-03-14T15:09:26',
            'subtotal': 10.0,
            'tax_total': 1.0,
            'discount_total': 0.0,
            'grand_total': 11.0,
            'payment_method': 'Efectivo',
        },
        'store': {'name': 'Mart Centro', 'address': 'Av. Siempre Viva 742', 'phone': '555-0101'},
        'employee': {'name': 'Ana'},
        'items': [
            {
                'name': 'A very very long product name exceeding twenty two chars',
                'quantity': 2,
                'unit_price': 5.00,
                'tax': 1.00,
            },
        ],
        'locale': 'es',
    }
