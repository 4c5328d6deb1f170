"""
USB Device Enumerator
=====================

Lists attached USB devices with their descriptor strings using PyUSB.

Each device is opened just long enough to read its manufacturer, product
and serial strings, then released again. Devices the current user may not
open are skipped; only a failure to walk the bus at all is reported.
"""

from typing import Callable, Iterable, List, Optional

import usb.core
import usb.util

from ..exceptions import UsbAccessDeniedError
from ..logging_config import get_logger
from ..models import DeviceDescriptor

logger = get_logger(__name__)


def _find_all_devices() -> Iterable:
    return usb.core.find(find_all=True)


def _read_string(device, index: int, langid: Optional[int]) -> Optional[str]:
    """Read one string descriptor. Index 0 means the device has none."""
    if not index:
        return None
    try:
        return usb.util.get_string(device, index, langid)
    except (usb.core.USBError, ValueError, NotImplementedError) as e:
        logger.debug("String descriptor %s unreadable on %04x:%04x: %s",
                     index, device.idVendor, device.idProduct, e)
        return None


def _interface_class(device) -> Optional[int]:
    """bInterfaceClass of interface 0 in the first configuration."""
    try:
        return device[0][(0, 0)].bInterfaceClass
    except (usb.core.USBError, IndexError, KeyError) as e:
        logger.debug("No interface descriptor on %04x:%04x: %s",
                     device.idVendor, device.idProduct, e)
        return None


class DeviceEnumerator:
    """Produces a fresh list of DeviceDescriptor on every call."""

    def __init__(self, find_devices: Optional[Callable[[], Iterable]] = None):
        self._find_devices = find_devices or _find_all_devices

    def list_devices(self) -> List[DeviceDescriptor]:
        """
        Enumerate attached devices.

        Returns:
            Descriptors in bus order, possibly empty. Every (bus, address)
            pair appears at most once.

        Raises:
            UsbAccessDeniedError: the bus itself could not be enumerated
        """
        try:
            devices = list(self._find_devices())
        except usb.core.NoBackendError as e:
            raise UsbAccessDeniedError("No libusb backend available", {'error': str(e)})
        except usb.core.USBError as e:
            raise UsbAccessDeniedError("USB enumeration failed", {'error': str(e)})

        descriptors = []
        seen = set()
        for device in devices:
            key = (device.bus, device.address)
            if key in seen:
                continue
            descriptor = self._describe(device)
            if descriptor is None:
                continue
            seen.add(key)
            descriptors.append(descriptor)

        logger.debug("Enumerated %d of %d USB devices", len(descriptors), len(devices))
        return descriptors

    def _describe(self, device) -> Optional[DeviceDescriptor]:
        """Open the device, read its strings, release it. None if it cannot be opened."""
        indexes = (device.iManufacturer, device.iProduct, device.iSerialNumber)
        try:
            langid = None
            if any(indexes):
                try:
                    langids = usb.util.get_langids(device)
                except (usb.core.USBError, NotImplementedError) as e:
                    # NotImplementedError: libusb cannot open it (HID or driverless on Windows)
                    logger.debug("Skipping %04x:%04x on bus %s: cannot open (%s)",
                                 device.idVendor, device.idProduct, device.bus, e)
                    return None
                langid = langids[0] if langids else None

            manufacturer, product, serial = (
                _read_string(device, index, langid) for index in indexes
            )
            return DeviceDescriptor(
                vendor_id=device.idVendor,
                product_id=device.idProduct,
                bus_number=device.bus,
                device_address=device.address,
                manufacturer=manufacturer,
                product=product,
                serial=serial,
                interface_class=_interface_class(device),
            )
        finally:
            usb.util.dispose_resources(device)
