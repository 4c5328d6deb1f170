"""
Device Models
=============

USB devices as seen by the enumerator, and the operator's default printer.
"""

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

from ..exceptions import InvalidPrinterSelectionError


@dataclass(frozen=True)
class DeviceDescriptor:
    """One attached USB device, read fresh on every enumeration."""

    vendor_id: int
    product_id: int
    bus_number: int
    device_address: int
    manufacturer: Optional[str] = None
    product: Optional[str] = None
    serial: Optional[str] = None
    interface_class: Optional[int] = None

    @property
    def label(self) -> str:
        """Short identity used in logs and job records."""
        name = self.product or self.manufacturer or 'unknown'
        return (
            f"{name} [{self.vendor_id:04x}:{self.product_id:04x}] "
            f"bus {self.bus_number} addr {self.device_address}"
        )

    def matches(self, selection: 'DefaultPrinterSelection') -> bool:
        return self.vendor_id == selection.vendor_id and self.product_id == selection.product_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase shape used on the wire."""
        return {
            'vendorId': self.vendor_id,
            'productId': self.product_id,
            'name': self.product or self.manufacturer,
            'manufacturer': self.manufacturer,
            'product': self.product,
            'serial': self.serial,
            'busNumber': self.bus_number,
            'deviceAddress': self.device_address,
            'interfaceClass': self.interface_class,
        }


@dataclass(frozen=True)
class ClassifiedDevice:
    """Descriptor plus the classifier's verdict."""

    descriptor: DeviceDescriptor
    is_thermal_printer: bool

    def to_dict(self) -> Dict[str, Any]:
        data = self.descriptor.to_dict()
        data['isThermalPrinter'] = self.is_thermal_printer
        return data


def _parse_usb_id(value: Any) -> Optional[int]:
    """Accept ints or numeric strings ('1208', '0x04b8', '0010'); None if unusable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed = int(text, 0)
        except ValueError:
            try:
                parsed = int(text)
            except ValueError:
                return None
    else:
        return None
    if not 0 < parsed <= 0xFFFF:
        return None
    return parsed


@dataclass(frozen=True)
class DefaultPrinterSelection:
    """Operator-chosen printer identity. Both ids are always present and non-zero."""

    vendor_id: int
    product_id: int

    @classmethod
    def from_payload(cls, data: Any) -> 'DefaultPrinterSelection':
        """
        Build a selection from a request body.

        Raises:
            InvalidPrinterSelectionError: body is not an object, or either id
                is missing, zero, non-numeric or outside the uint16 range
        """
        if not isinstance(data, dict):
            raise InvalidPrinterSelectionError("Request body must be a JSON object")

        vendor_id = _parse_usb_id(data.get('vendorId'))
        product_id = _parse_usb_id(data.get('productId'))
        if vendor_id is None or product_id is None:
            raise InvalidPrinterSelectionError(
                "vendorId and productId are required (1..65535)",
                {'vendorId': data.get('vendorId'), 'productId': data.get('productId')},
            )
        return cls(vendor_id=vendor_id, product_id=product_id)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        return {'vendorId': data['vendor_id'], 'productId': data['product_id']}
