"""
USB device discovery and transport.
"""

from .enumerator import DeviceEnumerator
from .classifier import PrinterClassifier
from .resolver import PrinterResolver
from .transport import UsbTransport, OpenPrinterHandle, DeviceLockRegistry

__all__ = [
    'DeviceEnumerator', 'PrinterClassifier', 'PrinterResolver',
    'UsbTransport', 'OpenPrinterHandle', 'DeviceLockRegistry',
]
