"""
MPOS Print Agent Models
"""

from .device import DeviceDescriptor, ClassifiedDevice, DefaultPrinterSelection
from .job import PrintJob
from .sale import Sale, SaleItem, SaleReceipt, Store

__all__ = [
    'DeviceDescriptor', 'ClassifiedDevice', 'DefaultPrinterSelection',
    'PrintJob', 'Sale', 'SaleItem', 'SaleReceipt', 'Store',
]
