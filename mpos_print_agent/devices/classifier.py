"""
Thermal Printer Classifier
==========================

Best-effort guess at which USB devices are receipt printers, without any
driver metadata. A device counts as a printer when interface 0 reports the
Printer class (7) or a vendor-specific class (255), or when its manufacturer
or product string contains a known brand or keyword.

False positives and negatives are expected; the keyword list is set through
MPOS_AGENT_PRINTER_KEYWORDS when new hardware shows up.
"""

from typing import Iterable, Optional

from ..config import PRINTER_INTERFACE_CLASSES, THERMAL_PRINTER_KEYWORDS
from ..models import ClassifiedDevice, DeviceDescriptor


class PrinterClassifier:
    """Pure function over a DeviceDescriptor; holds only its vocabulary."""

    def __init__(self, keywords: Optional[Iterable[str]] = None,
                 interface_classes: Optional[Iterable[int]] = None):
        self.keywords = tuple(
            k.lower() for k in (THERMAL_PRINTER_KEYWORDS if keywords is None else keywords)
        )
        self.interface_classes = frozenset(
            PRINTER_INTERFACE_CLASSES if interface_classes is None else interface_classes
        )

    def classify(self, descriptor: DeviceDescriptor) -> bool:
        if descriptor.interface_class in self.interface_classes:
            return True

        for text in (descriptor.manufacturer, descriptor.product):
            if not text:
                continue
            lowered = text.lower()
            if any(keyword in lowered for keyword in self.keywords):
                return True
        return False

    def classify_device(self, descriptor: DeviceDescriptor) -> ClassifiedDevice:
        return ClassifiedDevice(descriptor=descriptor, is_thermal_printer=self.classify(descriptor))
