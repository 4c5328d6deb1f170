"""
Printer Resolver
================

Chooses the device a print job goes to.

Order:
    1. Agent disabled -> AgentDisabledError, no device access at all.
    2. Default selection set and present -> that device, unclassified.
    3. First device the classifier accepts, in enumeration order.
    4. Nothing -> ThermalPrinterNotFoundError.
"""

from typing import List

from ..exceptions import AgentDisabledError, ThermalPrinterNotFoundError
from ..logging_config import get_logger
from ..models import ClassifiedDevice, DeviceDescriptor
from ..state import AgentState
from .classifier import PrinterClassifier
from .enumerator import DeviceEnumerator

logger = get_logger(__name__)


class PrinterResolver:
    """Default selection first, heuristic discovery second."""

    def __init__(self, state: AgentState, enumerator: DeviceEnumerator, classifier: PrinterClassifier):
        self.state = state
        self.enumerator = enumerator
        self.classifier = classifier

    def resolve(self) -> DeviceDescriptor:
        """
        Pick the target printer.

        Raises:
            AgentDisabledError: agent is switched off
            ThermalPrinterNotFoundError: nothing matched
            UsbAccessDeniedError: the bus could not be enumerated
        """
        if not self.state.enabled:
            raise AgentDisabledError()

        selection = self.state.default_printer
        devices = self.enumerator.list_devices()

        if selection is not None:
            for device in devices:
                if device.matches(selection):
                    logger.debug("Using default printer %s", device.label)
                    return device
            logger.warning(
                "Default printer %04x:%04x not attached, falling back to discovery",
                selection.vendor_id, selection.product_id,
            )

        for device in devices:
            if self.classifier.classify(device):
                logger.debug("Discovered thermal printer %s", device.label)
                return device

        raise ThermalPrinterNotFoundError(details={'devices_seen': len(devices)})

    def classify_all(self) -> List[ClassifiedDevice]:
        """Enumerate and classify every attached device (GET /printers)."""
        return [self.classifier.classify_device(d) for d in self.enumerator.list_devices()]
