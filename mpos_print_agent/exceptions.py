"""
Exceptions raised by the MPOS Print Agent.

Exception Hierarchy:
    PrintAgentError (base)
    ├── AgentDisabledError           - agent switched off, no device touched
    ├── ThermalPrinterNotFoundError  - no default match and nothing classified
    ├── UsbAccessDeniedError         - enumeration itself failed (permissions, no libusb)
    ├── InvalidPrinterSelectionError - malformed default-printer payload
    ├── InvalidSalePayloadError      - malformed /print-sale body
    ├── CommandStreamFinalizedError  - directive appended after encode()
    └── TransportError
        ├── TransportSetupError      - open/claim failed
        │   └── UsbOutEndpointNotFoundError
        ├── TransferError            - bulk write failed after a successful open
        └── TransportTimeoutError    - open, write or device lock took too long

Every class carries the response ``code`` it maps to. ``code = None`` means
the failing operation reports its own generic code (PRINT_TEST_ERROR,
PRINT_SALE_ERROR).
"""

from typing import Optional, Dict, Any


class PrintAgentError(Exception):
    """Base exception for all print agent errors."""

    code: Optional[str] = None

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class AgentDisabledError(PrintAgentError):
    """Printing is switched off via POST /agent/off."""

    code = 'AGENT_OFF'

    def __init__(self, message: str = "Print agent is disabled"):
        super().__init__(message)


class ThermalPrinterNotFoundError(PrintAgentError):
    """No attached device matched the default selection or the classifier."""

    code = 'THERMAL_PRINTER_NOT_FOUND'

    def __init__(self, message: str = "No thermal printer found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class UsbAccessDeniedError(PrintAgentError):
    """
    The USB bus could not be enumerated at all.

    Typical causes:
    - Missing udev rules / insufficient permissions
    - libusb backend not installed
    """

    code = 'USB_ACCESS_DENIED'


class InvalidPrinterSelectionError(PrintAgentError):
    """Default printer payload is missing vendorId/productId or out of range."""

    code = 'DEFAULT_PRINTER_INVALID'


class InvalidSalePayloadError(PrintAgentError):
    """The sale body cannot be rendered into a receipt."""

    code = 'PRINT_SALE_ERROR'


class CommandStreamFinalizedError(PrintAgentError):
    """A directive was appended to a stream that has already been encoded."""


# =============================================================================
# TRANSPORT ERRORS
# =============================================================================

class TransportError(PrintAgentError):
    """Base class for USB transport failures."""

    def __init__(self, message: str, device: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        if device:
            error_details['device'] = device
        super().__init__(message, error_details)
        self.device = device


class TransportSetupError(TransportError):
    """Opening the device or claiming its interface failed."""

    code = 'USB_OUT_ENDPOINT_NOT_FOUND'


class UsbOutEndpointNotFoundError(TransportSetupError):
    """Interface 0 has no host-to-device endpoint."""

    def __init__(self, device: Optional[str] = None):
        super().__init__("USB OUT endpoint not found", device)


class TransferError(TransportError):
    """Bulk transfer failed after the interface was claimed."""


class TransportTimeoutError(TransportError):
    """Device did not open, accept data, or free up within the timeout."""

    code = 'USB_TIMEOUT'

    def __init__(self, operation: str, timeout_seconds: float, device: Optional[str] = None):
        message = f"USB {operation} timed out after {timeout_seconds:.1f}s"
        super().__init__(message, device, {'operation': operation, 'timeout_seconds': timeout_seconds})
        self.operation = operation
        self.timeout_seconds = timeout_seconds
