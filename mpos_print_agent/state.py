"""
Agent State
===========

Process-wide switches shared by every request: the enabled flag and the
default printer selection. Nothing here survives a restart.
"""

import threading
from typing import Optional, Dict, Any

from .models import DefaultPrinterSelection
from .logging_config import get_logger

logger = get_logger(__name__)


class AgentState:
    """Enabled flag and default printer, guarded by one lock."""

    def __init__(self, enabled: bool = True, default_printer: Optional[DefaultPrinterSelection] = None):
        self._lock = threading.Lock()
        self._enabled = enabled
        self._default_printer = default_printer

    @property
    def enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def enable(self):
        with self._lock:
            self._enabled = True
        logger.info("Agent enabled")

    def disable(self):
        with self._lock:
            self._enabled = False
        logger.info("Agent disabled")

    @property
    def default_printer(self) -> Optional[DefaultPrinterSelection]:
        with self._lock:
            return self._default_printer

    def set_default_printer(self, selection: DefaultPrinterSelection):
        """Replace the default selection. Only complete selections reach here."""
        with self._lock:
            self._default_printer = selection
        logger.info(
            "Default printer set to %04x:%04x", selection.vendor_id, selection.product_id
        )

    def clear_default_printer(self):
        with self._lock:
            self._default_printer = None
        logger.info("Default printer cleared")

    def snapshot(self) -> Dict[str, Any]:
        """Consistent view of both fields."""
        with self._lock:
            return {
                'enabled': self._enabled,
                'defaultPrinter': self._default_printer.to_dict() if self._default_printer else None,
            }
