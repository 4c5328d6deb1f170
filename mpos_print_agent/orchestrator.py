"""
Print Orchestrator
==================

Runs one print request end to end:

    build command stream -> resolve printer -> lock device
        -> open -> write -> close

and turns every failure into a ``{ok: False, code, message}`` result. This
is the only place print-path exceptions are caught; the HTTP layer just
serializes what comes back.
"""

from collections import deque
from typing import Any, Callable, Dict, List, Optional

from .commands import CommandStream
from .config import JOB_HISTORY_LIMIT
from .devices import DeviceLockRegistry, PrinterResolver, UsbTransport
from .exceptions import AgentDisabledError, PrintAgentError, UsbAccessDeniedError
from .handlers import CommandEncoder
from .i18n import get_labels
from .logging_config import get_logger
from .models import PrintJob, SaleReceipt
from .receipt import build_sale_ticket, build_test_ticket
from .state import AgentState

logger = get_logger(__name__)


class PrintOrchestrator:
    """Sequences resolver, transport and receipt builder for each request."""

    def __init__(
        self,
        state: AgentState,
        resolver: PrinterResolver,
        transport: UsbTransport,
        locks: Optional[DeviceLockRegistry] = None,
        encoder_factory: Optional[Callable[[], CommandEncoder]] = None,
        history_limit: int = JOB_HISTORY_LIMIT,
    ):
        self.state = state
        self.resolver = resolver
        self.transport = transport
        self.locks = locks or DeviceLockRegistry()
        self.encoder_factory = encoder_factory
        self._jobs = deque(maxlen=history_limit)

    # =========================================================================
    # Printing
    # =========================================================================

    def print_test(self) -> Dict[str, Any]:
        """Print the fixed self-test ticket."""
        return self._run(
            'test', 'PRINT_TEST_OK', 'PRINT_TEST_ERROR',
            lambda: build_test_ticket(self.encoder_factory),
        )

    def print_sale(self, payload: Any) -> Dict[str, Any]:
        """Print a sale receipt from a /print-sale request body."""
        def build() -> CommandStream:
            receipt = SaleReceipt.from_payload(payload)
            return build_sale_ticket(receipt, get_labels(receipt.locale), self.encoder_factory)

        return self._run('sale', 'PRINT_SALE_OK', 'PRINT_SALE_ERROR', build)

    def _run(self, job_type: str, ok_code: str, error_code: str,
             build: Callable[[], CommandStream]) -> Dict[str, Any]:
        job = PrintJob(job_type=job_type)
        self._jobs.append(job)

        try:
            if not self.state.enabled:
                raise AgentDisabledError()

            data = build().encode()
            device = self.resolver.resolve()
            job.start(device.label)

            with self.locks.hold(device):
                with self.transport.session(device) as handle:
                    sent = self.transport.write(handle, data)

        except PrintAgentError as e:
            code = e.code or error_code
            job.fail(code, e.message)
            logger.warning("%s print failed: %s (%s)", job_type, code, e)
            return {'ok': False, 'code': code, 'message': e.message, 'jobId': job.id}
        except Exception as e:
            job.fail(error_code, str(e))
            logger.exception("%s print failed unexpectedly", job_type)
            return {'ok': False, 'code': error_code, 'message': str(e), 'jobId': job.id}

        job.complete(ok_code, sent)
        logger.info("%s printed on %s (%d bytes)", job_type, job.device, sent)
        return {'ok': True, 'code': ok_code, 'bytesSent': sent, 'jobId': job.id}

    # =========================================================================
    # Discovery / History
    # =========================================================================

    def list_printers(self) -> Dict[str, Any]:
        """Enumerate and classify attached devices."""
        try:
            devices = self.resolver.classify_all()
        except UsbAccessDeniedError as e:
            logger.error("USB enumeration failed: %s", e)
            return {'ok': False, 'printers': [], 'code': e.code, 'message': e.message}

        selection = self.state.default_printer
        printers = []
        for device in devices:
            data = device.to_dict()
            data['isDefault'] = selection is not None and device.descriptor.matches(selection)
            printers.append(data)

        return {
            'ok': True,
            'printers': printers,
            'code': 'PRINTER_LIST_OK' if printers else 'PRINTER_LIST_EMPTY',
        }

    def recent_jobs(self, limit: int = 50) -> List[PrintJob]:
        """Most recent first."""
        return list(reversed(self._jobs))[:limit]
