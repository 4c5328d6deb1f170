"""
MPOS Print Agent
================

Local receipt-printing agent for thermal printers attached over USB.

Supports:
- Driver-less discovery of thermal receipt printers (pyusb)
- Operator-selected default printer with auto-discovery fallback
- ESC/POS command streams (python-escpos) sent over a claimed bulk endpoint

Usage:
    python -m mpos_print_agent

API Endpoints:
    GET  /agent/status       - Agent enabled flag
    POST /agent/on           - Enable printing
    POST /agent/off          - Disable printing
    GET  /printer/default    - Read default printer selection
    POST /printer/default    - Set default printer {vendorId, productId}
    GET  /printers           - Enumerate and classify USB devices
    GET  /print-test         - Print self-test ticket
    POST /print-sale         - Print sale receipt
    GET  /jobs               - Recent print attempts
"""

__version__ = '1.0.0'
__author__ = 'Mart POS'
