"""
MPOS Print Agent Configuration
"""

import os


def _env_list(name: str, default: list) -> list:
    """Read a comma separated list from the environment."""
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(',') if item.strip()]


def _parse_int(value: str) -> int:
    """Decimal or prefixed ('0xff') integer; leading zeros read as decimal."""
    try:
        return int(value, 0)
    except ValueError:
        return int(value)


# =============================================================================
# Server Configuration
# =============================================================================

PORT = int(os.environ.get('MPOS_AGENT_PORT', 3300))
HOST = os.environ.get('MPOS_AGENT_HOST', '127.0.0.1')
DEBUG = os.environ.get('MPOS_AGENT_DEBUG', 'false').lower() == 'true'

# Origins echoed back in Access-Control-Allow-Origin; anything else gets '*'
ALLOWED_ORIGINS = _env_list('MPOS_AGENT_ALLOWED_ORIGINS', [
    'http://localhost:3000',
    'http://localhost:5173',
    'https://martpos.app',
    'https://app.martpos.app',
])

# =============================================================================
# Printer Discovery
# =============================================================================

# USB interface classes treated as printers: 7 = Printer, 255 = vendor-specific
PRINTER_INTERFACE_CLASSES = [
    _parse_int(value) for value in _env_list('MPOS_AGENT_PRINTER_CLASSES', ['7', '255'])
]

# Lower-case tokens matched against manufacturer/product strings
THERMAL_PRINTER_KEYWORDS = [
    keyword.lower() for keyword in _env_list('MPOS_AGENT_PRINTER_KEYWORDS', [
        'epson',
        'star micronics',
        'bixolon',
        'citizen',
        'xprinter',
        'rongta',
        'sewoo',
        'zjiang',
        'gprinter',
        'hprt',
        'posiflex',
        'sunmi',
        'caysn',
        'printer',
        'receipt',
        'thermal',
        'pos',
    ])
]

# =============================================================================
# USB Transport
# =============================================================================

USB_OPEN_TIMEOUT = float(os.environ.get('MPOS_AGENT_USB_OPEN_TIMEOUT', 5))  # seconds
USB_WRITE_TIMEOUT = int(os.environ.get('MPOS_AGENT_USB_WRITE_TIMEOUT', 10000))  # milliseconds
PRINT_LOCK_TIMEOUT = float(os.environ.get('MPOS_AGENT_PRINT_LOCK_TIMEOUT', 30))  # seconds

# =============================================================================
# Receipt Layout
# =============================================================================

RECEIPT_WIDTH = int(os.environ.get('MPOS_AGENT_RECEIPT_WIDTH', 48))
INVOICE_URL = os.environ.get('MPOS_AGENT_INVOICE_URL', 'https://martpos.app/invoice/{sale_id}')

# Command encoder (see handlers.ENCODERS) and optional python-escpos profile
ENCODER = os.environ.get('MPOS_AGENT_ENCODER', 'escpos')
ESCPOS_PROFILE = os.environ.get('MPOS_AGENT_ESCPOS_PROFILE') or None

# =============================================================================
# Logging
# =============================================================================

LOG_LEVEL = os.environ.get('MPOS_AGENT_LOG_LEVEL', 'INFO').upper()
LOG_DIR = os.environ.get('MPOS_AGENT_LOG_DIR', os.path.expanduser('~/.mpos_print_agent/logs'))
LOG_TO_FILE = os.environ.get('MPOS_AGENT_LOG_FILE', 'false').lower() == 'true'

# Print attempts kept in memory for GET /jobs
JOB_HISTORY_LIMIT = int(os.environ.get('MPOS_AGENT_JOB_HISTORY', 100))
