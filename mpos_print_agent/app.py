"""
MPOS Print Agent - Main Application
===================================

Local HTTP interface for receipt printing.

Run: python -m mpos_print_agent
"""

import platform
import socket
import sys
from datetime import datetime
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS

from . import __version__
from .config import ALLOWED_ORIGINS
from .devices import DeviceEnumerator, PrinterClassifier, PrinterResolver, UsbTransport
from .exceptions import InvalidPrinterSelectionError
from .logging_config import get_logger
from .models import DefaultPrinterSelection
from .orchestrator import PrintOrchestrator
from .state import AgentState

logger = get_logger(__name__)

agent_bp = Blueprint('agent', __name__)

CORS_METHODS = ['GET', 'POST', 'OPTIONS']
CORS_HEADERS = ['Content-Type', 'Authorization']


def _orchestrator() -> PrintOrchestrator:
    return current_app.extensions['print_agent']


def _state() -> AgentState:
    return _orchestrator().state


# =============================================================================
# Health
# =============================================================================

@agent_bp.route('/health', methods=['GET'])
def health():
    """Health check with system info."""
    return jsonify({
        'ok': True,
        'code': 'AGENT_HEALTH',
        'service': 'MPOS Print Agent',
        'version': __version__,
        'hostname': socket.gethostname(),
        'platform': platform.system(),
        'python': sys.version.split()[0],
        'enabled': _state().enabled,
        'timestamp': datetime.now().isoformat(),
    })


# =============================================================================
# Agent Status
# =============================================================================

def _agent_status():
    enabled = _state().enabled
    return jsonify({'ok': True, 'enabled': enabled, 'code': 'AGENT_ON' if enabled else 'AGENT_OFF'})


@agent_bp.route('/agent/status', methods=['GET'])
def agent_status():
    return _agent_status()


@agent_bp.route('/agent/on', methods=['POST'])
def agent_on():
    _state().enable()
    return _agent_status()


@agent_bp.route('/agent/off', methods=['POST'])
def agent_off():
    _state().disable()
    return _agent_status()


# =============================================================================
# Default Printer
# =============================================================================

@agent_bp.route('/printer/default', methods=['GET'])
def get_default_printer():
    selection = _state().default_printer
    return jsonify({
        'ok': True,
        'defaultPrinter': selection.to_dict() if selection else None,
        'code': 'DEFAULT_PRINTER_GET',
    })


@agent_bp.route('/printer/default', methods=['POST'])
def set_default_printer():
    """Set the default printer. Incomplete selections never reach the state."""
    data = request.get_json(silent=True)
    try:
        selection = DefaultPrinterSelection.from_payload(data)
    except InvalidPrinterSelectionError as e:
        return jsonify({'ok': False, 'code': e.code, 'message': e.message})

    _state().set_default_printer(selection)
    return jsonify({
        'ok': True,
        'defaultPrinter': selection.to_dict(),
        'code': 'DEFAULT_PRINTER_SET',
    })


# =============================================================================
# Printers
# =============================================================================

@agent_bp.route('/printers', methods=['GET'])
def list_printers():
    """Enumerate and classify attached USB devices."""
    return jsonify(_orchestrator().list_printers())


@agent_bp.route('/print-test', methods=['GET'])
def print_test():
    return jsonify(_orchestrator().print_test())


@agent_bp.route('/print-sale', methods=['POST'])
def print_sale():
    data = request.get_json(silent=True)
    return jsonify(_orchestrator().print_sale(data))


# =============================================================================
# Job History
# =============================================================================

@agent_bp.route('/jobs', methods=['GET'])
def list_jobs():
    """Recent print attempts (in memory only)."""
    limit = request.args.get('limit', 50, type=int)
    jobs = _orchestrator().recent_jobs(limit)
    return jsonify({
        'ok': True,
        'code': 'JOB_LIST_OK',
        'jobs': [j.to_dict() for j in jobs],
        'count': len(jobs),
    })


# =============================================================================
# Application Setup
# =============================================================================

def _cors_fallback(response):
    """Origins outside the allow-list still get a wildcard answer."""
    if 'Access-Control-Allow-Origin' not in response.headers:
        response.headers['Access-Control-Allow-Origin'] = '*'
        response.headers['Access-Control-Allow-Methods'] = ','.join(CORS_METHODS)
        response.headers['Access-Control-Allow-Headers'] = ', '.join(CORS_HEADERS)
    return response


def build_orchestrator(state: Optional[AgentState] = None) -> PrintOrchestrator:
    """Wire the USB stack against real hardware."""
    state = state or AgentState()
    resolver = PrinterResolver(state, DeviceEnumerator(), PrinterClassifier())
    return PrintOrchestrator(state, resolver, UsbTransport())


def create_app(orchestrator: Optional[PrintOrchestrator] = None) -> Flask:
    """Create the Flask app around an orchestrator (real USB stack by default)."""
    app = Flask(__name__)
    app.extensions['print_agent'] = orchestrator or build_orchestrator()

    # Registered before flask-cors so it runs after it
    app.after_request(_cors_fallback)
    CORS(
        app,
        origins=ALLOWED_ORIGINS,
        methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    app.register_blueprint(agent_bp)
    return app
