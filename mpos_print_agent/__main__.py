"""
MPOS Print Agent - Command Line Entry Point

Run: python -m mpos_print_agent
"""

import logging

from . import __version__
from .config import DEBUG, HOST, LOG_DIR, LOG_LEVEL, LOG_TO_FILE, PORT
from .logging_config import setup_logging


def main():
    """Run the agent."""
    setup_logging(
        log_level=getattr(logging, LOG_LEVEL, logging.INFO),
        log_dir=LOG_DIR,
        enable_file_logging=LOG_TO_FILE,
    )

    from .app import create_app
    app = create_app()

    print("=" * 60)
    print("  MPOS Print Agent")
    print("=" * 60)
    print(f"  Version: {__version__}")
    print(f"  Listening: http://{HOST}:{PORT}")
    print("=" * 60)
    print("  API Endpoints:")
    print("    GET  /agent/status                    - Agent enabled flag")
    print("    POST /agent/on | /agent/off           - Enable / disable printing")
    print("    GET  /printer/default                 - Default printer")
    print("    POST /printer/default                 - Set default {vendorId, productId}")
    print("    GET  /printers                        - List USB devices")
    print("    GET  /print-test                      - Print test ticket")
    print("    POST /print-sale                      - Print sale receipt")
    print("    GET  /jobs                            - Recent print attempts")
    print("    GET  /health                          - Health check")
    print("=" * 60)

    app.run(host=HOST, port=PORT, debug=DEBUG, threaded=True)


if __name__ == '__main__':
    main()
