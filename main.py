#!/usr/bin/env python
"""
MPOS Print Agent - Standalone Entry Point

Run directly:
    python main.py

Or with environment variables:
    MPOS_AGENT_PORT=3301 python main.py
"""

import os
import sys

# Ensure package is importable when running directly
if __name__ == '__main__':
    repo_dir = os.path.dirname(os.path.abspath(__file__))
    if repo_dir not in sys.path:
        sys.path.insert(0, repo_dir)

from mpos_print_agent.__main__ import main


if __name__ == '__main__':
    main()
