#!/usr/bin/env python3
"""Claufication - Run the application.

Watches the active Claude Code session log and plays a sound when Claude
is waiting for input.

Usage:
    python run.py
    # Or: python -m claufication.app

The status API will be available at http://localhost:5050/api/status
"""

from claufication.app import main

if __name__ == "__main__":
    main()
