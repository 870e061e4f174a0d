#!/usr/bin/env python3
"""Print the detected host platform.

Usage:
    python run.py [config.yaml] [--json] [--installation] [--debug] [--trace] [--verbose]
"""
import sys

from hostinfo.main import main

if __name__ == "__main__":
    sys.exit(main())
