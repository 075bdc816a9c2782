# -*- coding: utf-8 -*-
"""
Entry point for running Handwrite Rows as a module.

Usage:
    python -m handwrite_rows
"""

import sys
from .app import main

if __name__ == "__main__":
    sys.exit(main())
