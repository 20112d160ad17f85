#!/usr/bin/env python

"""
temps - Main Entry Point

A simple time tracker: records intervals of work against projects in a
tab-separated log and prints daily, weekly and all-time summaries as well
as a timeline of a single day.

Usage:
    python main.py [COMMAND] [OPTIONS]

Requirements:
    - Python 3.11+
    - See pyproject.toml for dependencies
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from temps.ui import main


if __name__ == "__main__":
    sys.exit(main())
