#!/usr/bin/env python3
"""Entry point for the job board command line."""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from jobboard.cli import main

if __name__ == "__main__":
    sys.exit(main())
