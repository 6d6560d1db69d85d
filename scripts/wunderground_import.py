#!/usr/bin/env python3
"""CLI wrapper for the Weather Underground importer.

Usage:
    python scripts/wunderground_import.py --station-id KCASANFR123 --start-date 2024-01-01

For full options:
    python scripts/wunderground_import.py --help
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from wuimport.cli import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
