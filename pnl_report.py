#!/usr/bin/env python3
"""Liquor store P&L reports from the POS database.

Runs the package CLI without installing it first.

Usage:
    python pnl_report.py pnl 2024-01-01 2024-01-31 --database inventory.db
    python pnl_report.py breakdown 2024-01-01 2024-12-31 -o reports/2024.xlsx

For all subcommands:
    python pnl_report.py --help
"""

import sys
from pathlib import Path

# Add src to path for development installs
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from pos_pnl.cli import main

if __name__ == "__main__":
    sys.exit(main())
