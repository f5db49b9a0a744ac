"""
Database setup commands.

Usage:
    db-init          # Apply db/migrations to the database named by DB_*
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

_SCRIPTS_DIR = Path(__file__).parent.parent / "scripts"
_SETUP_DB_SCRIPT = _SCRIPTS_DIR / "setup_database.py"


def db_init() -> None:
    """Apply all SQL migrations."""
    sys.exit(subprocess.run([sys.executable, str(_SETUP_DB_SCRIPT)], check=False).returncode)
