"""Code quality commands."""

import subprocess
import sys

_PATHS = ["app/", "cli/", "scripts/", "tests/"]


def _ruff(*args: str) -> int:
    return subprocess.run([sys.executable, "-m", "ruff", *args, *_PATHS], check=False).returncode


def main() -> None:
    """Run ruff lint and format checks."""
    sys.exit(_ruff("check") or _ruff("format", "--check"))


def format_code() -> None:
    """Apply ruff fixes and formatting."""
    sys.exit(_ruff("check", "--fix") or _ruff("format"))
