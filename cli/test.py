"""Test runner commands; suites are selected by directory marker."""

import subprocess
import sys


def _pytest(*args: str) -> int:
    return subprocess.run(
        [sys.executable, "-m", "pytest", *args, "-v", "--tb=short"],
        check=False,
    ).returncode


def main() -> None:
    """Run unit tests."""
    sys.exit(_pytest("-m", "unit"))


def test_smoke() -> None:
    sys.exit(_pytest("-m", "smoke"))


def test_all() -> None:
    sys.exit(_pytest("tests/"))
