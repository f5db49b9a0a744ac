"""Wall-clock access, patched in tests that need a fixed time."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)
