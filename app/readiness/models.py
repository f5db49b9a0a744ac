"""Outcome types produced by readiness probes.

An outcome is one of three frozen variants. A probe returns exactly one of
them; the gate never inspects status codes or response bodies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class OutcomeKind(StrEnum):
    HEALTHY = "healthy"
    UNREACHABLE = "unreachable"
    CONFIGURATION_MISSING = "configuration_missing"


@dataclass(frozen=True)
class Healthy:
    kind = OutcomeKind.HEALTHY

    @property
    def reason(self) -> None:
        return None


@dataclass(frozen=True)
class Unreachable:
    """No response was received: connect, DNS or timeout failure."""

    reason: str
    kind = OutcomeKind.UNREACHABLE


@dataclass(frozen=True)
class ConfigurationMissing:
    """A required setting for the dependency is absent."""

    reason: str
    kind = OutcomeKind.CONFIGURATION_MISSING


Outcome = Healthy | Unreachable | ConfigurationMissing

HEALTHY = Healthy()


@dataclass(frozen=True)
class DependencyCheckResult:
    """Result of probing one dependency during one attempt."""

    name: str
    outcome: Outcome
    latency_ms: float = 0.0

    @property
    def healthy(self) -> bool:
        return isinstance(self.outcome, Healthy)

    def to_dict(self) -> dict[str, str | float | bool | None]:
        return {
            "name": self.name,
            "healthy": self.healthy,
            "outcome": self.outcome.kind.value,
            "reason": self.outcome.reason,
            "latency_ms": round(self.latency_ms, 1),
        }


def all_healthy(results: list[DependencyCheckResult]) -> bool:
    """Aggregate readiness for one attempt: every dependency healthy."""
    return all(result.healthy for result in results)
