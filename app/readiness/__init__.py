"""Startup readiness gate for external dependencies."""

from app.readiness.gate import ReadinessGate, build_dependencies, build_readiness_gate
from app.readiness.models import (
    ConfigurationMissing,
    DependencyCheckResult,
    Healthy,
    Outcome,
    OutcomeKind,
    Unreachable,
)
from app.readiness.probes import DatabaseDependency, HttpDependency

__all__ = [
    "ConfigurationMissing",
    "DatabaseDependency",
    "DependencyCheckResult",
    "Healthy",
    "HttpDependency",
    "Outcome",
    "OutcomeKind",
    "ReadinessGate",
    "Unreachable",
    "build_dependencies",
    "build_readiness_gate",
]
