"""Unit tests for readiness outcome types."""

import dataclasses

import pytest

from app.readiness.models import (
    HEALTHY,
    ConfigurationMissing,
    DependencyCheckResult,
    Healthy,
    OutcomeKind,
    Unreachable,
    all_healthy,
)


def test_outcome_kinds():
    assert HEALTHY.kind == OutcomeKind.HEALTHY
    assert Unreachable("down").kind == OutcomeKind.UNREACHABLE
    assert ConfigurationMissing("unset").kind == OutcomeKind.CONFIGURATION_MISSING


def test_healthy_has_no_reason():
    assert Healthy().reason is None
    assert Healthy() == HEALTHY


def test_outcomes_are_frozen():
    outcome = Unreachable("down")
    with pytest.raises(dataclasses.FrozenInstanceError):
        outcome.reason = "up"  # type: ignore[misc]


def test_result_healthy_only_for_healthy_outcome():
    assert DependencyCheckResult("database", HEALTHY).healthy is True
    assert DependencyCheckResult("database", Unreachable("x")).healthy is False
    assert DependencyCheckResult("database", ConfigurationMissing("x")).healthy is False


def test_result_to_dict():
    result = DependencyCheckResult(
        "identity-service", Unreachable("identity-service unreachable: refused"), latency_ms=12.345
    )
    assert result.to_dict() == {
        "name": "identity-service",
        "healthy": False,
        "outcome": "unreachable",
        "reason": "identity-service unreachable: refused",
        "latency_ms": 12.3,
    }


def test_all_healthy_is_logical_and():
    healthy = DependencyCheckResult("a", HEALTHY)
    missing = DependencyCheckResult("b", ConfigurationMissing("B_URL not configured"))
    assert all_healthy([healthy, healthy]) is True
    assert all_healthy([healthy, missing]) is False
