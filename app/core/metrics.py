"""Prometheus metrics for the Hackathon Core service."""

from prometheus_client import Counter, Histogram

# ---------------------------------------------------------------------------
# Startup readiness gate
# ---------------------------------------------------------------------------

hackathon_core_readiness_probe_total = Counter(
    "hackathon_core_readiness_probe_total",
    "Readiness probes by dependency and outcome",
    ["dependency", "outcome"],  # healthy | unreachable | configuration_missing
)

hackathon_core_readiness_probe_latency_seconds = Histogram(
    "hackathon_core_readiness_probe_latency_seconds",
    "Latency of a single readiness probe in seconds",
    ["dependency"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

hackathon_core_readiness_attempts_total = Counter(
    "hackathon_core_readiness_attempts_total",
    "Readiness attempts (one full round of probes)",
    ["result"],  # ready | not_ready
)

# ---------------------------------------------------------------------------
# External dependencies
# ---------------------------------------------------------------------------

hackathon_core_dependency_requests_total = Counter(
    "hackathon_core_dependency_requests_total",
    "Outbound requests to sibling services",
    ["dependency", "status_code"],
)

hackathon_core_dependency_failures_total = Counter(
    "hackathon_core_dependency_failures_total",
    "Total external dependency failures",
    ["dependency"],
)

hackathon_core_db_query_latency_seconds = Histogram(
    "hackathon_core_db_query_latency_seconds",
    "Database query latency in seconds",
    ["query_name"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0],
)

hackathon_core_db_query_failures_total = Counter(
    "hackathon_core_db_query_failures_total",
    "Total database query failures",
    ["query_name"],
)
