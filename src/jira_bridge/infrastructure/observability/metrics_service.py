"""Prometheus metrics declarations for jira-bridge.

Labels use ONLY static enumerations, never issue keys or board ids.
"""

from prometheus_client import Counter

JIRA_API_CALLS_TOTAL = Counter(
    "jira_bridge_api_calls_total",
    "Total Jira REST calls",
    ["operation", "outcome"],
)

DEGRADED_FETCHES_TOTAL = Counter(
    "jira_bridge_degraded_fetches_total",
    "Optional metadata fetches that failed and were skipped",
    ["source"],
)


def record_degraded_fetch(source: str, exc: BaseException) -> None:  # noqa: ARG001
    DEGRADED_FETCHES_TOTAL.labels(source=source).inc()
