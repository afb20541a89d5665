"""Prometheus metrics for the Trade Hub backend."""

from prometheus_client import Counter, Histogram

# ---------------------------------------------------------------------------
# Snapshot persistence
# ---------------------------------------------------------------------------

trade_hub_snapshot_write_latency_seconds = Histogram(
    "trade_hub_snapshot_write_latency_seconds",
    "Latency of a full snapshot save (primary file + backup + prune)",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0],
)

trade_hub_snapshot_write_failures_total = Counter(
    "trade_hub_snapshot_write_failures_total",
    "Total snapshot writes that failed",
    ["target"],  # primary | backup
)

trade_hub_backups_pruned_total = Counter(
    "trade_hub_backups_pruned_total",
    "Total backup files removed by retention",
)

trade_hub_records_created_total = Counter(
    "trade_hub_records_created_total",
    "Total records created",
    ["entity"],
)

# ---------------------------------------------------------------------------
# Insight relay
# ---------------------------------------------------------------------------

trade_hub_relay_requests_total = Counter(
    "trade_hub_relay_requests_total",
    "Total relay deliveries by event and result source",
    ["event", "outcome"],  # outcome: remote | fallback
)

trade_hub_relay_latency_seconds = Histogram(
    "trade_hub_relay_latency_seconds",
    "Webhook round-trip latency in seconds",
    ["event"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)
