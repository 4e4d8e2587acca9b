"""
Relay Metrics

Prometheus counters for the fetch-cache-evict flow, kept in a dedicated
registry so the exposition only contains relay series.
"""

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

registry = CollectorRegistry()

resolve_requests_total = Counter(
    "tts_relay_resolve_requests_total",
    "Resolve calls by outcome",
    ["outcome"],  # hit, miss, shared, invalid, error
    registry=registry,
)

upstream_fetches_total = Counter(
    "tts_relay_upstream_fetches_total",
    "Upstream TTS fetches by outcome",
    ["outcome"],  # success, http_error, transport_error, storage_error
    registry=registry,
)

evictions_total = Counter(
    "tts_relay_evictions_total",
    "Cache evictions by outcome",
    ["outcome"],  # removed, missing, failed
    registry=registry,
)

pending_evictions = Gauge(
    "tts_relay_pending_evictions",
    "Eviction timers currently scheduled",
    registry=registry,
)


def render_latest() -> bytes:
    """Prometheus text exposition of the relay registry."""
    return generate_latest(registry)
