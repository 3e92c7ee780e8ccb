"""Prometheus metrics for ingestion, retrieval and completion."""

from prometheus_client import Counter, Histogram

documents_ingested_total = Counter(
    "documents_ingested_total",
    "Uploaded files processed, by outcome",
    ["status"],
)

standardization_fallbacks_total = Counter(
    "standardization_fallbacks_total",
    "Standardizations that fell back to the truncated mock document",
    ["reason"],
)

completion_latency_ms = Histogram(
    "completion_latency_ms",
    "Chat completion latency in milliseconds",
    ["provider", "outcome"],
    buckets=[10, 50, 100, 250, 500, 1000, 2000, 4000, 8000, 16000, 32000],
)

retrieval_sources = Histogram(
    "retrieval_sources",
    "Number of sources returned per retrieval",
    buckets=[0, 1, 2, 4, 6, 8],
)


class PrometheusPipelineMetrics:
    """Prometheus-based pipeline metrics implementation."""

    def inc_ingested(self, status: str) -> None:
        """Count one processed upload."""
        documents_ingested_total.labels(status=status).inc()

    def inc_fallback(self, reason: str) -> None:
        """Count one standardization fallback."""
        standardization_fallbacks_total.labels(reason=reason).inc()

    def record_completion(self, provider: str, outcome: str, latency_ms: float) -> None:
        """Record completion latency."""
        completion_latency_ms.labels(provider=provider, outcome=outcome).observe(latency_ms)

    def record_sources(self, count: int) -> None:
        """Record how many sources a retrieval returned."""
        retrieval_sources.observe(count)
