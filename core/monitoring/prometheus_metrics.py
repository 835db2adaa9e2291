"""
Prometheus metrics for the Alice Blue integration.

Counts every outbound attempt and retry, session exchanges by outcome,
and trade reads split by live vs sample-data source so operators can
see when a deployment is serving fallback data.
"""

from prometheus_client import Counter, CollectorRegistry
from typing import Optional


class AliceMetricsCollector:
    """Counters for broker calls, registered on an injectable registry"""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.fetch_attempts = Counter(
            'alice_fetch_attempts_total',
            'Outbound HTTP attempts to the broker',
            ['method', 'outcome'],
            registry=self.registry
        )

        self.fetch_retries = Counter(
            'alice_fetch_retries_total',
            'Retries scheduled after a failed broker call',
            ['method'],
            registry=self.registry
        )

        self.session_exchanges = Counter(
            'alice_session_exchanges_total',
            'SID credential exchanges by outcome',
            ['outcome'],
            registry=self.registry
        )

        self.trade_reads = Counter(
            'alice_trade_reads_total',
            'Master trade reads by data source',
            ['source'],
            registry=self.registry
        )

    def record_attempt(self, method: str, outcome: str) -> None:
        self.fetch_attempts.labels(method=method, outcome=outcome).inc()

    def record_retry(self, method: str) -> None:
        self.fetch_retries.labels(method=method).inc()

    def record_session_exchange(self, outcome: str) -> None:
        self.session_exchanges.labels(outcome=outcome).inc()

    def record_trade_read(self, source: str) -> None:
        self.trade_reads.labels(source=source).inc()
