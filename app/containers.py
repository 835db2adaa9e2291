# Dependency injection container for the API and CLI
from dependency_injector import containers, providers
from prometheus_client import CollectorRegistry

from core.config.settings import Settings
from core.monitoring.prometheus_metrics import AliceMetricsCollector
from services.alice.fetcher import ResilientFetcher
from services.alice.models import RetryPolicy
from services.alice.service import AliceService


class AppContainer(containers.DeclarativeContainer):
    """Application dependency injection container"""

    # Configuration
    settings = providers.Singleton(Settings)

    # --- Observability: Prometheus ---
    # Shared registry used by the API /metrics endpoint and the collector
    prometheus_registry = providers.Singleton(CollectorRegistry)
    alice_metrics = providers.Singleton(
        AliceMetricsCollector,
        registry=prometheus_registry,
    )

    # --- Broker integration ---
    retry_policy = providers.Singleton(
        RetryPolicy.from_settings,
        settings.provided.alice.retry,
    )

    # Stateless: opens a fresh HTTP client per request
    http_fetcher = providers.Singleton(
        ResilientFetcher,
        timeout=settings.provided.alice.request_timeout_seconds,
        policy=retry_policy,
        metrics=alice_metrics,
    )

    alice_service = providers.Singleton(
        AliceService,
        settings=settings,
        fetcher=http_fetcher,
        metrics=alice_metrics,
    )
