"""
Monitoring components for Alice Mirror
"""

from .prometheus_metrics import AliceMetricsCollector

__all__ = ["AliceMetricsCollector"]
