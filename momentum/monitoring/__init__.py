"""Monitoring infrastructure for the progress engine"""
from momentum.monitoring.prometheus_metrics import metrics, track_request, record_outcome

__all__ = [
    "metrics",
    "track_request",
    "record_outcome",
]
