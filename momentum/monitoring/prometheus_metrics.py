"""Prometheus metrics definitions and helpers"""
import logging
import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

from momentum.config import ENABLE_PROMETHEUS

logger = logging.getLogger(__name__)


class PrometheusMetrics:
    """Container for all Prometheus metrics"""

    def __init__(self):
        if not ENABLE_PROMETHEUS:
            logger.info("Prometheus metrics disabled")
            self._enabled = False
            return

        # HTTP Request Metrics
        self.http_requests_total = Counter(
            'http_requests_total',
            'Total HTTP requests',
            ['method', 'endpoint', 'status']
        )

        self.http_request_duration_seconds = Histogram(
            'http_request_duration_seconds',
            'HTTP request latency',
            ['method', 'endpoint'],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0]
        )

        # Gamification Metrics
        self.gamification_triggers_total = Counter(
            'gamification_triggers_total',
            'Processed gamification triggers',
            ['trigger', 'applied']
        )

        self.xp_awarded_total = Counter(
            'xp_awarded_total',
            'Total XP awarded',
            ['trigger']
        )

        self.badges_unlocked_total = Counter(
            'badges_unlocked_total',
            'Total badges unlocked',
            ['badge']
        )

        self.wins_created_total = Counter(
            'wins_created_total',
            'Wins created automatically',
            ['trigger']
        )

        self.streak_resets_total = Counter(
            'streak_resets_total',
            'Streaks broken by a missed day'
        )

        self.level_ups_total = Counter(
            'level_ups_total',
            'Total level ups'
        )

        self._enabled = True
        logger.info("Prometheus metrics initialized")

    @property
    def enabled(self) -> bool:
        """Check if metrics are enabled"""
        return self._enabled


# Global metrics instance
metrics = PrometheusMetrics()


@contextmanager
def track_request(method: str, endpoint: str):
    """Track HTTP request metrics"""
    if not metrics.enabled:
        yield
        return

    start_time = time.time()
    status_code = 500

    try:
        yield
        status_code = 200
    finally:
        duration = time.time() - start_time
        metrics.http_request_duration_seconds.labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

        metrics.http_requests_total.labels(
            method=method,
            endpoint=endpoint,
            status=status_code
        ).inc()


def record_outcome(outcome) -> None:
    """Count what a persisted GamificationOutcome did"""
    if not metrics.enabled:
        return

    metrics.gamification_triggers_total.labels(
        trigger=outcome.trigger,
        applied=str(outcome.applied).lower()
    ).inc()

    if outcome.xp_awarded:
        metrics.xp_awarded_total.labels(trigger=outcome.trigger).inc(outcome.xp_awarded)

    for badge_id in outcome.badges_unlocked:
        metrics.badges_unlocked_total.labels(badge=badge_id).inc()

    if outcome.wins_created:
        metrics.wins_created_total.labels(trigger=outcome.trigger).inc(len(outcome.wins_created))

    if outcome.streak is not None and outcome.streak.reset:
        metrics.streak_resets_total.inc()

    if outcome.level_change.leveled_up:
        metrics.level_ups_total.inc()
