"""Tests for monitoring infrastructure"""
import pytest
from datetime import datetime, timezone
from prometheus_client import REGISTRY

from momentum.gamification.engine import decide_action_completion
from momentum.gamification.streak_system import DayBoundary
from momentum.models.progress import AggregateSnapshot, ProgressState
from momentum.monitoring import metrics, record_outcome, track_request

pytestmark = pytest.mark.skipif(not metrics.enabled, reason="Prometheus metrics disabled")


def sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestPrometheusMetrics:
    """Test Prometheus metrics tracking"""

    def test_track_request_counts_success(self):
        """Test request tracking context manager"""
        labels = {"method": "GET", "endpoint": "/api/test", "status": "200"}
        before = sample("http_requests_total", labels)

        with track_request("GET", "/api/test"):
            pass

        assert sample("http_requests_total", labels) == before + 1

    def test_track_request_counts_failure_as_500(self):
        labels = {"method": "POST", "endpoint": "/api/fail", "status": "500"}
        before = sample("http_requests_total", labels)

        with pytest.raises(RuntimeError):
            with track_request("POST", "/api/fail"):
                raise RuntimeError("boom")

        assert sample("http_requests_total", labels) == before + 1

    def test_record_outcome(self):
        """Test outcome counters"""
        outcome = decide_action_completion(
            ProgressState(user_id="metrics-user"),
            AggregateSnapshot(),
            datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc),
            DayBoundary("UTC")
        )
        trigger_labels = {"trigger": outcome.trigger, "applied": "true"}
        xp_labels = {"trigger": outcome.trigger}
        badge_labels = {"badge": "firstStep"}

        triggers_before = sample("gamification_triggers_total", trigger_labels)
        xp_before = sample("xp_awarded_total", xp_labels)
        badges_before = sample("badges_unlocked_total", badge_labels)

        record_outcome(outcome)

        assert sample("gamification_triggers_total", trigger_labels) == triggers_before + 1
        assert sample("xp_awarded_total", xp_labels) == xp_before + outcome.xp_awarded
        assert sample("badges_unlocked_total", badge_labels) == badges_before + 1
