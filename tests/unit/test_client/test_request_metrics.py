"""Unit tests for request metrics."""

from src.client.metrics import RequestMetrics
from src.client.models import RequestErrorClass


class TestRequestMetrics:
    """Tests for RequestMetrics class."""

    def setup_method(self) -> None:
        """Reset metrics before each test."""
        RequestMetrics.reset()

    def test_singleton_pattern(self) -> None:
        """Test that get_instance returns the same instance."""
        assert RequestMetrics.get_instance() is RequestMetrics.get_instance()

    def test_reset_creates_new_instance(self) -> None:
        """Test that reset creates a new instance."""
        instance1 = RequestMetrics.get_instance()
        RequestMetrics.reset()

        assert RequestMetrics.get_instance() is not instance1

    def test_record_request(self) -> None:
        """Requests are counted by status with bytes and duration."""
        metrics = RequestMetrics.get_instance()

        metrics.record_request(200, 100, 10.0)
        metrics.record_request(200, 50, 30.0)
        metrics.record_request(404, 0, 5.0)

        assert metrics.http_requests_total == {200: 2, 404: 1}
        assert metrics.http_bytes_total == 150
        assert metrics.avg_duration_ms == 15.0

    def test_avg_duration_without_requests(self) -> None:
        """Average duration is zero before any request."""
        assert RequestMetrics.get_instance().avg_duration_ms == 0.0

    def test_record_auth_challenge_and_resend(self) -> None:
        """Challenges are counted by status and resends in total."""
        metrics = RequestMetrics.get_instance()

        metrics.record_auth_challenge(401)
        metrics.record_auth_challenge(407)
        metrics.record_auth_challenge(401)
        metrics.record_resend()

        assert metrics.http_auth_challenges_total == {401: 2, 407: 1}
        assert metrics.http_resend_total == 1

    def test_record_failure(self) -> None:
        """Failures are counted by error class value."""
        metrics = RequestMetrics.get_instance()

        metrics.record_failure(RequestErrorClass.SETUP)
        metrics.record_failure(RequestErrorClass.SETUP)

        assert metrics.http_failures_total == {"SETUP": 2}

    def test_to_dict(self) -> None:
        """All metrics are exported."""
        metrics = RequestMetrics.get_instance()
        metrics.record_request(200, 1, 1.0)

        result = metrics.to_dict()

        assert result["http_requests_total"] == {200: 1}
        assert result["http_request_count"] == 1
        assert result["http_resend_total"] == 0
