"""Metrics collection for the request orchestrator."""

from dataclasses import dataclass, field
from typing import ClassVar

from src.client.models import RequestErrorClass


@dataclass
class RequestMetrics:
    """Metrics for orchestrated HTTP requests.

    Singleton class that tracks request counts by final status,
    authentication challenges, resends, failures and received bytes.
    """

    http_requests_total: dict[int, int] = field(default_factory=dict)
    http_auth_challenges_total: dict[int, int] = field(default_factory=dict)
    http_resend_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_bytes_total: int = 0
    http_duration_ms_total: float = 0.0
    http_request_count: int = 0

    _instance: ClassVar["RequestMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RequestMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(
        self, status_code: int, bytes_received: int, duration_ms: float
    ) -> None:
        """Record a completed request.

        Args:
            status_code: Final HTTP status code (0 if none was received).
            bytes_received: Size of the final body.
            duration_ms: Wall time of the whole exchange.
        """
        self.http_requests_total[status_code] = (
            self.http_requests_total.get(status_code, 0) + 1
        )
        self.http_bytes_total += bytes_received
        self.http_duration_ms_total += duration_ms
        self.http_request_count += 1

    def record_auth_challenge(self, status_code: int) -> None:
        """Record a 401 or 407 challenge round."""
        self.http_auth_challenges_total[status_code] = (
            self.http_auth_challenges_total.get(status_code, 0) + 1
        )

    def record_resend(self) -> None:
        """Record a transport resend signal."""
        self.http_resend_total += 1

    def record_failure(self, error_class: RequestErrorClass) -> None:
        """Record a failed request.

        Args:
            error_class: Classification of the failure.
        """
        key = error_class.value
        self.http_failures_total[key] = self.http_failures_total.get(key, 0) + 1

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "http_requests_total": dict(self.http_requests_total),
            "http_auth_challenges_total": dict(self.http_auth_challenges_total),
            "http_resend_total": self.http_resend_total,
            "http_failures_total": dict(self.http_failures_total),
            "http_bytes_total": self.http_bytes_total,
            "http_duration_ms_total": self.http_duration_ms_total,
            "http_request_count": self.http_request_count,
        }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average request duration.

        Returns:
            Average duration in milliseconds.
        """
        if self.http_request_count == 0:
            return 0.0
        return self.http_duration_ms_total / self.http_request_count
