from __future__ import annotations

from dataclasses import dataclass
from threading import Lock


@dataclass
class EndpointMetric:
    total_requests: int = 0
    total_duration_ms: float = 0.0
    error_count: int = 0

    def record(self, status_code: int, duration_ms: float) -> None:
        self.total_requests += 1
        self.total_duration_ms += duration_ms
        if status_code >= 400:
            self.error_count += 1

    @property
    def avg_duration_ms(self) -> float:
        return self.total_duration_ms / self.total_requests if self.total_requests else 0.0


class InMemoryRequestMetrics:
    def __init__(self) -> None:
        self._metrics: dict[tuple[str, str], EndpointMetric] = {}
        self._group_metrics: dict[str, EndpointMetric] = {}
        self._lock = Lock()

    def observe(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        duration_ms: float,
        group_id: str | None = None,
    ) -> None:
        with self._lock:
            self._metrics.setdefault((endpoint, method), EndpointMetric()).record(status_code, duration_ms)
            if group_id:
                self._group_metrics.setdefault(group_id, EndpointMetric()).record(status_code, duration_ms)

    def snapshot(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            return {
                f"{method} {endpoint}": {
                    "total_requests": metric.total_requests,
                    "total_duration_ms": round(metric.total_duration_ms, 2),
                    "avg_duration_ms": round(metric.avg_duration_ms, 2),
                    "error_count": metric.error_count,
                }
                for (endpoint, method), metric in self._metrics.items()
            }

    def snapshot_for_group(self, group_id: str) -> dict[str, float | int]:
        with self._lock:
            metric = self._group_metrics.get(group_id) or EndpointMetric()
            return {
                "total_requests": metric.total_requests,
                "error_count": metric.error_count,
                "avg_duration_ms": round(metric.avg_duration_ms, 2),
            }

    def reset(self) -> None:
        with self._lock:
            self._metrics.clear()
            self._group_metrics.clear()


request_metrics = InMemoryRequestMetrics()
