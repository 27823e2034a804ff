from __future__ import annotations

import threading
from collections import defaultdict

HISTOGRAM_BUCKETS_MS: tuple[float, ...] = (5, 10, 25, 50, 100, 250, 500, 1000, 2000, 5000)


def _sanitize_label(value: str) -> str:
    return value.replace('"', "'").replace("\\", "\\\\")


def _bucket_boundaries() -> tuple[float, ...]:
    return HISTOGRAM_BUCKETS_MS + (float("inf"),)


def _le(bucket: float) -> str:
    return "+Inf" if bucket == float("inf") else f"{int(bucket)}"


def _labels(**values: str) -> str:
    return ",".join(f'{key}="{_sanitize_label(value)}"' for key, value in values.items())


class MetricsRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._http_totals: dict[tuple[str, str, int], int] = defaultdict(int)
        self._http_sum_ms: dict[tuple[str, str], float] = defaultdict(float)
        self._http_buckets: dict[tuple[str, str], dict[float, int]] = defaultdict(lambda: defaultdict(int))

        self._db_totals: dict[str, int] = defaultdict(int)
        self._db_errors: dict[str, int] = defaultdict(int)
        self._db_sum_ms: dict[str, float] = defaultdict(float)
        self._db_buckets: dict[str, dict[float, int]] = defaultdict(lambda: defaultdict(int))

        self._clamps = 0

    def observe_http(self, path: str, method: str, status: int, duration_ms: float) -> None:
        with self._lock:
            route_key = (path, method.upper())
            self._http_totals[(path, method.upper(), status)] += 1
            self._http_sum_ms[route_key] += duration_ms
            for bucket in _bucket_boundaries():
                if duration_ms <= bucket:
                    self._http_buckets[route_key][bucket] += 1

    def observe_db(self, operation: str, duration_ms: float, *, failed: bool = False) -> None:
        op = operation.lower().strip() or "unknown"
        with self._lock:
            self._db_totals[op] += 1
            if failed:
                self._db_errors[op] += 1
            self._db_sum_ms[op] += duration_ms
            for bucket in _bucket_boundaries():
                if duration_ms <= bucket:
                    self._db_buckets[op][bucket] += 1

    def observe_clamp(self) -> None:
        with self._lock:
            self._clamps += 1

    def render_prometheus(self) -> str:
        lines: list[str] = []
        with self._lock:
            lines.extend(
                [
                    "# HELP dt_http_request_total Total HTTP requests by path/method/status",
                    "# TYPE dt_http_request_total counter",
                ]
            )
            if not self._http_totals:
                lines.append('dt_http_request_total{path="none",method="none",status="0"} 0')
            for (path, method, status), count in sorted(self._http_totals.items()):
                lines.append(f"dt_http_request_total{{{_labels(path=path, method=method, status=str(status))}}} {count}")

            lines.extend(
                [
                    "# HELP dt_http_request_duration_ms HTTP request latency histogram",
                    "# TYPE dt_http_request_duration_ms histogram",
                ]
            )
            for (path, method), sum_ms in sorted(self._http_sum_ms.items()):
                labels = _labels(path=path, method=method)
                bucket_counts = self._http_buckets[(path, method)]
                for bucket in _bucket_boundaries():
                    lines.append(
                        f'dt_http_request_duration_ms_bucket{{{labels},le="{_le(bucket)}"}} {bucket_counts.get(bucket, 0)}'
                    )
                lines.append(f"dt_http_request_duration_ms_count{{{labels}}} {bucket_counts.get(float('inf'), 0)}")
                lines.append(f"dt_http_request_duration_ms_sum{{{labels}}} {sum_ms:.6f}")

            lines.extend(
                [
                    "# HELP dt_db_operation_total Total entity store operations by operation type",
                    "# TYPE dt_db_operation_total counter",
                ]
            )
            if not self._db_totals:
                lines.append('dt_db_operation_total{operation="none"} 0')
            for operation, count in sorted(self._db_totals.items()):
                lines.append(f"dt_db_operation_total{{{_labels(operation=operation)}}} {count}")

            lines.extend(
                [
                    "# HELP dt_db_operation_errors_total Failed entity store operations by operation type",
                    "# TYPE dt_db_operation_errors_total counter",
                ]
            )
            for operation, count in sorted(self._db_errors.items()):
                lines.append(f"dt_db_operation_errors_total{{{_labels(operation=operation)}}} {count}")

            lines.extend(
                [
                    "# HELP dt_db_operation_duration_ms Entity store operation latency histogram",
                    "# TYPE dt_db_operation_duration_ms histogram",
                ]
            )
            for operation, sum_ms in sorted(self._db_sum_ms.items()):
                labels = _labels(operation=operation)
                bucket_counts = self._db_buckets[operation]
                for bucket in _bucket_boundaries():
                    lines.append(
                        f'dt_db_operation_duration_ms_bucket{{{labels},le="{_le(bucket)}"}} {bucket_counts.get(bucket, 0)}'
                    )
                lines.append(f"dt_db_operation_duration_ms_count{{{labels}}} {bucket_counts.get(float('inf'), 0)}")
                lines.append(f"dt_db_operation_duration_ms_sum{{{labels}}} {sum_ms:.6f}")

            lines.extend(
                [
                    "# HELP dt_aggregate_clamp_total Aggregate updates clamped back to the project goal",
                    "# TYPE dt_aggregate_clamp_total counter",
                    f"dt_aggregate_clamp_total {self._clamps}",
                ]
            )

        return "\n".join(lines) + "\n"


METRICS = MetricsRegistry()
