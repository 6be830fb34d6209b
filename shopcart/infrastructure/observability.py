from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from time import perf_counter


@dataclass(frozen=True)
class RequestTimer:
    started_at: float

    @staticmethod
    def start() -> "RequestTimer":
        return RequestTimer(started_at=perf_counter())

    def elapsed_ms(self) -> float:
        return max(0.0, (perf_counter() - self.started_at) * 1000.0)


@dataclass
class _Duration:
    sum_ms: float = 0.0
    count: int = 0

    def observe(self, duration_ms: float) -> None:
        self.sum_ms += duration_ms
        self.count += 1


def _labels(**pairs: str) -> str:
    return ",".join(f'{name}="{value}"' for name, value in pairs.items())


class MetricsCollector:
    """Request and cart-mutation counters rendered in the Prometheus text format."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._http_requests: dict[tuple[str, str, int], int] = {}
        self._http_durations: dict[str, _Duration] = {}
        self._mutations: dict[tuple[str, str], int] = {}
        self._mutation_durations: dict[str, _Duration] = {}

    def record_http(
        self,
        *,
        method: str,
        path_group: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        key = (method.upper(), path_group, status_code)
        with self._lock:
            self._http_requests[key] = self._http_requests.get(key, 0) + 1
            self._http_durations.setdefault(path_group, _Duration()).observe(duration_ms)

    def record_cart_mutation(self, *, operation: str, outcome: str, duration_ms: float) -> None:
        key = (operation, outcome)
        with self._lock:
            self._mutations[key] = self._mutations.get(key, 0) + 1
            self._mutation_durations.setdefault(operation, _Duration()).observe(duration_ms)

    def cart_mutation_count(self, *, operation: str, outcome: str) -> int:
        with self._lock:
            return self._mutations.get((operation, outcome), 0)

    def render_prometheus(self) -> str:
        with self._lock:
            lines = [
                "# HELP shopcart_http_requests_total HTTP requests by method, path group and status.",
                "# TYPE shopcart_http_requests_total counter",
            ]
            for (method, path_group, status), count in sorted(self._http_requests.items()):
                labels = _labels(method=method, path_group=path_group, status=str(status))
                lines.append(f"shopcart_http_requests_total{{{labels}}} {count}")
            lines += self._summary(
                "shopcart_http_request_duration_ms",
                "HTTP request latency in milliseconds.",
                "path_group",
                self._http_durations,
            )

            lines += [
                "# HELP shopcart_cart_mutations_total Cart mutations by operation and outcome.",
                "# TYPE shopcart_cart_mutations_total counter",
            ]
            for (operation, outcome), count in sorted(self._mutations.items()):
                labels = _labels(operation=operation, outcome=outcome)
                lines.append(f"shopcart_cart_mutations_total{{{labels}}} {count}")
            lines += self._summary(
                "shopcart_cart_mutation_duration_ms",
                "Cart mutation latency in milliseconds.",
                "operation",
                self._mutation_durations,
            )
            return "\n".join(lines) + "\n"

    @staticmethod
    def _summary(name: str, help_text: str, label: str, series: dict[str, _Duration]) -> list[str]:
        lines = [f"# HELP {name} {help_text}", f"# TYPE {name} summary"]
        for value, duration in sorted(series.items()):
            labels = _labels(**{label: str(value)})
            lines.append(f"{name}_sum{{{labels}}} {duration.sum_ms:.4f}")
            lines.append(f"{name}_count{{{labels}}} {duration.count}")
        return lines
