"""In-process counters and timings for the complaint service."""
from collections import defaultdict
from typing import Any, Dict, List, Optional
import time

DEFAULT_PERIOD_MINUTES = 60


class MetricsCollector:
    """Counters, gauges and timings kept as bounded time series."""

    def __init__(self, service_name: str, max_datapoints: int = 1000):
        self.service_name = service_name
        self.series: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.counters: Dict[str, int] = defaultdict(int)
        self.gauges: Dict[str, float] = {}
        self.max_datapoints = max_datapoints

    def increment(self, name: str, value: int = 1):
        self.counters[name] += value
        self._record(name, value, "counter")

    def gauge(self, name: str, value: float):
        self.gauges[name] = value
        self._record(name, value, "gauge")

    def timing(self, name: str, duration_ms: float):
        self._record(name, duration_ms, "timing")

    def _record(self, name: str, value: float, kind: str):
        points = self.series[name]
        points.append({"timestamp": time.time(), "value": value, "type": kind})
        if len(points) > self.max_datapoints:
            del points[:-self.max_datapoints]

    def since(self, name: str, period_minutes: int = DEFAULT_PERIOD_MINUTES) -> List[Dict[str, Any]]:
        cutoff = time.time() - period_minutes * 60
        return [p for p in self.series.get(name, []) if p["timestamp"] >= cutoff]

    def get_all_metrics(self, time_period_minutes: Optional[int] = None) -> Dict[str, Any]:
        """Snapshot for the /metrics endpoint."""
        period = DEFAULT_PERIOD_MINUTES if time_period_minutes is None else time_period_minutes
        return {
            "service": self.service_name,
            "timestamp": time.time(),
            "counters": dict(self.counters),
            "gauges": dict(self.gauges),
            "time_series": {name: self.since(name, period) for name in self.series},
        }
