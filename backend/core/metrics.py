"""
Application metrics for monitoring and observability.

Provides thread-safe metrics collection for:
- Remote procedure call counters
- Chat stream counters
- Export counters
- Latency tracking per procedure

Usage:
    from backend.core.metrics import metrics

    # Increment counters
    metrics.increment('rpc_calls_total')

    # Record latency
    metrics.record_latency('list_blocked_users', 150.5)

    # Get all metrics
    data = metrics.to_dict()
"""
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from threading import Lock


@dataclass
class Metrics:
    """Thread-safe application metrics."""

    _lock: Lock = field(default_factory=Lock, repr=False)

    # Counters
    rpc_calls_total: int = 0
    rpc_calls_failed: int = 0
    chat_requests: int = 0
    chat_failures: int = 0
    exports_generated: int = 0
    admin_denied: int = 0
    rate_limit_exceeded: int = 0

    # Gauges (current values)
    active_chat_streams: int = 0

    # Histograms (simplified - store recent samples)
    api_latencies: Dict[str, List[float]] = field(default_factory=dict)
    _max_latency_samples: int = field(default=1000, repr=False)

    # Start time for uptime calculation
    _start_time: float = field(default_factory=time.time, repr=False)

    def increment(self, metric: str, value: int = 1) -> None:
        """Increment a counter metric.

        Args:
            metric: Name of the metric to increment
            value: Amount to increment by (default 1)
        """
        with self._lock:
            current = getattr(self, metric, 0)
            setattr(self, metric, current + value)

    def decrement(self, metric: str, value: int = 1) -> None:
        """Decrement a gauge metric.

        Args:
            metric: Name of the metric to decrement
            value: Amount to decrement by (default 1)
        """
        with self._lock:
            current = getattr(self, metric, 0)
            setattr(self, metric, max(0, current - value))

    def record_latency(self, api: str, latency_ms: float) -> None:
        """Record a call latency.

        Args:
            api: Procedure or upstream name (e.g., 'list_blocked_users', 'gemini')
            latency_ms: Latency in milliseconds
        """
        with self._lock:
            if api not in self.api_latencies:
                self.api_latencies[api] = []
            self.api_latencies[api].append(latency_ms)
            # Keep only recent samples to prevent memory growth
            if len(self.api_latencies[api]) > self._max_latency_samples:
                self.api_latencies[api] = self.api_latencies[api][-self._max_latency_samples:]

    def get_latency_stats(self, api: str) -> Dict[str, Optional[float]]:
        """Get latency statistics for a procedure.

        Returns:
            Dict with count, min, max, avg, p50, p95 latencies
        """
        with self._lock:
            samples = self.api_latencies.get(api, [])

            if not samples:
                return {
                    'count': 0,
                    'min': None,
                    'max': None,
                    'avg': None,
                    'p50': None,
                    'p95': None,
                }

            sorted_samples = sorted(samples)
            count = len(sorted_samples)

            return {
                'count': count,
                'min': sorted_samples[0],
                'max': sorted_samples[-1],
                'avg': sum(sorted_samples) / count,
                'p50': sorted_samples[int(count * 0.5)],
                'p95': sorted_samples[int(count * 0.95)] if count >= 20 else sorted_samples[-1],
            }

    @property
    def uptime_seconds(self) -> float:
        """Get application uptime in seconds."""
        return time.time() - self._start_time

    @property
    def rpc_success_rate(self) -> float:
        """Calculate RPC success rate (0.0 to 1.0)."""
        if self.rpc_calls_total == 0:
            return 1.0
        return (self.rpc_calls_total - self.rpc_calls_failed) / self.rpc_calls_total

    def to_dict(self) -> dict:
        """Export all metrics as a dictionary."""
        with self._lock:
            snapshot = {
                'rpc_calls_total': self.rpc_calls_total,
                'rpc_calls_failed': self.rpc_calls_failed,
                'chat_requests': self.chat_requests,
                'chat_failures': self.chat_failures,
                'exports_generated': self.exports_generated,
                'admin_denied': self.admin_denied,
                'rate_limit_exceeded': self.rate_limit_exceeded,
                'active_chat_streams': self.active_chat_streams,
                'rpc_success_rate': self.rpc_success_rate,
                'uptime_seconds': self.uptime_seconds,
            }
            names = list(self.api_latencies.keys())

        # get_latency_stats takes the lock itself
        snapshot['latencies'] = {name: self.get_latency_stats(name) for name in names}
        return snapshot

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self.rpc_calls_total = 0
            self.rpc_calls_failed = 0
            self.chat_requests = 0
            self.chat_failures = 0
            self.exports_generated = 0
            self.admin_denied = 0
            self.rate_limit_exceeded = 0
            self.active_chat_streams = 0
            self.api_latencies.clear()
            self._start_time = time.time()


# Global metrics instance
metrics = Metrics()
