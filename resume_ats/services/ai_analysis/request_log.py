"""Bounded, thread-safe log of AI provider requests."""
import threading
from collections import deque
from datetime import datetime, timezone
from typing import List, Optional


class RequestLog:
    """Ring buffer of request outcomes; the oldest entry is dropped when full."""

    HEALTH_WINDOW = 100

    def __init__(self, max_size: int = 1000):
        self._entries = deque(maxlen=max_size)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def record(
        self,
        operation: str,
        attempt: int,
        key_index: int,
        success: bool,
        duration_ms: float,
        error: Optional[str] = None,
        prompt_length: Optional[int] = None,
        response_length: Optional[int] = None,
    ):
        entry = {
            'operation': operation,
            'attempt': attempt,
            'key_index': key_index,
            'success': success,
            'duration_ms': round(duration_ms, 1),
            'error': error,
            'prompt_length': prompt_length,
            'response_length': response_length,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }
        with self._lock:
            self._entries.append(entry)

    def recent(self, count: int = HEALTH_WINDOW) -> List[dict]:
        with self._lock:
            return list(self._entries)[-count:]

    def summary(self) -> dict:
        """Success rate and average latency over the most recent requests."""
        recent = self.recent(self.HEALTH_WINDOW)
        total = len(self)
        if not recent:
            return {
                'recent_success_rate': 'N/A',
                'average_response_time': '0ms',
                'total_requests': total,
            }
        successes = sum(1 for entry in recent if entry['success'])
        average = sum(entry['duration_ms'] for entry in recent) / len(recent)
        return {
            'recent_success_rate': f"{successes / len(recent) * 100:.1f}%",
            'average_response_time': f"{round(average)}ms",
            'total_requests': total,
        }
