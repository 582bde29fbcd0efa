from collections import deque
from functools import wraps
import time

import psutil

from .logger import get_logger

class PerformanceMonitor:
    """Monitor engine performance"""

    def __init__(self, max_entries: int = 1000):
        # Oldest timings drop off once max_entries is reached
        self.metrics = deque(maxlen=max_entries)
        self._process = psutil.Process()

    def time_it(self, func):
        """Decorator to time function execution and track memory delta"""
        @wraps(func)
        def wrapper(*args, **kwargs):
            rss_before = self._process.memory_info().rss
            start = time.perf_counter()
            result = func(*args, **kwargs)
            duration = time.perf_counter() - start
            rss_delta = self._process.memory_info().rss - rss_before
            self.metrics.append({
                'function': func.__name__,
                'duration': duration,
                'rss_delta': rss_delta,
            })
            get_logger().debug(f"{func.__name__} took {duration * 1000:.2f}ms (rss {rss_delta:+d} bytes)")
            return result
        return wrapper

monitor = PerformanceMonitor()
