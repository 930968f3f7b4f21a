"""Rate-limited HTTP transport for IEX Cloud."""

from .executor import Executor, is_success
from .rate_limit import RateLimiter

__all__ = ["Executor", "RateLimiter", "is_success"]
