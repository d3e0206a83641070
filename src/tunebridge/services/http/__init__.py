"""HTTP transport: rate limiting and retrying request execution."""

from tunebridge.services.http.rate_limiter import EnhancedRateLimiter
from tunebridge.services.http.request_executor import ApiRequestExecutor

__all__ = ["ApiRequestExecutor", "EnhancedRateLimiter"]
