from .rate_limit import RateLimit
from .request_logging import RequestLogging

__all__ = ["RateLimit", "RequestLogging"]
