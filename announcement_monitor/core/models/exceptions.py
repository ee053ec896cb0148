from typing import Optional


class MonitorError(Exception):
    """Base class for every error raised while fetching an exchange feed"""


class TransportError(MonitorError):
    """Connection or timeout failure, no response was received"""


class RateLimitedError(MonitorError):
    """Exchange answered 429 (rate limited) or 403 (blocked)"""

    def __init__(self, status_code: int, excerpt: str = ""):
        self.status_code = status_code
        self.excerpt = excerpt
        super().__init__(f"Request failed with status {status_code}: {excerpt}")


class DecodeError(MonitorError):
    """Structured decode failed and no markup fallback was available"""

    def __init__(
            self,
            reason: str,
            status_code: Optional[int] = None,
            content_type: str = "",
            excerpt: str = ""
    ):
        self.reason = reason
        self.status_code = status_code
        self.content_type = content_type
        self.excerpt = excerpt
        super().__init__(
            f"{reason} (status: {status_code}, content-type: {content_type or 'n/a'}, body: {excerpt})"
        )


class SourceSemanticError(MonitorError):
    """Exchange API reported its own failure (success flag / error code)"""

    def __init__(self, exchange: str, detail: str):
        self.exchange = exchange
        self.detail = detail
        super().__init__(f"{exchange} API returned error: {detail}")
