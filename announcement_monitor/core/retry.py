import asyncio
from typing import Any, Awaitable, Callable, Optional

from curl_cffi.requests.exceptions import RequestException
from loguru import logger
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_exponential

from announcement_monitor.core.models.exceptions import RateLimitedError, TransportError
from announcement_monitor.utils.tools import truncate_content

# Only these are worth a new proxy; everything else goes back to the caller
RETRYABLE_STATUSES = frozenset({403, 429})

RequestFactory = Callable[[], Awaitable[Any]]
Sleep = Callable[[float], Awaitable[None]]


class FetchCascade:
    """
    Bounded retry with exponential backoff around a request factory.

    The factory is called once per attempt so that every attempt can bind a
    freshly rotated proxy. Transport failures and 429/403 answers are retried,
    sleeping ``initial_delay * 2 ** (attempt - 1)`` after each failed attempt.
    Any other response, whatever its status, is returned as is.
    """

    def __init__(
            self,
            max_attempts: int = 3,
            initial_delay: float = 0.5,
            sleep: Sleep = asyncio.sleep,
            name: Optional[str] = None
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.name = name or "http"
        self._sleep = sleep
        self._log = logger.bind(component="retry", exchange=name or "")

    async def run(self, request_factory: RequestFactory) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.initial_delay, exp_base=2),
            retry=retry_if_exception_type((TransportError, RateLimitedError)),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )
        return await retrying(self._attempt, request_factory)

    async def _attempt(self, request_factory: RequestFactory) -> Any:
        try:
            response = await request_factory()
        except RequestException as e:
            raise TransportError(str(e)) from e

        if response.status_code in RETRYABLE_STATUSES:
            raise RateLimitedError(response.status_code, truncate_content(response.text or "", 200))

        return response

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        self._log.warning(
            f"{self.name} №{retry_state.attempt_number} failed: {truncate_content(str(error))} "
            f"| retrying in {delay:.2f}s"
        )
