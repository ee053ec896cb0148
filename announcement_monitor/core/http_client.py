import asyncio
from typing import Optional, Any, Type, TypeVar
from urllib.parse import urlparse

from loguru import logger
from curl_cffi.requests import AsyncSession

from announcement_monitor.core.extractor import MarkupExtractor, ResponseExtractor
from announcement_monitor.core.proxy_manager import ProxyRotator
from announcement_monitor.core.retry import FetchCascade, Sleep

T = TypeVar("T")

ROUND_ROBIN = "round_robin"
RANDOM = "random"


class HttpClient:
    """HTTP client for one exchange loop, proxy rotated per attempt, using curl_cffi"""

    DEFAULT_HEADERS = {
        'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/139.0.0.0 Safari/537.36',
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,application/json;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.9',
        'Cache-Control': 'max-age=0',
        "Connection": "keep-alive",
    }

    def __init__(
            self,
            rotator: Optional[ProxyRotator] = None,
            exchange_name: Optional[str] = None,
            timeout: float = 30,
            session: Optional[Any] = None,
            sleep: Sleep = asyncio.sleep
    ):
        self._rotator = rotator or ProxyRotator()
        self.exchange_name = exchange_name
        self._timeout = timeout
        self._sleep = sleep
        self.session = session if session is not None else AsyncSession(
            headers=self.DEFAULT_HEADERS.copy(),
            timeout=self._timeout,
            impersonate="chrome"
        )

        self._log = logger.bind(component="http", exchange=exchange_name or "")

    def pick_proxy(self, rotation: str = ROUND_ROBIN) -> Optional[str]:
        if rotation == RANDOM:
            return self._rotator.random_proxy()
        return self._rotator.next_proxy()

    async def request(
            self,
            method: str,
            url: str,
            *,
            max_attempts: int = 3,
            initial_delay: float = 0.5,
            rotation: str = ROUND_ROBIN,
            **kwargs
    ):
        """Send a request through FetchCascade, binding a new proxy on every attempt"""
        cascade = FetchCascade(max_attempts, initial_delay, sleep=self._sleep, name=self.exchange_name)

        def request_factory():
            call_kwargs = dict(kwargs)
            proxy = self.pick_proxy(rotation)
            if proxy:
                call_kwargs['proxies'] = {'http': proxy, 'https': proxy}
                self._log.debug(f"Using proxy: {proxy}")
            return self.session.request(method, url, **call_kwargs)

        return await cascade.run(request_factory)

    async def fetch(
            self,
            target: Type[T],
            method: str,
            url: str,
            *,
            fallback: Optional[MarkupExtractor] = None,
            **kwargs
    ) -> T:
        """Request ``url`` and decode the answer into ``target``"""
        response = await self.request(method, url, **kwargs)
        return ResponseExtractor.extract(target, response, fallback)

    async def get_text(self, url: str, **kwargs) -> str:
        response = await self.request("GET", url, **kwargs)
        return response.text or ""

    async def close(self):
        if self.session:
            await self.session.close()

    @staticmethod
    def get_base_url(url: str) -> str:
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}"
