import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from loguru import logger

from announcement_monitor.core.extractor import MarkupExtractor
from announcement_monitor.core.http_client import HttpClient
from announcement_monitor.core.models import Announcement, SourceSemanticError
from announcement_monitor.utils.tools import from_timestamp, parse_datetime, utc_now


@runtime_checkable
class SourceAdapter(Protocol):
    """The only surface the supervisor relies on"""

    def name(self) -> str:
        ...

    async def fetch(self) -> List[Announcement]:
        ...


class ExchangeScraper(ABC):
    """Shared fetch → decode → map → classify template for exchange adapters.

    Subclasses describe the endpoint and wire model as class attributes and
    implement the per-item extract_* hooks. Supplementary content (detail
    pages) is optional; a failure there keeps the item with empty content.
    """

    exchange_name: str = ""
    api_url: str = ""
    method: str = "GET"
    response_model: Any = None

    max_attempts: int = 3
    initial_delay: float = 0.5

    def __init__(self, http_client: HttpClient):
        self.http = http_client
        self._log = logger.bind(exchange=self.exchange_name)
        self._base_url = self.http.get_base_url(self.api_url)

    def name(self) -> str:
        return self.exchange_name

    async def fetch(self) -> List[Announcement]:
        """Fetch the latest announcements, classified"""
        raw_data = await self.fetch_raw_announcements()
        self.check_response(raw_data)

        items = self.extract_items(raw_data)
        announcements = []
        for item in items:
            if ann := await self.parse_announcement(item):
                announcements.append(ann)

        self._log.debug(f"Extracted {len(announcements)} / {len(items)} items from {self.exchange_name}")
        return announcements

    def request_kwargs(self) -> Dict[str, Any]:
        """Extra keyword arguments for the list request (params, json, headers)"""
        return {}

    def markup_fallback(self) -> Optional[MarkupExtractor]:
        """Markup extractor used when the list endpoint answers with HTML"""
        return None

    async def fetch_raw_announcements(self) -> Any:
        return await self.http.fetch(
            self.response_model,
            self.method,
            self.api_url,
            fallback=self.markup_fallback(),
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
            **self.request_kwargs()
        )

    def check_response(self, raw_data: Any) -> None:
        """Raise SourceSemanticError when the API reports its own failure"""

    def fail(self, detail: Optional[str]) -> SourceSemanticError:
        return SourceSemanticError(self.exchange_name, detail or "Unknown error")

    @abstractmethod
    def extract_items(self, raw_data: Any) -> List[Any]:
        """Extract announcement items from the decoded response"""
        pass

    async def parse_announcement(self, item: Any) -> Optional[Announcement]:
        source_id = self.extract_source_id(item)
        if not source_id:
            return None

        announcement = Announcement(
            id=source_id,
            title=self.extract_title(item),
            content=await self.resolve_content(item),
            url=self.build_url(item),
            exchange=self.exchange_name,
            published_at=self.extract_timestamp(item),
        )
        return announcement.analyze(listing_hint=self.listing_hint(item))

    async def resolve_content(self, item: Any) -> str:
        """Inline body when present, otherwise the supplementary content fetch"""
        if body := self.extract_body(item):
            return body

        try:
            return await self.fetch_content(item)
        except Exception as e:
            self._log.warning(
                f"Failed to fetch content for {self.exchange_name} announcement "
                f"{self.extract_source_id(item)}: {e}"
            )
            return ""

    async def fetch_content(self, item: Any) -> str:
        """Fetch full content for one item; sources without a detail endpoint return ''"""
        return ""

    def listing_hint(self, item: Any) -> bool:
        """Remote category metadata says this item is a listing"""
        return False

    # Abstract methods for data extraction
    @abstractmethod
    def extract_source_id(self, item: Any) -> str:
        pass

    @abstractmethod
    def extract_title(self, item: Any) -> str:
        pass

    def extract_body(self, item: Any) -> str:
        return ""

    @abstractmethod
    def extract_timestamp(self, item: Any) -> datetime:
        pass

    @abstractmethod
    def build_url(self, item: Any) -> str:
        pass

    def parse_timestamp(self, value: Optional[str], fmt: Optional[str] = None) -> datetime:
        """Parse a date string, falling back to now with a warning"""
        if dt := parse_datetime(value, fmt):
            return dt

        self._log.warning(f"Failed to parse {self.exchange_name} timestamp: {value}")
        return utc_now()

    @staticmethod
    def from_timestamp(value: Any) -> datetime:
        return from_timestamp(value)

    @staticmethod
    def strip_html(text: str) -> str:
        """Remove HTML tags"""
        if not text:
            return ""
        text = re.sub(r'<[^>]+>', ' ', text)
        text = re.sub(r'&[a-z]+;', ' ', text)
        text = re.sub(r'\s+', ' ', text)
        return text.strip()
