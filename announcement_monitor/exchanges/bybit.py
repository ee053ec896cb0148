from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from announcement_monitor.exchanges.base import ExchangeScraper


class BybitAnnouncement(BaseModel):
    id: int
    title: str
    announcement_type: Optional[str] = Field(None, alias="type")
    release_date: str = Field(alias="releaseDate")
    description: str = ""
    url: str


class BybitResult(BaseModel):
    items: List[BybitAnnouncement] = Field(default_factory=list, alias="list")
    total: int = 0


class BybitResponse(BaseModel):
    success: bool
    message: str = ""
    result: BybitResult


class BybitScraper(ExchangeScraper):
    """Bybit announcement API, filtered to new crypto listings"""

    exchange_name = "Bybit"
    api_url = "https://api2.bybit.com/announcement/api/v1/announcement/list"
    response_model = BybitResponse

    def request_kwargs(self) -> Dict[str, Any]:
        return {"params": {"locale": "en-US", "page": "1", "limit": "20", "type": "new_crypto"}}

    def check_response(self, raw_data: BybitResponse) -> None:
        if not raw_data.success:
            raise self.fail(raw_data.message)

    def extract_items(self, raw_data: BybitResponse) -> List[BybitAnnouncement]:
        return raw_data.result.items

    def extract_source_id(self, item: BybitAnnouncement) -> str:
        return str(item.id)

    def extract_title(self, item: BybitAnnouncement) -> str:
        return item.title

    def extract_body(self, item: BybitAnnouncement) -> str:
        return item.description

    def extract_timestamp(self, item: BybitAnnouncement) -> datetime:
        return self.parse_timestamp(item.release_date)

    def build_url(self, item: BybitAnnouncement) -> str:
        return item.url
