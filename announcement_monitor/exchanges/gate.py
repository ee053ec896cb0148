from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from announcement_monitor.exchanges.base import ExchangeScraper


class GateAnnouncement(BaseModel):
    id: int
    title: str
    content: str = ""
    publish_time: int = Field(alias="publishTime")
    url: str


class GateData(BaseModel):
    items: List[GateAnnouncement] = Field(default_factory=list, alias="list")
    total: int = 0


class GateResponse(BaseModel):
    code: int
    message: str = ""
    data: GateData


class GateScraper(ExchangeScraper):
    """Gate.io announcement API, listing category"""

    exchange_name = "Gate.io"
    api_url = "https://www.gate.io/api/v1/announcement/list"
    response_model = GateResponse

    def request_kwargs(self) -> Dict[str, Any]:
        return {"params": {"page": "1", "limit": "20", "lang": "en", "category": "listing"}}

    def check_response(self, raw_data: GateResponse) -> None:
        if raw_data.code != 0:
            raise self.fail(raw_data.message)

    def extract_items(self, raw_data: GateResponse) -> List[GateAnnouncement]:
        return raw_data.data.items

    def extract_source_id(self, item: GateAnnouncement) -> str:
        return str(item.id)

    def extract_title(self, item: GateAnnouncement) -> str:
        return item.title

    def extract_body(self, item: GateAnnouncement) -> str:
        return item.content

    def extract_timestamp(self, item: GateAnnouncement) -> datetime:
        # publishTime is in seconds
        return self.from_timestamp(item.publish_time)

    def build_url(self, item: GateAnnouncement) -> str:
        if item.url:
            return item.url

        # Fallback: construct URL from article ID
        return f"https://www.gate.io/article/{item.id}"
