from datetime import datetime
from typing import List, Union

from pydantic import BaseModel

from announcement_monitor.exchanges.base import ExchangeScraper


class BitmexAnnouncement(BaseModel):
    id: Union[int, str]
    link: str
    title: str
    date: str
    content: str = ""


class BitmexScraper(ExchangeScraper):
    """BitMEX public announcement endpoint (bare JSON array)"""

    exchange_name = "BitMEX"
    api_url = "https://www.bitmex.com/api/v1/announcement"
    response_model = List[BitmexAnnouncement]

    def extract_items(self, raw_data: List[BitmexAnnouncement]) -> List[BitmexAnnouncement]:
        return raw_data

    def extract_source_id(self, item: BitmexAnnouncement) -> str:
        return str(item.id)

    def extract_title(self, item: BitmexAnnouncement) -> str:
        return item.title

    def extract_body(self, item: BitmexAnnouncement) -> str:
        return item.content

    def extract_timestamp(self, item: BitmexAnnouncement) -> datetime:
        return self.parse_timestamp(item.date)

    def build_url(self, item: BitmexAnnouncement) -> str:
        if item.link.startswith("http"):
            return item.link
        return f"{self._base_url}{item.link}"
