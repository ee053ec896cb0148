from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from announcement_monitor.exchanges.base import ExchangeScraper


class CoinbasePost(BaseModel):
    id: str = Field(validation_alias=AliasChoices("id", "guid"))
    title: str
    pub_date: str = Field("", alias="pubDate")
    link: str
    content: str = ""
    content_snippet: Optional[str] = Field(None, alias="contentSnippet")
    categories: Optional[List[str]] = None


class CoinbaseFeed(BaseModel):
    status: Optional[str] = None
    message: Optional[str] = None
    items: List[CoinbasePost] = Field(default_factory=list)


class CoinbaseScraper(ExchangeScraper):
    """Coinbase blog RSS, converted to JSON by rss2json"""

    exchange_name = "Coinbase"
    api_url = "https://api.rss2json.com/v1/api.json?rss_url=https://blog.coinbase.com/feed"
    response_model = CoinbaseFeed

    LISTING_CATEGORIES = ("listing", "new asset", "new crypto")

    def check_response(self, raw_data: CoinbaseFeed) -> None:
        if raw_data.status and raw_data.status != "ok":
            raise self.fail(raw_data.message or raw_data.status)

    def extract_items(self, raw_data: CoinbaseFeed) -> List[CoinbasePost]:
        return raw_data.items

    def extract_source_id(self, item: CoinbasePost) -> str:
        return item.id

    def extract_title(self, item: CoinbasePost) -> str:
        return item.title

    def extract_body(self, item: CoinbasePost) -> str:
        return self.strip_html(item.content or item.content_snippet or "")

    def extract_timestamp(self, item: CoinbasePost) -> datetime:
        return self.parse_timestamp(item.pub_date)

    def build_url(self, item: CoinbasePost) -> str:
        return item.link

    def listing_hint(self, item: CoinbasePost) -> bool:
        return any(
            marker in category.lower()
            for category in item.categories or []
            for marker in self.LISTING_CATEGORIES
        )
