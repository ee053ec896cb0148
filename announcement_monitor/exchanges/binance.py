from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from bs4 import BeautifulSoup
from pydantic import BaseModel, Field

from announcement_monitor.core.http_client import RANDOM
from announcement_monitor.exchanges.base import ExchangeScraper

BINANCE_HOST = "https://www.binance.com"


class BinanceArticle(BaseModel):
    id: Union[int, str]
    code: str = ""
    title: str
    announcement_type: Optional[int] = Field(None, alias="type")
    release_date: int = Field(alias="releaseDate")
    url: Optional[str] = None


class BinanceResponse(BaseModel):
    code: str
    message: Optional[str] = None
    data: List[BinanceArticle] = Field(default_factory=list)
    total: int = 0
    success: bool


class BinanceScraper(ExchangeScraper):
    """Binance "New Crypto Listings" catalog, article bodies scraped from the detail page"""

    exchange_name = "Binance"
    api_url = f"{BINANCE_HOST}/bapi/composite/v1/public/cms/article/catalog/list/query"
    method = "POST"
    response_model = BinanceResponse

    # 48 is "New Crypto Listings"
    CATALOG_ID = "48"
    CONTENT_SELECTORS = (".css-3iuet5", "article")

    def request_kwargs(self) -> Dict[str, Any]:
        return {
            "json": {"catalogId": self.CATALOG_ID, "pageNo": 1, "pageSize": 20},
            "headers": {"Content-Type": "application/json"},
            "rotation": RANDOM,
        }

    def check_response(self, raw_data: BinanceResponse) -> None:
        if not raw_data.success:
            raise self.fail(raw_data.message)

    def extract_items(self, raw_data: BinanceResponse) -> List[BinanceArticle]:
        # Only articles with a URL can be linked and have their content fetched
        return [article for article in raw_data.data if article.url]

    def extract_source_id(self, item: BinanceArticle) -> str:
        return str(item.id)

    def extract_title(self, item: BinanceArticle) -> str:
        return item.title

    def extract_timestamp(self, item: BinanceArticle) -> datetime:
        return self.from_timestamp(item.release_date)

    def build_url(self, item: BinanceArticle) -> str:
        return item.url or ""

    async def fetch_content(self, item: BinanceArticle) -> str:
        path = (item.url or "").removeprefix(BINANCE_HOST)
        if path == item.url:
            return ""

        html = await self.http.get_text(
            f"{BINANCE_HOST}{path}",
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
            rotation=RANDOM,
        )
        return self.extract_article_text(html)

    @classmethod
    def extract_article_text(cls, html: str) -> str:
        soup = BeautifulSoup(html, 'html.parser')
        for selector in cls.CONTENT_SELECTORS:
            if element := soup.select_one(selector):
                return element.get_text(" ", strip=True)
        return ""
