import json
import re
from datetime import datetime
from typing import List, Optional, Union

from bs4 import BeautifulSoup
from loguru import logger
from pydantic import BaseModel, Field

from announcement_monitor.core.extractor import MarkupExtractor
from announcement_monitor.exchanges.base import ExchangeScraper

KUCOIN_HOST = "https://www.kucoin.com"
INITIAL_STATE_PATTERN = re.compile(r"window\.__INITIAL_STATE__\s*=\s*(?=\{)")


class KucoinAnnouncement(BaseModel):
    id: Union[int, str]
    title: str
    summary: Optional[str] = None
    published_at: int = Field(alias="publishedStartAt")
    web_path: str = Field("", alias="webPath")


class KucoinData(BaseModel):
    items: List[KucoinAnnouncement] = Field(default_factory=list)
    total_page: int = Field(1, alias="totalPage")
    page_size: int = Field(0, alias="pageSize")
    current_page: int = Field(1, alias="currentPage")
    total_num: int = Field(0, alias="totalNum")


class KucoinResponse(BaseModel):
    code: str
    data: KucoinData = Field(default_factory=KucoinData)


def extract_kucoin_html(html: str) -> KucoinResponse:
    """Pull the news list out of the window.__INITIAL_STATE__ script"""
    logger.info("Attempting to extract KuCoin announcements from HTML")
    soup = BeautifulSoup(html, 'html.parser')
    items = []

    for script in soup.find_all('script'):
        text = script.string or ""
        match = INITIAL_STATE_PATTERN.search(text)
        if not match:
            continue

        try:
            # Later assignments may follow in the same script
            state, _ = json.JSONDecoder().raw_decode(text, match.end())
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse KuCoin HTML JSON data: {e}")
            break

        articles = (state.get('news', {})
                    .get('list', {})
                    .get('data', []))

        for article in articles:
            try:
                items.append(KucoinAnnouncement(
                    id=str(article['id']),
                    title=article['title'],
                    publishedStartAt=int(article['publishDate']),
                    webPath=f"{KUCOIN_HOST}/news/{article['id']}",
                ))
            except (KeyError, TypeError, ValueError):
                continue
        break

    return KucoinResponse(
        code=KucoinScraper.SUCCESS_CODE,
        data=KucoinData(items=items, pageSize=len(items), totalNum=len(items)),
    )


class KucoinScraper(ExchangeScraper):
    """KuCoin CMS listing articles, with the page state script as fallback"""

    exchange_name = "KuCoin"
    api_url = f"{KUCOIN_HOST}/_api/cms/articles?page=1&pageSize=20&category=listing&lang=en_US"
    response_model = KucoinResponse

    initial_delay = 1.0

    SUCCESS_CODE = "200000"

    def markup_fallback(self) -> Optional[MarkupExtractor]:
        return extract_kucoin_html

    def check_response(self, raw_data: KucoinResponse) -> None:
        if raw_data.code != self.SUCCESS_CODE:
            raise self.fail(raw_data.code)

    def extract_items(self, raw_data: KucoinResponse) -> List[KucoinAnnouncement]:
        return raw_data.data.items

    def extract_source_id(self, item: KucoinAnnouncement) -> str:
        return str(item.id)

    def extract_title(self, item: KucoinAnnouncement) -> str:
        return item.title

    def extract_body(self, item: KucoinAnnouncement) -> str:
        return item.summary or ""

    def extract_timestamp(self, item: KucoinAnnouncement) -> datetime:
        return self.from_timestamp(item.published_at)

    def build_url(self, item: KucoinAnnouncement) -> str:
        if item.web_path.startswith("/"):
            return f"{KUCOIN_HOST}{item.web_path}"
        return item.web_path
