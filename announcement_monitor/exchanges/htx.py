from datetime import datetime
from typing import List, Optional, Union

from bs4 import BeautifulSoup
from loguru import logger
from pydantic import BaseModel, Field

from announcement_monitor.core.extractor import MarkupExtractor
from announcement_monitor.exchanges.base import ExchangeScraper
from announcement_monitor.utils.tools import parse_datetime, utc_now

HTX_API = "https://www.htx.com/api/v1/notice"
HTX_SUPPORT_URL = "https://www.htx.com/support/en-us"


class HtxItem(BaseModel):
    id: Optional[Union[int, str]] = None
    title: str
    content: str = ""
    created_at: int
    lang: str = "en_US"


class HtxData(BaseModel):
    total: int = 0
    items: List[HtxItem] = Field(default_factory=list, alias="list")


class HtxResponse(BaseModel):
    success: bool
    code: int = 200
    message: Optional[str] = None
    data: HtxData = Field(default_factory=HtxData)


class HtxContentData(BaseModel):
    content: str = ""


class HtxContentResponse(BaseModel):
    success: bool
    code: int = 200
    message: Optional[str] = None
    data: HtxContentData = Field(default_factory=HtxContentData)


def extract_htx_html(html: str) -> HtxResponse:
    """Announcement list from the HTML notice page"""
    logger.info("Attempting to extract HTX announcements from HTML")
    soup = BeautifulSoup(html, 'html.parser')
    items = []

    for article in soup.select("div.article-item"):
        title_tag = article.select_one("div.article-title")
        date_tag = article.select_one("div.article-date")

        title = title_tag.get_text(strip=True) if title_tag else "Unknown Title"
        published = parse_datetime(date_tag.get_text(strip=True), "%Y-%m-%d") if date_tag else None
        created_at = int((published or utc_now()).timestamp())

        items.append(HtxItem(title=title, created_at=created_at))

    if not items:
        logger.warning("No announcements found in HTX HTML content")

    return HtxResponse(success=True, data=HtxData(total=len(items), list=items))


def extract_htx_html_content(html: str) -> HtxContentResponse:
    """Announcement body from the HTML detail page"""
    logger.info("Attempting to extract HTX announcement content from HTML")
    soup = BeautifulSoup(html, 'html.parser')
    blocks = soup.select("div.article-content")
    content = blocks[-1].get_text(" ", strip=True) if blocks else ""

    if not content:
        logger.warning("No content found in HTX HTML content")

    return HtxContentResponse(success=True, data=HtxContentData(content=content))


class HtxScraper(ExchangeScraper):
    """HTX notice API with an HTML fallback for both the list and the detail page"""

    exchange_name = "HTX"
    api_url = f"{HTX_API}/get_notice_list"
    response_model = HtxResponse

    initial_delay = 1.0

    def markup_fallback(self) -> Optional[MarkupExtractor]:
        return extract_htx_html

    def check_response(self, raw_data: HtxResponse) -> None:
        if not raw_data.success:
            raise self.fail(raw_data.message)

    def extract_items(self, raw_data: HtxResponse) -> List[HtxItem]:
        return raw_data.data.items

    def extract_source_id(self, item: HtxItem) -> str:
        # Items scraped from HTML carry no id
        if item.id is not None:
            return str(item.id)
        return f"htx-{item.created_at}"

    def extract_title(self, item: HtxItem) -> str:
        return item.title

    def extract_body(self, item: HtxItem) -> str:
        return item.content

    def extract_timestamp(self, item: HtxItem) -> datetime:
        return self.from_timestamp(item.created_at)

    def build_url(self, item: HtxItem) -> str:
        if item.id is not None:
            return f"{HTX_SUPPORT_URL}/detail/{item.id}"
        return f"{HTX_SUPPORT_URL}/"

    async def fetch_content(self, item: HtxItem) -> str:
        if item.id is None:
            return ""

        detail = await self.http.fetch(
            HtxContentResponse,
            "GET",
            f"{HTX_API}/get_notice_by_id",
            fallback=extract_htx_html_content,
            params={"id": str(item.id)},
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
        )
        if not detail.success:
            raise self.fail(detail.message)

        return detail.data.content
