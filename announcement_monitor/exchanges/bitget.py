from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from announcement_monitor.exchanges.base import ExchangeScraper

BITGET_API = "https://api.bitget.com/api/v2/spot/public/support/notice"


class BitgetAnnouncement(BaseModel):
    id: Union[int, str]
    title: str
    release_time: int = Field(alias="releaseTime")
    url: str = ""
    content: Optional[str] = None


class BitgetData(BaseModel):
    items: List[BitgetAnnouncement] = Field(default_factory=list, alias="list")
    total: int = 0


class BitgetResponse(BaseModel):
    code: str
    msg: str = ""
    data: BitgetData


class BitgetDetail(BaseModel):
    id: Union[int, str]
    title: str = ""
    content: str = ""


class BitgetDetailResponse(BaseModel):
    code: str
    msg: str = ""
    data: BitgetDetail


class BitgetScraper(ExchangeScraper):
    """Bitget support notices, listings catalog"""

    exchange_name = "Bitget"
    api_url = f"{BITGET_API}/list"
    response_model = BitgetResponse

    SUCCESS_CODE = "00000"

    def request_kwargs(self) -> Dict[str, Any]:
        # catalogId 6 is "New Listings"
        return {"params": {"language": "en", "catalogId": "6", "page": "1", "pageSize": "20"}}

    def check_response(self, raw_data: BitgetResponse) -> None:
        if raw_data.code != self.SUCCESS_CODE:
            raise self.fail(raw_data.msg)

    def extract_items(self, raw_data: BitgetResponse) -> List[BitgetAnnouncement]:
        return raw_data.data.items

    def extract_source_id(self, item: BitgetAnnouncement) -> str:
        return str(item.id)

    def extract_title(self, item: BitgetAnnouncement) -> str:
        return item.title

    def extract_body(self, item: BitgetAnnouncement) -> str:
        return self.strip_html(item.content or "")

    def extract_timestamp(self, item: BitgetAnnouncement) -> datetime:
        # releaseTime is in milliseconds
        return self.from_timestamp(item.release_time)

    def build_url(self, item: BitgetAnnouncement) -> str:
        if item.url:
            return item.url

        # Fallback: construct URL from contentId
        return f"https://www.bitget.com/support/articles/{item.id}"

    async def fetch_content(self, item: BitgetAnnouncement) -> str:
        detail = await self.http.fetch(
            BitgetDetailResponse,
            "GET",
            f"{BITGET_API}/detail",
            params={"id": str(item.id)},
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
        )
        if detail.code != self.SUCCESS_CODE:
            raise self.fail(f"detail: {detail.msg}")

        return self.strip_html(detail.data.content)
