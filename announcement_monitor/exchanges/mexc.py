from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from announcement_monitor.exchanges.base import ExchangeScraper

MEXC_API = "https://www.mexc.com/api/platform/notice"


class MexcAnnouncement(BaseModel):
    id: Union[int, str]
    title: str
    content: Optional[str] = None
    create_time: int = Field(alias="createTime")
    url: Optional[str] = None


class MexcData(BaseModel):
    data_list: List[MexcAnnouncement] = Field(default_factory=list, alias="dataList")
    total: int = 0


class MexcResponse(BaseModel):
    code: int
    data: Optional[MexcData] = None
    msg: str = ""


class MexcContent(BaseModel):
    id: Union[int, str]
    title: str = ""
    content: str = ""


class MexcContentResponse(BaseModel):
    code: int
    data: Optional[MexcContent] = None
    msg: str = ""


class MexcScraper(ExchangeScraper):
    """MEXC notice list, new token listings catalog"""

    exchange_name = "MEXC"
    api_url = f"{MEXC_API}/list"
    response_model = MexcResponse

    SUCCESS_CODE = 200

    def request_kwargs(self) -> Dict[str, Any]:
        # catalogId 5 is "New Listings"
        return {"params": {"pageNum": "1", "pageSize": "20", "catalogId": "5", "lang": "en_US"}}

    def check_response(self, raw_data: MexcResponse) -> None:
        if raw_data.code != self.SUCCESS_CODE:
            raise self.fail(raw_data.msg)

    def extract_items(self, raw_data: MexcResponse) -> List[MexcAnnouncement]:
        return raw_data.data.data_list if raw_data.data else []

    def extract_source_id(self, item: MexcAnnouncement) -> str:
        return str(item.id)

    def extract_title(self, item: MexcAnnouncement) -> str:
        return item.title

    def extract_body(self, item: MexcAnnouncement) -> str:
        return item.content or ""

    def extract_timestamp(self, item: MexcAnnouncement) -> datetime:
        return self.from_timestamp(item.create_time)

    def build_url(self, item: MexcAnnouncement) -> str:
        return item.url or f"{self._base_url}/support/notice/detail?id={item.id}"

    async def fetch_content(self, item: MexcAnnouncement) -> str:
        detail = await self.http.fetch(
            MexcContentResponse,
            "GET",
            f"{MEXC_API}/detail",
            params={"id": str(item.id)},
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
        )
        if detail.code != self.SUCCESS_CODE or detail.data is None:
            raise self.fail(f"content: {detail.msg}")

        return detail.data.content
