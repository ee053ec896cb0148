from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from announcement_monitor.exchanges.base import ExchangeScraper

UPBIT_API = "https://api-manager.upbit.com/api/v1/notices"


class UpbitNotice(BaseModel):
    id: int
    title: str
    created_at: str
    view_count: int = 0


class UpbitResponse(BaseModel):
    success: bool
    data: List[UpbitNotice] = Field(default_factory=list)


class UpbitNoticeDetail(BaseModel):
    id: int
    title: str = ""
    content: str = ""
    created_at: str = ""


class UpbitDetailResponse(BaseModel):
    success: bool
    data: UpbitNoticeDetail


class UpbitScraper(ExchangeScraper):
    """Upbit general notices; the list carries titles only, bodies come from the detail API"""

    exchange_name = "Upbit"
    api_url = UPBIT_API
    response_model = UpbitResponse

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._base_url = "https://upbit.com"

    def request_kwargs(self) -> Dict[str, Any]:
        return {"params": {"page": "1", "per_page": "20", "thread_name": "general"}}

    def check_response(self, raw_data: UpbitResponse) -> None:
        if not raw_data.success:
            raise self.fail("unsuccessful response")

    def extract_items(self, raw_data: UpbitResponse) -> List[UpbitNotice]:
        return raw_data.data

    def extract_source_id(self, item: UpbitNotice) -> str:
        return str(item.id)

    def extract_title(self, item: UpbitNotice) -> str:
        return item.title

    def extract_timestamp(self, item: UpbitNotice) -> datetime:
        return self.parse_timestamp(item.created_at)

    def build_url(self, item: UpbitNotice) -> str:
        return f"{self._base_url}/service_center/notice?id={item.id}"

    async def fetch_content(self, item: UpbitNotice) -> str:
        detail = await self.http.fetch(
            UpbitDetailResponse,
            "GET",
            f"{UPBIT_API}/{item.id}",
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay,
        )
        if not detail.success:
            raise self.fail("unsuccessful response for announcement detail")

        return detail.data.content
