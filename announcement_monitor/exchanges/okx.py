import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from announcement_monitor.exchanges.base import ExchangeScraper


class OkxAnnouncement(BaseModel):
    title: str = Field(alias="sTitle")
    publish_time: str = Field(alias="iTime")
    url_path: str = Field(alias="sWeburlpath")
    content: Optional[str] = Field(None, alias="sContent")
    category: Optional[str] = Field(None, alias="sCategoryName")


class OkxResponse(BaseModel):
    code: str
    msg: str = ""
    data: List[OkxAnnouncement] = Field(default_factory=list)


class OkxScraper(ExchangeScraper):
    """OKX support-center announcement list"""

    exchange_name = "OKX"
    api_url = "https://www.okx.com/v2/support/home/web/announcement/queryList"
    response_model = OkxResponse

    def request_kwargs(self) -> Dict[str, Any]:
        return {"params": {"t": str(int(time.time() * 1000)), "language": "en_US"}}

    def check_response(self, raw_data: OkxResponse) -> None:
        if raw_data.code != "0":
            raise self.fail(raw_data.msg)

    def extract_items(self, raw_data: OkxResponse) -> List[OkxAnnouncement]:
        return raw_data.data

    def extract_source_id(self, item: OkxAnnouncement) -> str:
        # OKX has no ids, the article path is stable
        return f"okx_{self.build_url(item).replace('/', '_')}"

    def extract_title(self, item: OkxAnnouncement) -> str:
        return item.title

    def extract_body(self, item: OkxAnnouncement) -> str:
        return item.content or ""

    def extract_timestamp(self, item: OkxAnnouncement) -> datetime:
        return self.parse_timestamp(item.publish_time, "%Y-%m-%d %H:%M:%S")

    def build_url(self, item: OkxAnnouncement) -> str:
        return f"{self._base_url}{item.url_path}"
