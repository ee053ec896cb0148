from datetime import datetime
from typing import List, Optional

from bs4 import BeautifulSoup
from pydantic import BaseModel

from announcement_monitor.core.extractor import MarkupExtractor
from announcement_monitor.exchanges.base import ExchangeScraper


class KrakenPost(BaseModel):
    title: str
    url: str
    date: str = ""
    excerpt: str = ""


class KrakenScraper(ExchangeScraper):
    """Kraken product-updates blog, scraped from HTML"""

    exchange_name = "Kraken"
    api_url = "https://blog.kraken.com/product-updates"
    response_model = List[KrakenPost]

    def markup_fallback(self) -> Optional[MarkupExtractor]:
        return self.parse_blog

    @staticmethod
    def parse_blog(html: str) -> List[KrakenPost]:
        soup = BeautifulSoup(html, 'html.parser')
        posts = []

        for article in soup.select("article.blog-post"):
            link = article.select_one("h2.blog-post__title a")
            date = article.select_one("time.blog-post__date")
            excerpt = article.select_one("div.blog-post__excerpt")

            title = link.get_text(strip=True) if link else ""
            url = link.get("href", "") if link else ""

            # Skip if we don't have essential information
            if not title or not url:
                continue

            posts.append(KrakenPost(
                title=title,
                url=url,
                date=date.get_text(strip=True) if date else "",
                excerpt=excerpt.get_text(" ", strip=True) if excerpt else "",
            ))

        return posts

    def extract_items(self, raw_data: List[KrakenPost]) -> List[KrakenPost]:
        return raw_data

    def extract_source_id(self, item: KrakenPost) -> str:
        return f"kraken_{item.url.replace('/', '_')}"

    def extract_title(self, item: KrakenPost) -> str:
        return item.title

    def extract_body(self, item: KrakenPost) -> str:
        return item.excerpt

    def extract_timestamp(self, item: KrakenPost) -> datetime:
        # "May 15, 2023"
        return self.parse_timestamp(item.date, "%B %d, %Y")

    def build_url(self, item: KrakenPost) -> str:
        return item.url
