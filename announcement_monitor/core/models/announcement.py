from dataclasses import dataclass, replace
from datetime import datetime
from typing import Tuple

from announcement_monitor.utils.listing_classifier import ListingClassifier


@dataclass(frozen=True)
class Announcement:
    """Normalized exchange announcement.

    Adapters build it with the listing fields left at their defaults and then
    call ``analyze()`` once; the classified copy is what leaves the adapter.
    """
    id: str
    title: str
    content: str
    url: str
    exchange: str
    published_at: datetime
    is_new_listing: bool = False
    token_symbols: Tuple[str, ...] = ()

    def analyze(self, listing_hint: bool = False) -> "Announcement":
        """Return a copy with is_new_listing and token_symbols derived from the text"""
        verdict = ListingClassifier.analyze(self.title, self.content, listing_hint=listing_hint)
        return replace(
            self,
            is_new_listing=verdict.is_new_listing,
            token_symbols=verdict.symbols
        )
