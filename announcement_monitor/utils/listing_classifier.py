import re
from typing import NamedTuple, Tuple, List


class ListingVerdict(NamedTuple):
    is_new_listing: bool
    symbols: Tuple[str, ...]


class ListingClassifier:
    """Keyword based new-listing detection with bracketed symbol extraction"""

    # Substrings matched case-insensitively against title and content
    LISTING_KEYWORDS = (
        "new listing",
        "listing",
        "new token",
        "new coin",
        "new cryptocurrency",
        "will list",
        "now available",
        "deposits open",
        "trading pair",
        "添加",  # added
        "上线",  # live
    )

    # "(BTC)" or "[ETH]", 2-10 ASCII alphanumerics
    SYMBOL_PATTERN = re.compile(r'[(\[]([A-Za-z0-9]{2,10})[)\]]')

    @classmethod
    def analyze(cls, title: str, content: str = "", listing_hint: bool = False) -> ListingVerdict:
        """
        Decide whether an announcement is a new listing and pull its token symbols.

        Args:
            title: Announcement title
            content: Announcement body, may be empty
            listing_hint: Set by an adapter when remote category metadata marks
                the item as a listing. Forces a positive verdict.

        Returns:
            ListingVerdict with symbols in first-seen order, title before content
        """
        is_new_listing = cls.is_listing(title, content) or listing_hint

        if not is_new_listing:
            return ListingVerdict(False, ())

        return ListingVerdict(True, tuple(cls.extract_symbols(title, content)))

    @classmethod
    def is_listing(cls, title: str, content: str = "") -> bool:
        title_lower = (title or "").lower()
        content_lower = (content or "").lower()

        return any(
            keyword in title_lower or keyword in content_lower
            for keyword in cls.LISTING_KEYWORDS
        )

    @classmethod
    def extract_symbols(cls, title: str, content: str = "") -> List[str]:
        symbols = []

        for text in (title or "", content or ""):
            for match in cls.SYMBOL_PATTERN.findall(text):
                symbol = match.upper()
                if symbol not in symbols:
                    symbols.append(symbol)

        return symbols
