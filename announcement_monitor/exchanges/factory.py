import re
from typing import Dict, List, Type

from .base import ExchangeScraper
from .binance import BinanceScraper
from .bitget import BitgetScraper
from .bitmex import BitmexScraper
from .bybit import BybitScraper
from .coinbase import CoinbaseScraper
from .gate import GateScraper
from .htx import HtxScraper
from .kraken import KrakenScraper
from .kucoin import KucoinScraper
from .mexc import MexcScraper
from .okx import OkxScraper
from .upbit import UpbitScraper


def normalize_name(name: str) -> str:
    """'Gate.io', 'gate io' and 'GATEIO' all map to 'gateio'"""
    return re.sub(r'[^a-z0-9]', '', name.lower())


class ExchangeFactory:
    """Factory for creating exchange scrapers"""

    _registry: Dict[str, Type[ExchangeScraper]] = {
        'binance': BinanceScraper,
        'okx': OkxScraper,
        'bybit': BybitScraper,
        'bitmex': BitmexScraper,
        'gateio': GateScraper,
        'kraken': KrakenScraper,
        'coinbase': CoinbaseScraper,
        'upbit': UpbitScraper,
        'bitget': BitgetScraper,
        'htx': HtxScraper,
        'mexc': MexcScraper,
        'kucoin': KucoinScraper,
    }

    @classmethod
    def create(cls, name: str, http_client) -> ExchangeScraper:
        """Create scraper for exchange"""
        scraper_class = cls._registry.get(normalize_name(name))
        if not scraper_class:
            raise ValueError(f"Unknown exchange: {name}")

        return scraper_class(http_client)

    @classmethod
    def register(cls, name: str, scraper_class: Type[ExchangeScraper]):
        """Register new exchange scraper"""
        cls._registry[normalize_name(name)] = scraper_class

    @classmethod
    def available(cls) -> List[str]:
        """Display names of every registered exchange, in registration order"""
        return [scraper_class.exchange_name for scraper_class in cls._registry.values()]

    @classmethod
    def is_known(cls, name: str) -> bool:
        return normalize_name(name) in cls._registry
