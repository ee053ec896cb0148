from .base import ExchangeScraper, SourceAdapter

from .binance import BinanceScraper
from .okx import OkxScraper
from .bybit import BybitScraper
from .bitmex import BitmexScraper
from .gate import GateScraper
from .kraken import KrakenScraper
from .coinbase import CoinbaseScraper
from .upbit import UpbitScraper
from .bitget import BitgetScraper
from .htx import HtxScraper
from .mexc import MexcScraper
from .kucoin import KucoinScraper
from .factory import ExchangeFactory
