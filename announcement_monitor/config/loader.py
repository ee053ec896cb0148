import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field, replace

from loguru import logger

from announcement_monitor.exchanges.factory import normalize_name

DEFAULT_POLL_INTERVAL = 300
DEFAULT_REQUEST_TIMEOUT = 30


def parse_exchange_list(raw: Optional[str]) -> List[str]:
    """'binance, okx,,Gate.io' -> ['binance', 'okx', 'Gate.io']"""
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def parse_exchange_intervals(raw: Optional[str]) -> Dict[str, int]:
    """
    Parse 'name:seconds' pairs separated by commas.

    Malformed entries and non-positive values are skipped with a warning.

    Example:
        parse_exchange_intervals("binance:60,okx:120")  # {'binance': 60, 'okx': 120}
    """
    intervals: Dict[str, int] = {}
    if not raw:
        return intervals

    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue

        name, sep, seconds = entry.partition(":")
        try:
            if not sep or not name.strip():
                raise ValueError("expected name:seconds")
            value = int(seconds)
            if value <= 0:
                raise ValueError("interval must be positive")
        except ValueError as e:
            logger.warning(f"Skipping invalid exchange interval '{entry}': {e}")
            continue

        intervals[name.strip()] = value

    return intervals


@dataclass
class MonitorConfig:
    """Polling configuration shared by every exchange loop"""
    default_poll_interval: int = DEFAULT_POLL_INTERVAL
    exchange_intervals: Dict[str, int] = field(default_factory=dict)
    enabled_exchanges: List[str] = field(default_factory=list)
    log_level: str = "INFO"
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self):
        self._intervals = {normalize_name(k): v for k, v in self.exchange_intervals.items()}
        self._enabled = {normalize_name(name) for name in self.enabled_exchanges}

    def get_polling_interval(self, name: str) -> int:
        """Per-exchange override, or the process-wide default"""
        return self._intervals.get(normalize_name(name), self.default_poll_interval)

    def should_monitor(self, name: str) -> bool:
        """An empty allow-list enables every exchange"""
        if not self._enabled:
            return True
        return normalize_name(name) in self._enabled

    def merge(self, **overrides) -> 'MonitorConfig':
        """Copy with every non-None override applied; exchange_intervals are merged key by key"""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if 'exchange_intervals' in changes:
            changes['exchange_intervals'] = {**self.exchange_intervals, **changes['exchange_intervals']}
        return replace(self, **changes)

    @classmethod
    def load(cls, path: Optional[str] = None) -> 'MonitorConfig':
        """Load settings from a YAML file; a missing file yields the defaults"""
        if not path:
            return cls()

        data = cls._load_yaml(Path(path))
        if not data:
            return cls()

        exchanges = data.get("exchanges") or []
        if isinstance(exchanges, str):
            exchanges = parse_exchange_list(exchanges)

        intervals = data.get("exchange_intervals") or {}
        if isinstance(intervals, str):
            intervals = parse_exchange_intervals(intervals)

        return cls(
            default_poll_interval=int(data.get("poll_interval", DEFAULT_POLL_INTERVAL)),
            exchange_intervals={str(k): int(v) for k, v in intervals.items()},
            enabled_exchanges=[str(name) for name in exchanges],
            log_level=str(data.get("log_level", "INFO")).upper(),
            request_timeout=float(data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)),
        )

    @staticmethod
    def _load_yaml(path: Path) -> Dict[str, Any]:
        """Load a YAML file"""
        if not path.exists():
            logger.warning(f"Config file {path} not found, using defaults")
            return {}

        with open(path, 'r') as f:
            return yaml.safe_load(f) or {}
