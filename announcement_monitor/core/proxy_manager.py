import itertools
import os
import random
from typing import Optional, Tuple

from loguru import logger


class ProxyRotator:
    """Round-robin / random proxy selection over a port range on a single host.

    A fixed system proxy, when set, wins over ranged rotation. With neither
    configured both selectors return None and requests go out directly.
    One instance is shared by every exchange loop.
    """

    def __init__(
            self,
            host: Optional[str] = None,
            port_range: Optional[Tuple[int, int]] = None,
            system_proxy: Optional[str] = None
    ):
        if port_range is not None:
            start, end = port_range
            if start >= end:
                raise ValueError(f"Invalid port range {start}-{end}: start port must be less than end port")

        self.host = host
        self.port_range = port_range if host else None
        self.system_proxy = system_proxy or None
        # next() on a count is atomic, concurrent callers never share an index
        self._cursor = itertools.count()

    @classmethod
    def from_env(cls) -> "ProxyRotator":
        """Build from PROXY, PORT_RANGE ("start-end") and SYSTEM_PROXY"""
        host = os.getenv("PROXY") or None
        raw_range = os.getenv("PORT_RANGE") or None
        system_proxy = os.getenv("SYSTEM_PROXY") or None

        port_range = cls.parse_port_range(raw_range) if host and raw_range else None
        if port_range is None:
            host = None

        rotator = cls(host, port_range, system_proxy)
        logger.bind(component="proxy").info(f"Proxy mode: {rotator.describe()}")
        return rotator

    @staticmethod
    def parse_port_range(raw_range: str) -> Optional[Tuple[int, int]]:
        parts = raw_range.split("-")
        if len(parts) != 2:
            logger.warning(f"Invalid PORT_RANGE format. Expected 'start-end', got: {raw_range}")
            return None

        try:
            start, end = int(parts[0]), int(parts[1])
        except ValueError:
            logger.warning(f"Invalid PORT_RANGE ports: {raw_range}")
            return None

        if start >= end:
            logger.warning("Invalid PORT_RANGE: start port must be less than end port")
            return None

        return start, end

    @property
    def is_configured(self) -> bool:
        return bool(self.system_proxy or self.port_range)

    @property
    def port_count(self) -> int:
        if not self.port_range:
            return 0
        start, end = self.port_range
        return end - start + 1

    def next_proxy(self) -> Optional[str]:
        """Next proxy in round-robin order, wrapping at the end of the range"""
        if self.system_proxy:
            return self.system_proxy
        if not self.port_range:
            return None

        index = next(self._cursor)
        return self._format(self.port_range[0] + index % self.port_count)

    def random_proxy(self) -> Optional[str]:
        """Uniformly sampled proxy, leaves the round-robin cursor untouched"""
        if self.system_proxy:
            return self.system_proxy
        if not self.port_range:
            return None

        return self._format(random.randint(*self.port_range))

    def describe(self) -> str:
        if self.system_proxy:
            return f"system proxy {self.system_proxy}"
        if self.port_range:
            return f"{self.host} ports {self.port_range[0]}-{self.port_range[1]}"
        return "direct"

    def _format(self, port: int) -> str:
        return f"http://{self.host}:{port}"
