from .announcement import Announcement
from .exceptions import (
    MonitorError,
    TransportError,
    RateLimitedError,
    DecodeError,
    SourceSemanticError,
)
