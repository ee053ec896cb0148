from functools import lru_cache
from typing import Any, Callable, Optional, Type, TypeVar

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from announcement_monitor.core.models.exceptions import DecodeError
from announcement_monitor.utils.tools import excerpt

T = TypeVar("T")

MarkupExtractor = Callable[[str], Any]

MARKUP_CONTENT_TYPES = ("html", "xml")


@lru_cache(maxsize=None)
def _type_adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


class ResponseExtractor:
    """Structured decode of a response body with a per-source markup fallback"""

    EXCERPT_LENGTH = 200

    _log = logger.bind(component="extractor")

    @classmethod
    def extract(
            cls,
            target: Type[T],
            response: Any,
            fallback: Optional[MarkupExtractor] = None
    ) -> T:
        """
        Decode ``response`` into ``target``.

        Markup content types skip the structured decode. When the decode is
        skipped or fails, ``fallback`` receives the raw body text and its
        result is returned as is. Without a fallback a DecodeError is raised.
        """
        content_type = cls.content_type(response)
        body = response.text or ""

        if cls.is_markup(content_type):
            cls._log.warning("Received markup response when expecting JSON")
            reason = f"Content-Type is {content_type}, not JSON"
        else:
            try:
                return _type_adapter(target).validate_json(body)
            except ValidationError as e:
                errors = e.errors(include_url=False, include_input=False)
                reason = f"JSON parse error: {errors[:3]}"

        if fallback is not None:
            cls._log.info("Trying HTML fallback extraction")
            return fallback(body)

        body_excerpt = excerpt(body, cls.EXCERPT_LENGTH)
        cls._log.warning(
            f"Response parsing failed. Status: {response.status_code}, "
            f"Content-Type: {content_type}, Body start: {body_excerpt}"
        )
        raise DecodeError(reason, response.status_code, content_type, body_excerpt)

    @staticmethod
    def content_type(response: Any) -> str:
        headers = getattr(response, "headers", None) or {}
        return (headers.get("content-type") or headers.get("Content-Type") or "").lower()

    @staticmethod
    def is_markup(content_type: str) -> bool:
        return any(marker in content_type for marker in MARKUP_CONTENT_TYPES)
