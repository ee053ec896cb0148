from typing import List

import pytest
from pydantic import BaseModel

from announcement_monitor.core.extractor import ResponseExtractor
from announcement_monitor.core.models import DecodeError
from tests.fakes import FakeResponse, html_response, json_response


class Item(BaseModel):
    id: int
    title: str


class CountingFallback:
    def __init__(self, result):
        self.result = result
        self.bodies = []

    def __call__(self, body):
        self.bodies.append(body)
        return self.result


def test_valid_json_decoded_without_fallback():
    fallback = CountingFallback([])

    items = ResponseExtractor.extract(List[Item], json_response([{"id": 1, "title": "A"}]), fallback)

    assert items == [Item(id=1, title="A")]
    assert fallback.bodies == []


def test_markup_goes_straight_to_fallback():
    fallback = CountingFallback([Item(id=2, title="from html")])

    result = ResponseExtractor.extract(List[Item], html_response("<html><body>[]</body></html>"), fallback)

    assert result == [Item(id=2, title="from html")]
    assert fallback.bodies == ["<html><body>[]</body></html>"]


def test_invalid_json_uses_fallback_once():
    fallback = CountingFallback([])

    result = ResponseExtractor.extract(List[Item], FakeResponse(200, "{not json"), fallback)

    assert result == []
    assert len(fallback.bodies) == 1


def test_schema_mismatch_uses_fallback():
    fallback = CountingFallback("fallback")

    assert ResponseExtractor.extract(Item, json_response({"id": "x"}), fallback) == "fallback"


def test_decode_error_without_fallback_carries_capped_excerpt():
    body = "<html>" + "x" * 1000 + "</html>"

    with pytest.raises(DecodeError) as exc_info:
        ResponseExtractor.extract(Item, FakeResponse(503, body, "text/html"))

    error = exc_info.value
    assert error.status_code == 503
    assert error.content_type == "text/html"
    assert len(error.excerpt) <= 200
    assert error.excerpt == body[:200]


def test_xml_is_treated_as_markup():
    fallback = CountingFallback([])

    ResponseExtractor.extract(List[Item], FakeResponse(200, "[]", "application/xml"), fallback)

    assert len(fallback.bodies) == 1
