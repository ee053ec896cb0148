import pytest

from announcement_monitor.core.http_client import HttpClient
from tests.fakes import FakeSession, RecordingSleep


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def make_client(sleep):
    def _make(routes, rotator=None, name="Test"):
        return HttpClient(rotator, name, session=FakeSession(routes), sleep=sleep)

    return _make
