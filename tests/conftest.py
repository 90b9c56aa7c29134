import json
from unittest.mock import MagicMock

import pytest
import requests

from notifications.channel import NotificationChannel
from service.api_client import MLServiceClient
from state.session_state import DatasetHandle
from workflow.controller import WorkflowController

BASE_URL = "http://ml.test"


def make_response(status_code=200, body=None, text=None):
    """A real `requests.Response` carrying a canned body."""
    response = requests.Response()
    response.status_code = status_code
    response.url = BASE_URL
    if body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode("utf-8")
    return response


class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.started = False
        self.cancelled = False
        self.daemon = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args, **self.kwargs)


@pytest.fixture
def timers():
    return []


@pytest.fixture
def channel(timers):
    def factory(*args, **kwargs):
        timer = FakeTimer(*args, **kwargs)
        timers.append(timer)
        return timer

    return NotificationChannel(timeout=5.0, timer_factory=factory)


@pytest.fixture
def http():
    session = MagicMock(spec=requests.Session)
    session.request.return_value = make_response(200, {})
    return session


@pytest.fixture
def client(http):
    return MLServiceClient(base_url=BASE_URL, timeout=3.0, session=http)


@pytest.fixture
def controller(client, channel):
    return WorkflowController(client=client, channel=channel)


@pytest.fixture
def csv_dataset():
    return DatasetHandle(name="data.csv", size=12, content_type="text/csv", content=b"a,b,y\n1,2,0\n")
