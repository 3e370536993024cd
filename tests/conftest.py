import pytest
import requests
from requests.structures import CaseInsensitiveDict

from dreamcommerce.config import Config
from dreamcommerce.http_client import HttpClient


def make_response(status=200, body=b"", headers=None, reason="OK"):
    """Monta um ``requests.Response`` real sem passar pela rede."""
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    resp._content = body.encode("utf-8") if isinstance(body, str) else body
    resp.headers = CaseInsensitiveDict(headers or {})
    resp.url = "https://shop.example.com/webapi/rest/producers"
    return resp


def rate_limited(seconds="1"):
    return make_response(429, b"", {"Retry-After": seconds}, reason="Too Many Requests")


def ok_json(body='{"id": 7}'):
    return make_response(200, body, {"Content-Type": "application/json"})


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def session(mocker):
    s = requests.Session()
    mocker.patch.object(s, "request")
    return s


@pytest.fixture
def make_client(session, sleeps):
    def _make(retry_limit=5):
        return HttpClient(Config(retry_limit=retry_limit), session=session, sleep=sleeps.append)

    return _make


@pytest.fixture
def response():
    return make_response


@pytest.fixture
def limited():
    return rate_limited


@pytest.fixture
def ok():
    return ok_json
