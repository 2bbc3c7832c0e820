import json
import logging
from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from simple_relevance import ClientConfig, SimpleRelevanceClient, set_debug


class FakeTransport:
    """Stands in for Session.send: records prepared requests, returns canned responses."""

    def __init__(self, status=200, body=b'{"ok": true}', error=None):
        self.status = status
        self.body = body
        self.error = error
        self.sent = []
        self.kwargs = []

    def __call__(self, prepared, **kwargs):
        self.sent.append(prepared)
        self.kwargs.append(kwargs)
        if self.error is not None:
            raise self.error
        resp = requests.Response()
        resp.status_code = self.status
        resp._content = self.body
        resp.headers["Content-Type"] = "application/json"
        resp.url = prepared.url
        resp.request = prepared
        return resp

    @property
    def last(self):
        return self.sent[-1]

    def json_body(self, i=-1):
        return json.loads(self.sent[i].body)

    def query(self, i=-1):
        return parse_qs(urlsplit(self.sent[i].url).query)


@pytest.fixture
def config():
    return ClientConfig(username="user", api_key="secret")


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(config, transport):
    c = SimpleRelevanceClient(config)
    c.session.send = transport
    yield c
    c.close()


@pytest.fixture
def patched_session(monkeypatch, transport):
    """Route every requests.Session in the process to the fake transport."""
    monkeypatch.setattr(requests.Session, "send", lambda self, prepared, **kw: transport(prepared, **kw))
    return transport


@pytest.fixture(autouse=True)
def debug_off():
    yield
    set_debug(False)


@pytest.fixture
def transport_factory():
    return FakeTransport


@pytest.fixture
def package_log(caplog):
    """caplog wired straight to the package logger, which does not propagate."""
    logger = logging.getLogger("simple_relevance")
    caplog.set_level(logging.DEBUG, logger="simple_relevance")
    logger.addHandler(caplog.handler)
    yield caplog
    logger.removeHandler(caplog.handler)
