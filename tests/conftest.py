import io
import json
import logging

import pytest
import requests

from codegame.config import Dirs


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, content=b"", headers=None):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """
    Records GET requests and answers them from a queue of responses.

    Queue entries are FakeResponse objects or exceptions to raise.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": dict(headers or {}), "timeout": timeout})
        if not self.responses:
            raise AssertionError(f"unexpected request to {url}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


def json_response(data, etag=None, status_code=200):
    headers = {"ETag": etag} if etag is not None else {}
    return FakeResponse(status_code, json.dumps(data).encode("utf-8"), headers)


def not_modified():
    return FakeResponse(304)


@pytest.fixture
def dirs(tmp_path) -> Dirs:
    """Directories rooted in a temporary directory."""
    return Dirs(
        cache_dir=tmp_path / "cache",
        data_dir=tmp_path / "data",
        config_dir=tmp_path / "config",
    )


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("codegame")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    log_stream.close()


@pytest.fixture
def make_json_response():
    return json_response


@pytest.fixture
def make_not_modified():
    return not_modified


@pytest.fixture
def make_response():
    return FakeResponse
