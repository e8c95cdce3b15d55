import pytest
import requests

from moviesearch.config_providers import ProviderConfig
from moviesearch.errors import ParseError, TransientProviderError
from moviesearch.http_client import HttpTransport, build_session
from moviesearch.run_metrics import METRICS


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def close(self):
        self.closed = True


def _config(**kw):
    return ProviderConfig(name="tmdb", base_url="http://api.test/3", api_key="k", **kw)


def test_get_json_builds_url_and_drops_none_params():
    session = FakeSession([FakeResponse(payload={"results": []})])
    transport = HttpTransport(_config(timeout_seconds=3.0), session=session)

    out = transport.get_json("/search/movie", {"query": "heat", "year": None})

    assert out == {"results": []}
    assert session.calls == [("http://api.test/3/search/movie", {"query": "heat"}, 3.0)]
    assert METRICS.snapshot()["counters"]["http.tmdb.requests"] == 1


def test_http_errors_are_transient():
    session = FakeSession([FakeResponse(status_code=503), requests.ConnectionError("refused")])
    transport = HttpTransport(_config(), session=session)

    with pytest.raises(TransientProviderError):
        transport.get_json("search/movie")
    with pytest.raises(TransientProviderError):
        transport.get_json("search/movie")

    counters = METRICS.snapshot()["counters"]
    assert counters["http.tmdb.status_503"] == 1
    assert counters["http.tmdb.failures"] == 1


def test_invalid_json_is_parse_error():
    session = FakeSession([FakeResponse(text="<html>oops</html>")])
    transport = HttpTransport(_config(), session=session)

    with pytest.raises(ParseError) as excinfo:
        transport.get_json("search/movie")
    assert "oops" in str(excinfo.value)


def test_breaker_opens_after_threshold():
    session = FakeSession([FakeResponse(status_code=500), FakeResponse(status_code=500)])
    transport = HttpTransport(_config(breaker_threshold=2, breaker_open_seconds=60.0), session=session)

    for _ in range(2):
        with pytest.raises(TransientProviderError):
            transport.get_text("catalog/titles")

    with pytest.raises(TransientProviderError) as excinfo:
        transport.get_text("catalog/titles")
    assert "circuit open" in str(excinfo.value)
    assert len(session.calls) == 2


def test_close_releases_session():
    session = FakeSession([])
    transport = HttpTransport(_config(), session=session)

    transport.close()

    assert session.closed is True


def test_build_session_sets_headers_and_retries():
    session = build_session(_config(retry_total=3, user_agent="ua/1"))
    try:
        assert session.headers["User-Agent"] == "ua/1"
        adapter = session.get_adapter("https://api.test/")
        assert adapter.max_retries.total == 3
        assert 503 in adapter.max_retries.status_forcelist
    finally:
        session.close()
