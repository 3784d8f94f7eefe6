"""Tests for neighbor resolvers, with the HTTP layer monkeypatched."""

import http.client
import json
from urllib import request

import pytest

from sixdegrees.config import Config
from sixdegrees.resolver import (
    MappingResolver,
    ResolutionError,
    ResolverTimeoutError,
    UnknownEntityError,
    WikipediaAPIError,
    WikipediaResolver,
)


@pytest.mark.asyncio
async def test_mapping_resolver_serves_links_and_records_calls():
    resolver = MappingResolver({"A": ["B", "C"]}, backlinks={"A": ["Z"]})

    resolved = await resolver.resolve("A")

    assert resolved.links == ["B", "C"]
    assert resolved.backlinks == ["Z"]
    assert resolved.title == "A"
    assert resolver.calls == ["A"]


@pytest.mark.asyncio
async def test_mapping_resolver_unknown_entity():
    resolver = MappingResolver({})

    with pytest.raises(UnknownEntityError) as excinfo:
        await resolver.resolve("Nobody")

    assert isinstance(excinfo.value, ResolutionError)
    assert excinfo.value.node_id == "Nobody"


@pytest.mark.asyncio
async def test_wikipedia_resolver_follows_continuation_and_redirects(monkeypatch):
    requests: list[dict] = []
    responses = [
        {
            "continue": {"plcontinue": "123|0|Footloose", "continue": "||"},
            "query": {
                "redirects": [{"from": "Bacon", "to": "Kevin Bacon"}],
                "pages": [{"title": "Kevin Bacon", "links": [{"ns": 0, "title": "Apollo 13"}]}],
            },
        },
        {
            "query": {
                "pages": [
                    {
                        "title": "Kevin Bacon",
                        "links": [
                            {"ns": 0, "title": "Footloose"},
                            {"ns": 0, "title": "Apollo 13"},
                        ],
                    }
                ]
            },
        },
    ]

    def fake_request(api_url, params, user_agent, timeout):
        requests.append(params)
        return responses[len(requests) - 1]

    monkeypatch.setattr("sixdegrees.resolver._perform_wiki_request", fake_request)

    resolver = WikipediaResolver(api_url="http://wiki.test/api.php", timeout=5)
    resolved = await resolver.resolve("Bacon")

    assert resolved.title == "Kevin Bacon"
    assert resolved.links == ["Apollo 13", "Footloose"]
    assert resolved.backlinks is None
    assert requests[0]["titles"] == "Bacon"
    assert requests[0]["redirects"] == 1
    assert requests[1]["plcontinue"] == "123|0|Footloose"


@pytest.mark.asyncio
async def test_wikipedia_resolver_fetches_backlinks_with_limit(monkeypatch):
    def fake_request(api_url, params, user_agent, timeout):
        if params.get("prop") == "links":
            return {"query": {"pages": [{"title": "Footloose", "links": []}]}}
        assert params["bltitle"] == "Footloose"
        return {
            "continue": {"blcontinue": "0|99"},
            "query": {"backlinks": [{"title": "Kevin Bacon"}, {"title": "Lori Singer"}]},
        }

    monkeypatch.setattr("sixdegrees.resolver._perform_wiki_request", fake_request)

    resolver = WikipediaResolver(include_backlinks=True, backlink_limit=2)
    resolved = await resolver.resolve("Footloose")

    assert resolved.links == []
    assert resolved.backlinks == ["Kevin Bacon", "Lori Singer"]


@pytest.mark.asyncio
async def test_wikipedia_resolver_missing_page(monkeypatch):
    def fake_request(api_url, params, user_agent, timeout):
        return {"query": {"pages": [{"title": "Nope Nope", "missing": True}]}}

    monkeypatch.setattr("sixdegrees.resolver._perform_wiki_request", fake_request)

    with pytest.raises(UnknownEntityError):
        await WikipediaResolver().resolve("Nope Nope")


@pytest.mark.asyncio
async def test_wikipedia_resolver_retries_transient_failures(monkeypatch):
    attempts = {"count": 0}

    def fake_request(api_url, params, user_agent, timeout):
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise WikipediaAPIError("status 503", retryable=True)
        return {"query": {"pages": [{"title": "Kevin Bacon", "links": [{"title": "Diner"}]}]}}

    monkeypatch.setattr("sixdegrees.resolver._perform_wiki_request", fake_request)

    resolver = WikipediaResolver(max_attempts=3, retry_wait=0)
    resolved = await resolver.resolve("Kevin Bacon")

    assert resolved.links == ["Diner"]
    assert attempts["count"] == 3


@pytest.mark.asyncio
async def test_wikipedia_resolver_gives_up_with_resolution_error(monkeypatch):
    attempts = {"count": 0}

    def fake_request(api_url, params, user_agent, timeout):
        attempts["count"] += 1
        raise WikipediaAPIError("status 400", retryable=False)

    monkeypatch.setattr("sixdegrees.resolver._perform_wiki_request", fake_request)

    with pytest.raises(ResolutionError, match="status 400"):
        await WikipediaResolver(max_attempts=3, retry_wait=0).resolve("Kevin Bacon")

    # Non-transient errors are not retried
    assert attempts["count"] == 1


@pytest.mark.asyncio
async def test_wikipedia_resolver_timeout(monkeypatch):
    def fake_request(api_url, params, user_agent, timeout):
        raise TimeoutError("timed out")

    monkeypatch.setattr("sixdegrees.resolver._perform_wiki_request", fake_request)

    with pytest.raises(ResolverTimeoutError) as excinfo:
        await WikipediaResolver(max_attempts=2, retry_wait=0).resolve("Kevin Bacon")

    assert excinfo.value.node_id == "Kevin Bacon"


class FakeHTTPResponse:
    """Stand-in for the object urlopen yields inside its context manager."""

    def __init__(self, body=b"", error=None):
        self.body = body
        self.error = error

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def read(self):
        if self.error is not None:
            raise self.error
        return self.body


@pytest.mark.asyncio
async def test_wikipedia_resolver_wraps_dropped_connections(monkeypatch):
    attempts = {"count": 0}

    def fake_urlopen(req, timeout):
        attempts["count"] += 1
        raise http.client.RemoteDisconnected("Remote end closed connection")

    monkeypatch.setattr(request, "urlopen", fake_urlopen)

    with pytest.raises(ResolutionError, match="Remote end closed connection"):
        await WikipediaResolver(max_attempts=2, retry_wait=0).resolve("Kevin Bacon")

    # Dropped connections are transient and get retried
    assert attempts["count"] == 2


@pytest.mark.asyncio
async def test_wikipedia_resolver_retries_reset_during_read(monkeypatch):
    responses = [
        FakeHTTPResponse(error=ConnectionResetError("reset by peer")),
        FakeHTTPResponse(error=http.client.IncompleteRead(b"{")),
        FakeHTTPResponse(
            json.dumps({"query": {"pages": [{"title": "Kevin Bacon", "links": [{"title": "Diner"}]}]}}).encode()
        ),
    ]
    monkeypatch.setattr(request, "urlopen", lambda req, timeout: responses.pop(0))

    resolved = await WikipediaResolver(max_attempts=3, retry_wait=0).resolve("Kevin Bacon")

    assert resolved.links == ["Diner"]
    assert responses == []


@pytest.mark.asyncio
async def test_wikipedia_resolver_rejects_undecodable_body(monkeypatch):
    attempts = {"count": 0}

    def fake_urlopen(req, timeout):
        attempts["count"] += 1
        return FakeHTTPResponse(b"\xff\xfe{}")

    monkeypatch.setattr(request, "urlopen", fake_urlopen)

    with pytest.raises(ResolutionError, match="non-JSON"):
        await WikipediaResolver(max_attempts=3, retry_wait=0).resolve("Kevin Bacon")

    assert attempts["count"] == 1


def test_wikipedia_resolver_keeps_explicit_zero_settings():
    resolver = WikipediaResolver(timeout=0, max_attempts=0)
    assert resolver.timeout == 0
    assert resolver.max_attempts == 0

    defaults = WikipediaResolver()
    assert defaults.timeout == Config.RESOLVER_TIMEOUT_SECONDS
    assert defaults.max_attempts == Config.RESOLVER_MAX_ATTEMPTS


@pytest.mark.asyncio
async def test_mapping_resolver_reports_canonical_title_for_aliases():
    resolver = MappingResolver({"Kevin Bacon": ["Footloose"]}, aliases={"Bacon": "Kevin Bacon"})

    resolved = await resolver.resolve("Bacon")

    assert resolved.title == "Kevin Bacon"
    assert resolved.links == ["Footloose"]
    assert resolver.calls == ["Bacon"]
