"""
NeighborResolver interface and implementations.

A resolver maps an entity identifier to its neighbor lists. It is the only
slow, failure-prone collaborator of a search and the explorer's only
suspension point besides persistence.

Contract:
- resolve(node_id) returns ResolvedLinks (links, optional backlinks, canonical title)
- Any failure surfaces as ResolutionError (or a subclass), never as an
  unrelated exception type, so the explorer can absorb it per node

Included implementations:
1. MappingResolver - static dict lookups (tests, offline fixtures)
2. WikipediaResolver - MediaWiki action API over HTTP
"""

from __future__ import annotations

import asyncio
import http.client
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib import error, parse, request

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_fixed

from .config import Config
from .logging_utils import log_error
from .schemas import ResolvedLinks


class ResolutionError(RuntimeError):
    """Raised when neighbors for an entity cannot be resolved."""

    def __init__(self, node_id: str, message: str) -> None:
        self.node_id = node_id
        super().__init__(f"Could not resolve {node_id!r}: {message}")


class UnknownEntityError(ResolutionError):
    """Raised when the entity does not exist in the external source."""


class ResolverTimeoutError(ResolutionError):
    """Raised when the lookup did not answer in time (after retries)."""


class NeighborResolver(ABC):
    """Abstract base class for neighbor lookups.

    Implementations are injected into FrontierExplorer; nothing in the search
    layer reaches for a module-level client.
    """

    @abstractmethod
    async def resolve(self, node_id: str) -> ResolvedLinks:
        """
        Fetch the neighbors of an entity.

        Args:
            node_id: Entity identifier (exact string)

        Returns:
            ResolvedLinks with outgoing links and, when supported, backlinks

        Raises:
            ResolutionError: If the entity is unknown or the lookup fails
        """
        pass


class MappingResolver(NeighborResolver):
    """Resolver backed by plain dicts.

    Every requested id is appended to ``calls`` so tests can assert which
    nodes were fetched and in what order. ``aliases`` maps alternate ids to
    their canonical id, the way a redirect does.
    """

    def __init__(
        self,
        links: Mapping[str, Sequence[str]],
        backlinks: Optional[Mapping[str, Sequence[str]]] = None,
        aliases: Optional[Mapping[str, str]] = None,
    ):
        self.links = {node: list(targets) for node, targets in links.items()}
        self.backlinks = (
            {node: list(sources) for node, sources in backlinks.items()}
            if backlinks is not None
            else None
        )
        self.aliases = dict(aliases or {})
        self.calls: List[str] = []

    async def resolve(self, node_id: str) -> ResolvedLinks:
        self.calls.append(node_id)
        title = self.aliases.get(node_id, node_id)
        if title not in self.links:
            raise UnknownEntityError(node_id, "no entry in mapping")

        backlinks = None
        if self.backlinks is not None:
            backlinks = list(self.backlinks.get(title, []))
        return ResolvedLinks(links=list(self.links[title]), backlinks=backlinks, title=title)


# =============================
# Wikipedia
# =============================

class WikipediaAPIError(RuntimeError):
    """Raised by the blocking HTTP layer; ``retryable`` marks transient failures."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        self.retryable = retryable
        super().__init__(message)


def _perform_wiki_request(
    api_url: str,
    params: Dict[str, Any],
    user_agent: str,
    timeout: float,
) -> Dict[str, Any]:
    """Execute one blocking GET against the MediaWiki action API."""

    query = parse.urlencode({**params, "format": "json", "formatversion": "2"})
    req = request.Request(f"{api_url}?{query}", headers={"User-Agent": user_agent})

    try:
        with request.urlopen(req, timeout=timeout) as resp:
            body = resp.read()
    except error.HTTPError as exc:
        # Throttling and server errors are worth another attempt
        retryable = exc.code == 429 or exc.code >= 500
        raise WikipediaAPIError(
            f"Wikipedia request failed with status {exc.code}: {exc.reason}",
            retryable=retryable,
        ) from exc
    except error.URLError as exc:
        if isinstance(exc.reason, TimeoutError):
            raise TimeoutError(str(exc.reason)) from exc
        raise WikipediaAPIError(
            f"Could not reach Wikipedia at {api_url}: {exc.reason}", retryable=True
        ) from exc
    except TimeoutError:
        raise
    except (OSError, http.client.HTTPException) as exc:
        # Dropped or truncated connections surface outside URLError
        raise WikipediaAPIError(
            f"Connection to Wikipedia at {api_url} failed: {exc!r}", retryable=True
        ) from exc

    try:
        parsed = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise WikipediaAPIError("Wikipedia returned non-JSON response.") from exc

    if "error" in parsed:
        info = parsed["error"].get("info") or parsed["error"].get("code")
        raise WikipediaAPIError(f"Wikipedia API error: {info}")

    return parsed


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, TimeoutError) or getattr(exc, "retryable", False)


class WikipediaResolver(NeighborResolver):
    """Resolve article links (and optionally backlinks) through the MediaWiki API.

    Article titles are node identifiers. Redirects are followed so the
    canonical title is reported in ``ResolvedLinks.title``; link targets are
    returned as Wikipedia lists them (namespace 0 only).

    Blocking urllib calls run in a worker thread. Transient failures
    (timeouts, HTTP 429/5xx, unreachable host) are retried with tenacity;
    whatever is left is raised as a ResolutionError subclass.
    """

    def __init__(
        self,
        *,
        api_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        retry_wait: float = 0.5,
        include_backlinks: bool = False,
        backlink_limit: Optional[int] = None,
    ):
        self.api_url = api_url or Config.WIKIPEDIA_API_URL
        self.user_agent = user_agent or Config.WIKIPEDIA_USER_AGENT
        self.timeout = timeout if timeout is not None else Config.RESOLVER_TIMEOUT_SECONDS
        self.max_attempts = (
            max_attempts if max_attempts is not None else Config.RESOLVER_MAX_ATTEMPTS
        )
        self.retry_wait = retry_wait
        self.include_backlinks = include_backlinks
        self.backlink_limit = backlink_limit

    async def resolve(self, node_id: str) -> ResolvedLinks:
        try:
            title, links = await self._fetch_links(node_id)
            backlinks = None
            if self.include_backlinks:
                backlinks = await self._fetch_backlinks(title)
        except TimeoutError as exc:
            raise ResolverTimeoutError(
                node_id, f"no answer within {self.timeout}s after {self.max_attempts} attempts"
            ) from exc
        except WikipediaAPIError as exc:
            raise ResolutionError(node_id, str(exc)) from exc

        return ResolvedLinks(links=links, backlinks=backlinks, title=title)

    async def _fetch_links(self, node_id: str) -> tuple[str, List[str]]:
        params: Dict[str, Any] = {
            "action": "query",
            "prop": "links",
            "titles": node_id,
            "plnamespace": 0,
            "pllimit": "max",
            "redirects": 1,
        }

        title = node_id
        # dict keeps first-seen order and drops repeats across continuation pages
        links: Dict[str, None] = {}
        while True:
            data = await self._query(params)
            for page in data.get("query", {}).get("pages", []):
                if page.get("missing") or page.get("invalid"):
                    raise UnknownEntityError(node_id, "no such Wikipedia article")
                title = page.get("title", title)
                for link in page.get("links", []):
                    links[link["title"]] = None
            cont = data.get("continue")
            if not cont:
                break
            params.update(cont)

        return title, list(links)

    async def _fetch_backlinks(self, title: str) -> List[str]:
        params: Dict[str, Any] = {
            "action": "query",
            "list": "backlinks",
            "bltitle": title,
            "blnamespace": 0,
            "bllimit": "max",
        }

        backlinks: Dict[str, None] = {}
        while True:
            data = await self._query(params)
            for item in data.get("query", {}).get("backlinks", []):
                backlinks[item["title"]] = None
            if self.backlink_limit is not None and len(backlinks) >= self.backlink_limit:
                return list(backlinks)[: self.backlink_limit]
            cont = data.get("continue")
            if not cont:
                break
            params.update(cont)

        return list(backlinks)

    async def _query(self, params: Dict[str, Any]) -> Dict[str, Any]:
        attempt_number = 0
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_wait),
            reraise=True,
        ):
            with attempt:
                attempt_number += 1
                if attempt_number > 1:
                    log_error(
                        f"Wikipedia retry {attempt_number}/{self.max_attempts} "
                        f"for {params.get('titles') or params.get('bltitle')}"
                    )
                return await asyncio.to_thread(
                    _perform_wiki_request,
                    self.api_url,
                    dict(params),
                    self.user_agent,
                    self.timeout,
                )

        # AsyncRetrying with reraise=True always exits via return or raise
        raise RuntimeError("Wikipedia retry mechanism exited unexpectedly")


__all__ = [
    "NeighborResolver",
    "ResolutionError",
    "UnknownEntityError",
    "ResolverTimeoutError",
    "MappingResolver",
    "WikipediaResolver",
    "WikipediaAPIError",
]
