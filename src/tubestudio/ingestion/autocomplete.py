"""YouTube search suggestions via the public autocomplete endpoint."""

import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor

import httpx

from tubestudio.config import settings

logger = logging.getLogger(__name__)


class SuggestionFetcher:
    """Fetches autocomplete suggestions for short queries.

    Every failure (network, status, parse) degrades to an empty list:
    suggestions are grounding hints, never a reason to fail a request.
    """

    _ENVELOPE_RE = re.compile(r"window\.google\.ac\.h\((.*)\)", re.DOTALL)

    def __init__(
        self,
        client: httpx.Client | None = None,
        url: str | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._client = client or httpx.Client(timeout=settings.autocomplete_timeout)
        self._url = url or settings.autocomplete_url
        self._max_workers = max_workers or settings.autocomplete_workers

    def fetch_suggestions(self, query: str) -> list[str]:
        """Return suggestions for a query, most relevant first."""
        if not query or not query.strip():
            return []
        try:
            resp = self._client.get(
                self._url,
                params={"client": "youtube", "ds": "yt", "q": query},
            )
        except httpx.HTTPError as e:
            logger.debug("Suggestion request failed for %r: %s", query, e)
            return []
        if resp.status_code != 200:
            logger.debug("Suggestion request for %r returned HTTP %d", query, resp.status_code)
            return []
        return self.parse_response(resp.text)

    def fetch_many(self, queries: list[str]) -> list[list[str]]:
        """Fetch suggestions for several queries concurrently.

        Results line up with ``queries`` by index regardless of the order
        in which requests complete.
        """
        if not queries:
            return []
        results: list[list[str]] = [[] for _ in queries]
        workers = min(self._max_workers, len(queries))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self.fetch_suggestions, q): i for i, q in enumerate(queries)}
            for future, index in futures.items():
                try:
                    results[index] = future.result()
                except Exception as e:
                    logger.warning("Suggestion fetch for %r failed: %s", queries[index], e)
        return results

    def fetch_map(self, queries: list[str]) -> dict[str, list[str]]:
        """Fetch suggestions keyed by query (duplicates collapse to one entry)."""
        unique = list(dict.fromkeys(queries))
        return dict(zip(unique, self.fetch_many(unique)))

    @classmethod
    def parse_response(cls, text: str) -> list[str]:
        """Parse ``window.google.ac.h([...])`` or a bare ``[query, [...]]`` array."""
        match = cls._ENVELOPE_RE.search(text)
        payload = match.group(1) if match else text.strip()
        try:
            data = json.loads(payload)
        except json.JSONDecodeError:
            logger.debug("Unparseable suggestion payload: %.100s", text)
            return []

        if not isinstance(data, list) or len(data) < 2 or not isinstance(data[1], list):
            return []

        suggestions = []
        for item in data[1]:
            if isinstance(item, list) and item:
                suggestions.append(str(item[0]))
            elif isinstance(item, str):
                suggestions.append(item)
        return suggestions
