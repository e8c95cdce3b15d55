from __future__ import annotations

"""
moviesearch/providers/rotten.py

Cliente del proveedor de reviews (Rotten Tomatoes, JSON).
"""

from moviesearch.config_providers import ProviderConfig
from moviesearch.decoders import decode_review_search
from moviesearch.errors import TransientProviderError
from moviesearch.http_client import HttpTransport
from moviesearch.records import ReviewRecord


class RottenTomatoesClient:
    def __init__(self, config: ProviderConfig, *, transport: HttpTransport | None = None) -> None:
        self.config = config
        self._transport = transport or HttpTransport(config)

    def search(self, term: str) -> list[ReviewRecord]:
        if not self.config.enabled:
            raise TransientProviderError(self.config.name, "ROTTEN_API_KEY not configured")

        payload = self._transport.get_json(
            "movies.json",
            {"apikey": self.config.api_key, "q": term, "page_limit": self.config.max_results},
        )
        return decode_review_search(payload)

    def close(self) -> None:
        self._transport.close()
