from __future__ import annotations

"""
moviesearch/providers/tmdb.py

Cliente del proveedor primario (TMDB, API v3).

search(term) -> list[PrimaryRecord] en el orden de relevancia del proveedor,
recortado a config.max_results.
"""

from moviesearch.config_providers import ProviderConfig
from moviesearch.decoders import decode_primary_search
from moviesearch.errors import TransientProviderError
from moviesearch.http_client import HttpTransport
from moviesearch.records import PrimaryRecord

_DEFAULT_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"


class TmdbClient:
    def __init__(self, config: ProviderConfig, *, transport: HttpTransport | None = None) -> None:
        self.config = config
        self._transport = transport or HttpTransport(config)

    def search(self, term: str) -> list[PrimaryRecord]:
        if not self.config.enabled:
            raise TransientProviderError(self.config.name, "TMDB_API_KEY not configured")

        payload = self._transport.get_json(
            "search/movie",
            {
                "api_key": self.config.api_key,
                "query": term,
                "page": 1,
                "include_adult": "false",
            },
        )
        records = decode_primary_search(
            payload,
            image_base_url=self.config.image_base_url or _DEFAULT_IMAGE_BASE_URL,
        )
        return records[: self.config.max_results]

    def close(self) -> None:
        self._transport.close()
