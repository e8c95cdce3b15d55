from __future__ import annotations

"""
moviesearch/providers/netflix.py

Cliente del proveedor de streaming (catálogo Netflix, XML).

- search(term, expand=..., page=1, per_page=None) -> list[StreamingRecord]
- search_catalog(...) -> StreamingCatalog (con total/offset de la página)
- autocomplete(term) -> list[str] (títulos cortos)

Paginación: start_index = per_page * (page - 1).

Nota: la firma OAuth del catálogo es responsabilidad del transporte; aquí solo
se envía la consumer key como parámetro.
"""

from collections.abc import Iterable

from moviesearch.config_providers import ProviderConfig
from moviesearch.decoders import decode_streaming_autocomplete, decode_streaming_catalog
from moviesearch.errors import TransientProviderError
from moviesearch.http_client import HttpTransport
from moviesearch.records import StreamingCatalog, StreamingRecord


class NetflixClient:
    def __init__(self, config: ProviderConfig, *, transport: HttpTransport | None = None) -> None:
        self.config = config
        self._transport = transport or HttpTransport(config)

    def _require_key(self) -> None:
        if not self.config.enabled:
            raise TransientProviderError(self.config.name, "NETFLIX_CONSUMER_KEY not configured")

    def search_catalog(
        self,
        term: str,
        *,
        expand: Iterable[str] = (),
        page: int = 1,
        per_page: int | None = None,
    ) -> StreamingCatalog:
        self._require_key()

        size = int(per_page) if per_page else self.config.max_results
        offset = size * (max(1, int(page)) - 1)
        expand_list = sorted({e.strip() for e in expand if e and e.strip()})

        xml = self._transport.get_text(
            "catalog/titles",
            {
                "term": term,
                "max_results": size,
                "start_index": offset,
                "expand": ",".join(expand_list) if expand_list else None,
                "oauth_consumer_key": self.config.api_key,
            },
        )
        return decode_streaming_catalog(xml)

    def search(
        self,
        term: str,
        expand: Iterable[str] = (),
        *,
        page: int = 1,
        per_page: int | None = None,
    ) -> list[StreamingRecord]:
        return list(self.search_catalog(term, expand=expand, page=page, per_page=per_page).titles)

    def autocomplete(self, term: str) -> list[str]:
        self._require_key()
        xml = self._transport.get_text(
            "catalog/titles/autocomplete",
            {"term": term, "oauth_consumer_key": self.config.api_key},
        )
        return decode_streaming_autocomplete(xml)

    def close(self) -> None:
        self._transport.close()
