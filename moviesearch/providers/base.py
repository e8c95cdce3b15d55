"""
Contratos que consume el core de búsqueda.

Cualquier objeto con estos métodos sirve (clientes HTTP reales o fakes de test).
Errores esperados: TransientProviderError / ParseError (moviesearch.errors).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from moviesearch.records import PrimaryRecord, ReviewRecord, StreamingRecord


class PrimaryProvider(Protocol):
    def search(self, term: str) -> list[PrimaryRecord]: ...


class StreamingProvider(Protocol):
    def search(self, term: str, expand: Iterable[str] = ()) -> list[StreamingRecord]: ...


class ReviewProvider(Protocol):
    def search(self, term: str) -> list[ReviewRecord]: ...
