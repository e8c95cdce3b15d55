from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Generic, TypeVar

import pytest

from moviesearch.records import CanonicalMovie, PrimaryRecord, ReviewRecord, StreamingRecord
from moviesearch.run_metrics import METRICS
from moviesearch.store import InMemoryStore

T = TypeVar("T")


@dataclass
class FakeProvider(Generic[T]):
    """
    Provider programable: devuelve `records` o lanza `error`.

    - delay: segundos de espera antes de responder (simula timeouts).
    - calls: términos recibidos (y expand, para streaming).
    """

    records: list[T] = field(default_factory=list)
    error: BaseException | None = None
    delay: float = 0.0
    calls: list[tuple[str, tuple[str, ...]]] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def search(self, term: str, expand=()) -> list[T]:
        with self._lock:
            self.calls.append((term, tuple(expand)))
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.records)


class FailingSaveStore(InMemoryStore):
    """InMemoryStore que falla al guardar ciertas claves."""

    def __init__(self, failing_keys: set[str]) -> None:
        super().__init__()
        self.failing_keys = failing_keys

    def save(self, movie: CanonicalMovie) -> None:
        from moviesearch.errors import PersistenceError

        if movie.store_key in self.failing_keys:
            raise PersistenceError(f"disk full for {movie.store_key}")
        super().save(movie)


def primary(rid: str, title: str, year: int | None = 2010, imdb_id: str | None = None, **kw) -> PrimaryRecord:
    return PrimaryRecord(id=rid, title=title, year=year, imdb_id=imdb_id, **kw)


def streaming(rid: str, title: str, year: int | None = 2010, **kw) -> StreamingRecord:
    return StreamingRecord(id=rid, title=title, year=year, **kw)


def review(rid: str, title: str, year: int | None = 2010, **kw) -> ReviewRecord:
    return ReviewRecord(id=rid, title=title, year=year, **kw)


@pytest.fixture(autouse=True)
def _reset_metrics():
    METRICS.reset()
    yield
    METRICS.reset()


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()
