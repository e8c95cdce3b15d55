from __future__ import annotations

"""
moviesearch/orchestrator.py

Orquestador de búsqueda: proveedores -> reconciliación -> persistencia,
con cadena de fallback.

Flujo de search(term)
---------------------
1) combined   : primario + streaming + reviews EN PARALELO (ThreadPool, deadline
                por llamada). Primario caído/timeout/vacío => paso 2.
                Streaming/reviews caídos => lista vacía para ese proveedor.
                Reconciler.reconcile + attach_reviews + save por draft.
2) streaming  : solo streaming; enlaza por streaming_id con películas guardadas,
                actualiza y guarda. Sin resultados enlazados => paso 3.
3) pattern    : búsqueda local por palabra completa sobre títulos guardados.
                Si el store no responde aquí, el error llega al caller.

Errores
-------
- TransientProviderError / ParseError / timeout: recuperables; se loguean con el
  término de búsqueda y se registran en METRICS.
- PersistenceError: por draft; se loguea y se sigue con el resto del batch.
- Cualquier otro error de un proveedor se propaga (bug, no degradación).

Sin reintentos (viven en el transporte) y sin estado compartido entre búsquedas
salvo el store y METRICS.
"""

import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import Literal, TypeVar

from moviesearch import logger as logger
from moviesearch.errors import (
    RECOVERABLE_PROVIDER_ERRORS,
    PersistenceError,
    StoreUnavailableError,
    TransientProviderError,
)
from moviesearch.fallback import link_streaming_to_store, pattern_search
from moviesearch.providers.base import PrimaryProvider, ReviewProvider, StreamingProvider
from moviesearch.reconciler import Reconciler
from moviesearch.records import CanonicalMovie
from moviesearch.run_metrics import METRICS
from moviesearch.store import Store

T = TypeVar("T")

SearchPath = Literal["combined", "streaming", "pattern"]

STREAMING_EXPAND: tuple[str, ...] = ("synopsis", "directors")

# Errores que hacen caer un camino completo (no solo un proveedor opcional).
_PATH_FAILURES: tuple[type[BaseException], ...] = RECOVERABLE_PROVIDER_ERRORS + (StoreUnavailableError,)


@dataclass(frozen=True)
class SearchResult:
    movies: list[CanonicalMovie]
    path: SearchPath


class SearchOrchestrator:
    def __init__(
        self,
        *,
        primary: PrimaryProvider,
        streaming: StreamingProvider,
        review: ReviewProvider,
        store: Store,
        reconciler: Reconciler | None = None,
        provider_timeout_seconds: float = 8.0,
    ) -> None:
        self.primary = primary
        self.streaming = streaming
        self.review = review
        self.store = store
        self.reconciler = reconciler or Reconciler()
        self.provider_timeout_seconds = max(0.01, float(provider_timeout_seconds))

    # ------------------------------------------------------------------
    # API pública
    # ------------------------------------------------------------------

    def search(self, term: str) -> list[CanonicalMovie]:
        return self.search_with_path(term).movies

    def search_with_path(self, term: str) -> SearchResult:
        term = (term or "").strip()
        if not term:
            return SearchResult(movies=[], path="pattern")

        METRICS.incr("search.calls")
        t0 = time.monotonic()
        try:
            return self._run_chain(term)
        finally:
            METRICS.observe_ms("search.latency_ms", (time.monotonic() - t0) * 1000.0)

    # ------------------------------------------------------------------
    # Cadena de fallback
    # ------------------------------------------------------------------

    def _run_chain(self, term: str) -> SearchResult:
        try:
            combined = self._search_combined(term)
        except _PATH_FAILURES as exc:
            self._record_failure("combined", term, exc)
            combined = None

        if combined is not None:
            METRICS.incr("search.path.combined")
            return SearchResult(movies=combined, path="combined")

        METRICS.incr("search.fallback.streaming")
        try:
            linked = self._search_streaming_only(term)
        except _PATH_FAILURES as exc:
            self._record_failure("streaming", term, exc)
            linked = []

        if linked:
            return SearchResult(movies=linked, path="streaming")

        METRICS.incr("search.fallback.pattern")
        logger.info(f"[SEARCH] pattern search over stored titles term={term!r}")
        return SearchResult(movies=pattern_search(self.store, term), path="pattern")

    def _record_failure(self, path: str, term: str, exc: BaseException) -> None:
        logger.warning(f"[SEARCH] {path} search failed term={term!r}: {exc}", always=True)
        METRICS.add_error(getattr(exc, "provider", path), f"search.{path}", term=term, detail=repr(exc))

    # ------------------------------------------------------------------
    # Paso 1: combined
    # ------------------------------------------------------------------

    def _search_combined(self, term: str) -> list[CanonicalMovie] | None:
        """None => el primario no trajo nada utilizable (pasar a fallback)."""
        executor = ThreadPoolExecutor(max_workers=3, thread_name_prefix="moviesearch")
        try:
            deadline = time.monotonic() + self.provider_timeout_seconds
            f_primary = executor.submit(self.primary.search, term)
            f_streaming = executor.submit(self.streaming.search, term, STREAMING_EXPAND)
            f_review = executor.submit(self.review.search, term)

            try:
                primary = self._await("primary", f_primary, deadline)
            except RECOVERABLE_PROVIDER_ERRORS:
                f_streaming.cancel()
                f_review.cancel()
                raise

            # Sin año no hay identidad fiable para enlazar.
            primary = [rec for rec in primary if rec.year is not None]
            if not primary:
                f_streaming.cancel()
                f_review.cancel()
                logger.info(f"[SEARCH] primary provider returned nothing usable term={term!r}")
                return None

            streaming = self._degraded("streaming", f_streaming, deadline, term)
            reviews = self._degraded("review", f_review, deadline, term)
        finally:
            # No esperamos a llamadas en vuelo que ya no se necesitan.
            executor.shutdown(wait=False, cancel_futures=True)

        existing = self.store.find_by_primary_id([rec.id for rec in primary])
        drafts = self.reconciler.reconcile(primary, streaming, existing)
        self.reconciler.attach_reviews(drafts, reviews)
        self._persist(drafts, term)
        return drafts

    def _await(self, name: str, future: Future[T], deadline: float) -> T:
        remaining = max(0.0, deadline - time.monotonic())
        try:
            return future.result(timeout=remaining)
        except FuturesTimeoutError as exc:
            future.cancel()
            raise TransientProviderError(name, f"timed out after {self.provider_timeout_seconds:.1f}s") from exc

    def _degraded(self, name: str, future: Future[Sequence[T]], deadline: float, term: str) -> list[T]:
        """Proveedor opcional: error recuperable => [] (nunca escala)."""
        try:
            return list(self._await(name, future, deadline))
        except RECOVERABLE_PROVIDER_ERRORS as exc:
            logger.warning(f"[SEARCH] {name} provider unavailable term={term!r}: {exc}", always=True)
            METRICS.incr(f"search.degraded.{name}")
            METRICS.add_error(name, "search", term=term, detail=repr(exc))
            return []

    # ------------------------------------------------------------------
    # Paso 2: solo streaming
    # ------------------------------------------------------------------

    def _call_with_timeout(self, name: str, fn: Callable[[], T]) -> T:
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="moviesearch")
        try:
            deadline = time.monotonic() + self.provider_timeout_seconds
            return self._await(name, executor.submit(fn), deadline)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _search_streaming_only(self, term: str) -> list[CanonicalMovie]:
        records = self._call_with_timeout("streaming", lambda: self.streaming.search(term, STREAMING_EXPAND))
        if not records:
            return []

        linked = link_streaming_to_store(self.store, records)
        logger.debug_ctx("SEARCH", f"streaming-only term={term!r} records={len(records)} linked={len(linked)}")
        self._persist(linked, term)
        return linked

    # ------------------------------------------------------------------
    # Persistencia
    # ------------------------------------------------------------------

    def _persist(self, movies: Sequence[CanonicalMovie], term: str) -> None:
        """Independiente por draft: un fallo no aborta el resto."""
        for movie in movies:
            try:
                self.store.save(movie)
            except PersistenceError as exc:
                logger.error(f"[SEARCH] could not save {movie.store_key} term={term!r}: {exc}")
                METRICS.incr("search.persistence_errors")
                METRICS.add_error("store", "save", term=term, detail=repr(exc))
