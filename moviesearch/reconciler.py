from __future__ import annotations

"""
moviesearch/reconciler.py

Reconciliación: registros primario + streaming -> drafts canónicos deduplicados.

Algoritmo (SearchBatch)
-----------------------
1) Pool de pendientes = registros primarios en orden del proveedor.
2) Para cada registro de streaming se busca destino:
     a) una película existente (store) cuyo streaming_id == id del registro:
        su registro primario (por primary_id, dentro del pool) es el destino;
     b) si no, el primer primario pendiente igual por título normalizado + año.
   El destino sale del pool y queda emparejado con ese registro de streaming.
   Un registro de streaming sin destino no genera draft.
3) Se construyen drafts recorriendo los primarios EN ORDEN DE ENTRADA, cada uno
   con su streaming emparejado (si lo hay):
     - existente por primary_id => se actualiza in-place; si no, draft nuevo
     - dedup: si el imdb_id resuelto ya salió en este batch, se descarta
       (gana el primero).
4) attach_reviews: pasada aparte, como mucho una review por draft; las reviews
   sin draft se ignoran.

Puro y síncrono: sin red, sin store, sin estado compartido.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from moviesearch import logger as logger
from moviesearch.records import CanonicalMovie, PrimaryRecord, ReviewRecord, StreamingRecord
from moviesearch.title_utils import normalize_imdb_id, titles_match


@dataclass
class SearchBatch:
    """Estado de trabajo de UNA llamada a search(term). Nunca se persiste."""

    primary: list[PrimaryRecord]
    existing: Mapping[str, CanonicalMovie]
    pending: list[PrimaryRecord] = field(default_factory=list)
    links: dict[str, StreamingRecord] = field(default_factory=dict)
    drafts: list[CanonicalMovie] = field(default_factory=list)
    imdb_ids: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.pending = list(self.primary)


class Reconciler:
    def __init__(self, *, year_tolerance: int = 0) -> None:
        self.year_tolerance = max(0, int(year_tolerance))

    # ------------------------------------------------------------------
    # Igualdad primario <-> streaming
    # ------------------------------------------------------------------

    def same_movie(self, primary: PrimaryRecord, streaming: StreamingRecord) -> bool:
        return titles_match(
            primary.title,
            primary.year,
            streaming.title,
            streaming.year,
            year_tolerance=self.year_tolerance,
        )

    def find_linked(self, batch: SearchBatch, streaming: StreamingRecord) -> PrimaryRecord | None:
        """Destino del registro de streaming dentro del pool de pendientes."""
        for movie in batch.existing.values():
            if movie.streaming_id and movie.streaming_id == streaming.id:
                for rec in batch.pending:
                    if rec.id == movie.primary_id:
                        return rec
                return None

        for rec in batch.pending:
            if self.same_movie(rec, streaming):
                return rec
        return None

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    def _make(
        self,
        batch: SearchBatch,
        primary: PrimaryRecord,
        streaming: StreamingRecord | None,
    ) -> CanonicalMovie | None:
        existing = batch.existing.get(primary.id)

        imdb = normalize_imdb_id(primary.imdb_id) or (existing.imdb_id if existing is not None else None)
        if imdb and imdb in batch.imdb_ids:
            logger.debug_ctx("RECONCILE", f"skip duplicate imdb={imdb} primary_id={primary.id}")
            return None

        movie = existing if existing is not None else CanonicalMovie()
        movie.apply_primary(primary)
        if streaming is not None:
            movie.apply_streaming(streaming)

        batch.drafts.append(movie)
        if movie.imdb_id:
            batch.imdb_ids.add(movie.imdb_id)
        return movie

    def reconcile(
        self,
        primary_records: Sequence[PrimaryRecord],
        streaming_records: Sequence[StreamingRecord],
        existing_by_primary_id: Mapping[str, CanonicalMovie] | None = None,
    ) -> list[CanonicalMovie]:
        batch = SearchBatch(primary=list(primary_records), existing=existing_by_primary_id or {})

        for streaming in streaming_records:
            target = self.find_linked(batch, streaming)
            if target is None:
                continue
            batch.pending.remove(target)
            batch.links[target.id] = streaming

        for primary in batch.primary:
            self._make(batch, primary, batch.links.get(primary.id))

        logger.debug_ctx(
            "RECONCILE",
            f"primary={len(batch.primary)} streaming={len(streaming_records)} "
            f"linked={len(batch.links)} drafts={len(batch.drafts)}",
        )
        return batch.drafts

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    def review_matches(self, movie: CanonicalMovie, review: ReviewRecord) -> bool:
        review_imdb = normalize_imdb_id(review.imdb_id)
        if movie.imdb_id and review_imdb:
            return movie.imdb_id == review_imdb
        return titles_match(
            movie.title,
            movie.year,
            review.title,
            review.year,
            year_tolerance=self.year_tolerance,
        )

    def attach_reviews(
        self,
        drafts: Sequence[CanonicalMovie],
        review_records: Sequence[ReviewRecord],
    ) -> list[CanonicalMovie]:
        """Consume del pool la primera review que encaja con cada draft."""
        pool = list(review_records)
        for movie in drafts:
            for idx, review in enumerate(pool):
                if self.review_matches(movie, review):
                    movie.apply_review(review)
                    del pool[idx]
                    break
        return list(drafts)
