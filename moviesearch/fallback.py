from __future__ import annotations

"""
moviesearch/fallback.py

Estrategias degradadas sobre datos ya persistidos.

- link_streaming_to_store: registros de streaming -> películas guardadas con
  ese streaming_id (actualizadas con el registro; NO se guardan aquí).
- pattern_search: búsqueda local por palabra completa, case-insensitive,
  ordenada por título. Último recurso cuando fallan todos los proveedores.
"""

import re
from collections.abc import Sequence

from moviesearch.records import CanonicalMovie, StreamingRecord
from moviesearch.store import Store


def title_pattern(term: str, *, no_escape: bool = False) -> re.Pattern[str]:
    """
    Término como palabra completa (sin carácter de palabra a los lados),
    ignorando mayúsculas.

    "matrix" encaja con "The Matrix" pero no con "Matrices"; "(500)" encaja con
    "(500) Days of Summer" (un \\b junto a "(" nunca encajaría).
    Con no_escape=True el término se usa como regex tal cual.
    """
    body = term if no_escape else re.escape(term.strip())
    return re.compile(rf"(?<!\w)(?:{body})(?!\w)", re.IGNORECASE)


def pattern_search(store: Store, term: str, *, no_escape: bool = False) -> list[CanonicalMovie]:
    if not term or not term.strip():
        return []
    return store.find_by_title_pattern(title_pattern(term, no_escape=no_escape))


def link_streaming_to_store(store: Store, streaming_records: Sequence[StreamingRecord]) -> list[CanonicalMovie]:
    """En el orden de streaming; los registros sin película guardada se descartan."""
    if not streaming_records:
        return []

    existing = store.find_by_streaming_id([rec.id for rec in streaming_records])
    out: list[CanonicalMovie] = []
    for rec in streaming_records:
        movie = existing.get(rec.id)
        if movie is None:
            continue
        movie.apply_streaming(rec)
        out.append(movie)
    return out
