from __future__ import annotations

"""
moviesearch/records.py

Modelos de datos:

- PrimaryRecord / StreamingRecord / ReviewRecord: película vista por cada
  proveedor. Inmutables (los devuelve el decoder de cada proveedor).
- StreamingCatalog: página de resultados de streaming (secuencia + total explícito).
- CanonicalMovie: entidad fusionada que se devuelve y se persiste. Mutable:
  el Reconciler la crea y los pasos de enriquecimiento (streaming/review) la
  actualizan.

Ids
---
Todos los ids se guardan como `str` (TMDB y Netflix devuelven enteros,
Rotten Tomatoes strings) para tener claves homogéneas en el store.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

from moviesearch.title_utils import normalize_imdb_id, title_year_key


@dataclass(frozen=True, slots=True)
class PosterUrls:
    small: str | None = None
    medium: str | None = None
    large: str | None = None

    def is_empty(self) -> bool:
        return not (self.small or self.medium or self.large)


@dataclass(frozen=True, slots=True)
class PrimaryRecord:
    id: str
    title: str
    year: int | None = None
    imdb_id: str | None = None
    posters: PosterUrls = field(default_factory=PosterUrls)
    runtime_minutes: int | None = None
    synopsis: str | None = None
    cast: tuple[str, ...] = ()
    directors: tuple[str, ...] = ()
    homepage: str | None = None
    wikipedia_url: str | None = None


@dataclass(frozen=True, slots=True)
class StreamingRecord:
    id: str
    title: str
    year: int | None = None
    special_edition: bool = False
    posters: PosterUrls = field(default_factory=PosterUrls)
    runtime_minutes: int | None = None
    synopsis: str | None = None
    cast: tuple[str, ...] = ()
    directors: tuple[str, ...] = ()
    url: str | None = None
    official_url: str | None = None


@dataclass(frozen=True, slots=True)
class ReviewRecord:
    id: str
    title: str
    year: int | None = None
    imdb_id: str | None = None
    critics_score: int | None = None
    audience_score: int | None = None
    url: str | None = None


@dataclass(frozen=True, slots=True)
class StreamingCatalog:
    titles: tuple[StreamingRecord, ...] = ()
    total_entries: int = 0
    per_page: int = 0
    offset: int = 0


@dataclass
class CanonicalMovie:
    """
    Película canónica.

    Invariante (garantizada por Reconciler + store):
    - como mucho una CanonicalMovie por imdb_id no vacío.
    - sin imdb_id, la identidad es título normalizado + año.
    """

    title: str = ""
    year: int | None = None
    primary_id: str | None = None
    streaming_id: str | None = None
    review_id: str | None = None
    imdb_id: str | None = None
    runtime_minutes: int | None = None
    posters: PosterUrls = field(default_factory=PosterUrls)
    synopsis: str | None = None
    cast: list[str] = field(default_factory=list)
    directors: list[str] = field(default_factory=list)
    homepage: str | None = None
    wikipedia_url: str | None = None
    streaming_url: str | None = None
    review_url: str | None = None
    special_edition: bool = False
    review_score: int | None = None
    audience_score: int | None = None

    # ------------------------------------------------------------------
    # Identidad
    # ------------------------------------------------------------------

    @property
    def store_key(self) -> str:
        """Clave de persistencia: primary > streaming > título|año."""
        if self.primary_id:
            return f"primary:{self.primary_id}"
        if self.streaming_id:
            return f"streaming:{self.streaming_id}"
        return f"ty:{title_year_key(self.title, self.year)}"

    # ------------------------------------------------------------------
    # Enriquecimiento
    # ------------------------------------------------------------------

    def apply_primary(self, rec: PrimaryRecord) -> None:
        """El proveedor primario es autoritativo: sobrescribe lo que trae."""
        self.primary_id = rec.id
        self.title = rec.title
        if rec.year is not None:
            self.year = rec.year
        imdb = normalize_imdb_id(rec.imdb_id)
        if imdb:
            self.imdb_id = imdb
        if not rec.posters.is_empty():
            self.posters = rec.posters
        if rec.runtime_minutes:
            self.runtime_minutes = rec.runtime_minutes
        if rec.synopsis:
            self.synopsis = rec.synopsis
        if rec.cast:
            self.cast = list(rec.cast)
        if rec.directors:
            self.directors = list(rec.directors)
        if rec.homepage:
            self.homepage = rec.homepage
        if rec.wikipedia_url:
            self.wikipedia_url = rec.wikipedia_url

    def apply_streaming(self, rec: StreamingRecord) -> None:
        """Streaming solo rellena huecos (salvo id/edición/url, que son suyos)."""
        self.streaming_id = rec.id
        self.special_edition = rec.special_edition
        if rec.url:
            self.streaming_url = rec.url
        if not self.title:
            self.title = rec.title
        if self.year is None and rec.year is not None:
            self.year = rec.year
        if not self.synopsis and rec.synopsis:
            self.synopsis = rec.synopsis
        if not self.runtime_minutes and rec.runtime_minutes:
            self.runtime_minutes = rec.runtime_minutes
        if not self.cast and rec.cast:
            self.cast = list(rec.cast)
        if not self.directors and rec.directors:
            self.directors = list(rec.directors)
        if self.posters.is_empty() and not rec.posters.is_empty():
            self.posters = rec.posters
        if not self.homepage and rec.official_url:
            self.homepage = rec.official_url

    def apply_review(self, rec: ReviewRecord) -> None:
        self.review_id = rec.id
        if rec.critics_score is not None:
            self.review_score = rec.critics_score
        if rec.audience_score is not None:
            self.audience_score = rec.audience_score
        if rec.url:
            self.review_url = rec.url
        if not self.imdb_id:
            self.imdb_id = normalize_imdb_id(rec.imdb_id)

    # ------------------------------------------------------------------
    # Serialización (store)
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CanonicalMovie":
        posters_raw = data.get("posters") or {}
        posters = PosterUrls(
            small=posters_raw.get("small"),
            medium=posters_raw.get("medium"),
            large=posters_raw.get("large"),
        ) if isinstance(posters_raw, Mapping) else PosterUrls()

        year = data.get("year")
        return cls(
            title=str(data.get("title") or ""),
            year=int(year) if isinstance(year, (int, str)) and str(year).isdigit() else None,
            primary_id=data.get("primary_id"),
            streaming_id=data.get("streaming_id"),
            review_id=data.get("review_id"),
            imdb_id=data.get("imdb_id"),
            runtime_minutes=data.get("runtime_minutes"),
            posters=posters,
            synopsis=data.get("synopsis"),
            cast=list(data.get("cast") or []),
            directors=list(data.get("directors") or []),
            homepage=data.get("homepage"),
            wikipedia_url=data.get("wikipedia_url"),
            streaming_url=data.get("streaming_url"),
            review_url=data.get("review_url"),
            special_edition=bool(data.get("special_edition", False)),
            review_score=data.get("review_score"),
            audience_score=data.get("audience_score"),
        )
