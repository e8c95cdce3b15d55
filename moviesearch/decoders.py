from __future__ import annotations

"""
moviesearch/decoders.py

Decoders tipados: una función pura por proveedor, payload crudo -> records.

- decode_primary_search(payload, image_base_url=None)  (JSON TMDB)
- decode_streaming_catalog(xml)                         (XML catálogo Netflix)
- decode_streaming_autocomplete(xml)                    (XML autocomplete Netflix)
- decode_review_search(payload)                         (JSON Rotten Tomatoes)

Reglas
------
- Forma inválida del payload (no es objeto, lista ausente, XML roto) => ParseError.
- Un item concreto sin id o sin título se descarta (no invalida la página).
- Campos opcionales con tipos raros => None (cast defensivo).
- Sin logging ni red: solo datos.
"""

import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping, Sequence
from typing import Final

from moviesearch.errors import ParseError
from moviesearch.records import (
    PosterUrls,
    PrimaryRecord,
    ReviewRecord,
    StreamingCatalog,
    StreamingRecord,
)
from moviesearch.title_utils import normalize_imdb_id, split_special_edition

_DIGITS_RE: Final[re.Pattern[str]] = re.compile(r"\d+")
_YEAR_PREFIX_RE: Final[re.Pattern[str]] = re.compile(r"^((?:18|19|20)\d{2})")
_WIKIPEDIA_HOST_RE: Final[re.Pattern[str]] = re.compile(r"^https?://([a-z0-9-]+\.)*wikipedia\.org(/|$)", re.IGNORECASE)

# Tamaños TMDB para small/medium/large.
_TMDB_POSTER_SIZES: Final[tuple[str, str, str]] = ("w92", "w185", "w500")


# ============================================================
# AUX: cast defensivo
# ============================================================


def _safe_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip().replace(",", ""))
    except (TypeError, ValueError):
        return None


def _safe_str(value: object) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _safe_year(value: object) -> int | None:
    """2010, "2010", "2010-07-15" -> 2010. Vacío/"N/A" -> None."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value if value > 0 else None
    s = _safe_str(value)
    if not s:
        return None
    m = _YEAR_PREFIX_RE.match(s)
    return int(m.group(1)) if m else None


def _names(value: object) -> tuple[str, ...]:
    """Acepta ["A", "B"] o [{"name": "A"}, ...]."""
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        return ()
    out: list[str] = []
    for item in value:
        name = item.get("name") if isinstance(item, Mapping) else item
        s = _safe_str(name)
        if s:
            out.append(s)
    return tuple(out)


def _results_list(payload: object, key: str, *, provider: str) -> list[object]:
    if not isinstance(payload, Mapping):
        raise ParseError(provider, f"expected JSON object, got {type(payload).__name__}")
    items = payload.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise ParseError(provider, f"{key!r} is not a list")
    return items


# ============================================================
# PRIMARIO (TMDB)
# ============================================================


def _split_homepage(item: Mapping[str, object]) -> tuple[str | None, str | None]:
    """(homepage, wikipedia_url). Una homepage en wikipedia.org cuenta como Wikipedia."""
    homepage = _safe_str(item.get("homepage"))
    wikipedia = _safe_str(item.get("wikipedia_url"))
    if homepage and _WIKIPEDIA_HOST_RE.match(homepage):
        return None, wikipedia or homepage
    return homepage, wikipedia


def _tmdb_posters(item: Mapping[str, object], image_base_url: str | None) -> PosterUrls:
    explicit = item.get("posters")
    if isinstance(explicit, Mapping):
        return PosterUrls(
            small=_safe_str(explicit.get("small")),
            medium=_safe_str(explicit.get("medium")),
            large=_safe_str(explicit.get("large")),
        )

    path = _safe_str(item.get("poster_path"))
    if not path or not image_base_url:
        return PosterUrls()

    base = image_base_url.rstrip("/")
    small, medium, large = (f"{base}/{size}{path}" for size in _TMDB_POSTER_SIZES)
    return PosterUrls(small=small, medium=medium, large=large)


def decode_primary_search(payload: object, *, image_base_url: str | None = None) -> list[PrimaryRecord]:
    """Respuesta de búsqueda TMDB -> PrimaryRecord en el orden del proveedor."""
    out: list[PrimaryRecord] = []
    for item in _results_list(payload, "results", provider="tmdb"):
        if not isinstance(item, Mapping):
            raise ParseError("tmdb", f"result item is not an object: {type(item).__name__}")

        rid = _safe_str(item.get("id"))
        title = _safe_str(item.get("title") or item.get("name"))
        if not rid or not title:
            continue

        year = _safe_year(item.get("year")) or _safe_year(item.get("release_date"))
        homepage, wikipedia_url = _split_homepage(item)
        out.append(
            PrimaryRecord(
                id=rid,
                title=title,
                year=year,
                imdb_id=normalize_imdb_id(item.get("imdb_id")),
                posters=_tmdb_posters(item, image_base_url),
                runtime_minutes=_safe_int(item.get("runtime")),
                synopsis=_safe_str(item.get("overview")),
                cast=_names(item.get("cast")),
                directors=_names(item.get("directors")),
                homepage=homepage,
                wikipedia_url=wikipedia_url,
            )
        )
    return out


# ============================================================
# STREAMING (Netflix XML)
# ============================================================


def _parse_xml(xml: str | bytes, *, provider: str) -> ET.Element:
    try:
        return ET.fromstring(xml)
    except ET.ParseError as exc:
        raise ParseError(provider, f"malformed XML: {exc}") from exc


def _child_text(node: ET.Element, path: str) -> str | None:
    found = node.find(path)
    if found is None or found.text is None:
        return None
    return _safe_str(found.text)


def _people(node: ET.Element, role: str) -> tuple[str, ...]:
    out: list[str] = []
    for person in node.findall(f"./link[@title='{role}']/people/link"):
        name = _safe_str(person.get("title"))
        if name:
            out.append(name)
    return tuple(out)


def _link_href(node: ET.Element, title: str) -> str | None:
    found = node.find(f".//link[@title='{title}']")
    return None if found is None else _safe_str(found.get("href"))


def _decode_catalog_title(node: ET.Element) -> StreamingRecord | None:
    id_text = _child_text(node, "id")
    digits = _DIGITS_RE.findall(id_text or "")
    if not digits:
        return None

    title_node = node.find("title")
    raw_title = _safe_str(title_node.get("regular")) if title_node is not None else None
    if not raw_title:
        return None
    title, special_edition = split_special_edition(raw_title)

    box_art = node.find("box_art")
    posters = PosterUrls()
    if box_art is not None:
        posters = PosterUrls(
            small=_safe_str(box_art.get("small")),
            medium=_safe_str(box_art.get("medium")),
            large=_safe_str(box_art.get("large")),
        )

    # runtime viene en segundos
    runtime_s = _safe_int(_child_text(node, "runtime"))

    return StreamingRecord(
        id=digits[-1],
        title=title,
        year=_safe_year(_child_text(node, "release_year")),
        special_edition=special_edition,
        posters=posters,
        runtime_minutes=(runtime_s // 60) if runtime_s else None,
        synopsis=_child_text(node, ".//synopsis"),
        cast=_people(node, "cast"),
        directors=_people(node, "directors"),
        url=_link_href(node, "web page"),
        official_url=_link_href(node, "official webpage"),
    )


def decode_streaming_catalog(xml: str | bytes) -> StreamingCatalog:
    root = _parse_xml(xml, provider="netflix")

    titles: list[StreamingRecord] = []
    for node in root.iter("catalog_title"):
        rec = _decode_catalog_title(node)
        if rec is not None:
            titles.append(rec)

    total = _safe_int(_child_text(root, ".//number_of_results"))
    return StreamingCatalog(
        titles=tuple(titles),
        total_entries=total if total is not None else len(titles),
        per_page=_safe_int(_child_text(root, ".//results_per_page")) or len(titles),
        offset=_safe_int(_child_text(root, ".//start_index")) or 0,
    )


def decode_streaming_autocomplete(xml: str | bytes) -> list[str]:
    root = _parse_xml(xml, provider="netflix")
    out: list[str] = []
    for node in root.iter("autocomplete_item"):
        title = node.find("title")
        short = _safe_str(title.get("short")) if title is not None else None
        if short:
            out.append(short)
    return out


# ============================================================
# REVIEWS (Rotten Tomatoes)
# ============================================================


def _score(value: object) -> int | None:
    # RT usa -1 para "sin puntuación"
    v = _safe_int(value)
    return v if v is not None and v >= 0 else None


def decode_review_search(payload: object) -> list[ReviewRecord]:
    out: list[ReviewRecord] = []
    for item in _results_list(payload, "movies", provider="rotten"):
        if not isinstance(item, Mapping):
            raise ParseError("rotten", f"movie item is not an object: {type(item).__name__}")

        rid = _safe_str(item.get("id"))
        title = _safe_str(item.get("title"))
        if not rid or not title:
            continue

        ratings = item.get("ratings")
        ratings = ratings if isinstance(ratings, Mapping) else {}
        alt_ids = item.get("alternate_ids")
        alt_ids = alt_ids if isinstance(alt_ids, Mapping) else {}
        links = item.get("links")
        links = links if isinstance(links, Mapping) else {}

        out.append(
            ReviewRecord(
                id=rid,
                title=title,
                year=_safe_year(item.get("year")),
                imdb_id=normalize_imdb_id(alt_ids.get("imdb")),
                critics_score=_score(ratings.get("critics_score")),
                audience_score=_score(ratings.get("audience_score")),
                url=_safe_str(links.get("alternate")),
            )
        )
    return out
