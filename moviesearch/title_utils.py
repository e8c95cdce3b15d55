"""
moviesearch/title_utils.py

Utilidades puras de títulos para el enlazado entre proveedores:
- Normalización para comparación (identidad entre registros)
- Sufijo "special edition" del catálogo de streaming
- Regla de años (exacto o con tolerancia)
- Normalización de IMDb ids (tt + dígitos, minúsculas)

No hace logging (módulo core/utility).
"""

from __future__ import annotations

import re
import unicodedata
from typing import Final

_COMPARE_NON_ALNUM_RE: Final[re.Pattern[str]] = re.compile(r"[^a-z0-9\s]")
_WS_RE: Final[re.Pattern[str]] = re.compile(r"\s+")
_SPECIAL_EDITION_RE: Final[re.Pattern[str]] = re.compile(r"(\s*:)?\s+special edition$", re.IGNORECASE)
_IMDB_TT_RE: Final[re.Pattern[str]] = re.compile(r"\b(tt\d{7,9})\b", re.IGNORECASE)
_IMDB_DIGITS_RE: Final[re.Pattern[str]] = re.compile(r"^\d{7,9}$")

_SEP_REPLACEMENTS: Final[tuple[tuple[str, str], ...]] = (
    ("_", " "),
    ("\u00a0", " "),  # NBSP
    ("–", "-"),
    ("—", "-"),
    ("&", " and "),
)


def strip_accents(text: str) -> str:
    """Elimina diacríticos (NFKD)."""
    normalized = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def cleanup_separators(text: str) -> str:
    out = text or ""
    for a, b in _SEP_REPLACEMENTS:
        out = out.replace(a, b)
    return out


def normalize_title_for_compare(title: str | None) -> str:
    """
    Normalización para identidad entre proveedores:
    - separadores saneados ("&" -> "and")
    - sin acentos
    - casefold
    - solo [a-z0-9 ] y espacios colapsados

    "Amélie: Le Fabuleux" y "amelie le fabuleux" producen la misma clave.
    """
    raw = (title or "").strip()
    if not raw:
        return ""

    t = cleanup_separators(raw)
    t = strip_accents(t).casefold()
    t = _COMPARE_NON_ALNUM_RE.sub(" ", t)
    return _WS_RE.sub(" ", t).strip()


def split_special_edition(title: str) -> tuple[str, bool]:
    """
    "Alien: Special Edition" -> ("Alien", True)
    "Special Edition"        -> ("Special Edition", False)  (necesita prefijo)
    """
    raw = title or ""
    stripped, n = _SPECIAL_EDITION_RE.subn("", raw)
    if n:
        return stripped, True
    return raw, False


def years_match(a: int | None, b: int | None, *, tolerance: int = 0) -> bool:
    """
    Si falta alguno de los dos años, no se exige coincidencia (solo título).
    Con ambos presentes: |a - b| <= tolerance.
    """
    if a is None or b is None:
        return True
    return abs(int(a) - int(b)) <= max(0, int(tolerance))


def titles_match(
    title_a: str | None,
    year_a: int | None,
    title_b: str | None,
    year_b: int | None,
    *,
    year_tolerance: int = 0,
) -> bool:
    """Igualdad total y determinista entre dos registros (título normalizado + año)."""
    na = normalize_title_for_compare(title_a)
    if not na or na != normalize_title_for_compare(title_b):
        return False
    return years_match(year_a, year_b, tolerance=year_tolerance)


def normalize_imdb_id(value: object) -> str | None:
    """
    "tt0133093", "TT0133093", "0133093", "https://imdb.com/title/tt0133093/"
    -> "tt0133093". Cualquier otra cosa => None.
    """
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    m = _IMDB_TT_RE.search(s)
    if m:
        return m.group(1).lower()
    if _IMDB_DIGITS_RE.match(s):
        return f"tt{s}"
    return None


def title_year_key(title: str | None, year: int | None) -> str:
    """Clave estable "<norm_title>|<year>" (year vacío si desconocido)."""
    return f"{normalize_title_for_compare(title)}|{year if year is not None else ''}"
