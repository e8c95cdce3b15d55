from __future__ import annotations

"""
moviesearch/store.py

Persistencia de CanonicalMovie (colaborador opaco del core).

Contrato (Store):
- find_by_primary_id(ids)   -> dict[id, CanonicalMovie]
- find_by_streaming_id(ids) -> dict[id, CanonicalMovie]
- find_by_title_pattern(re.Pattern) -> list[CanonicalMovie] ordenada por título
- save(movie) -> None (PersistenceError si no se pudo guardar)

Implementaciones:
- InMemoryStore: dict de registros serializados + lock.
- JsonFileStore: InMemoryStore + escritura atómica a un JSON (temp + fsync + replace).

Create-or-update
----------------
El registro destino de un save se resuelve así:
  1) misma store_key (primary:<id> / streaming:<id> / ty:<title|year>)
  2) si no, un registro existente con el mismo imdb_id (invariante 1 por imdb)
  3) si no, alta nueva
Otros registros con el mismo imdb_id bajo otra clave se fusionan en el destino
(sus campos solo rellenan huecos) y se eliminan: nunca quedan dos películas
con el mismo imdb_id.

Los métodos de lectura devuelven copias: mutar el resultado no toca el store
hasta que se llama a save().
"""

import json
import os
import re
import tempfile
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Final, Protocol

from moviesearch import logger as logger
from moviesearch.errors import PersistenceError, StoreUnavailableError
from moviesearch.records import CanonicalMovie

_SCHEMA_VERSION: Final[int] = 1


class Store(Protocol):
    def find_by_primary_id(self, ids: Iterable[str]) -> dict[str, CanonicalMovie]: ...

    def find_by_streaming_id(self, ids: Iterable[str]) -> dict[str, CanonicalMovie]: ...

    def find_by_title_pattern(self, pattern: re.Pattern[str]) -> list[CanonicalMovie]: ...

    def save(self, movie: CanonicalMovie) -> None: ...


def _is_blank(value: object) -> bool:
    if isinstance(value, Mapping):
        return not any(value.values())
    return value is None or value == "" or value == []


def _fill_blanks(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    """Rellena en `target` los campos vacíos con los de `source` (target manda)."""
    if _is_blank(target.get("streaming_id")) and not _is_blank(source.get("streaming_id")):
        target["special_edition"] = bool(source.get("special_edition", False))
    for name, value in source.items():
        if _is_blank(target.get(name)) and not _is_blank(value):
            target[name] = value


class InMemoryStore:
    def __init__(self, records: dict[str, dict[str, Any]] | None = None) -> None:
        self._lock = threading.RLock()
        self._records: dict[str, dict[str, Any]] = dict(records or {})

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------

    def _snapshot(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._records.values())

    def _index_by(self, field_name: str, ids: Iterable[str]) -> dict[str, CanonicalMovie]:
        wanted = {str(i) for i in ids if i is not None}
        if not wanted:
            return {}
        out: dict[str, CanonicalMovie] = {}
        for data in self._snapshot():
            value = data.get(field_name)
            if value is not None and str(value) in wanted:
                out[str(value)] = CanonicalMovie.from_dict(data)
        return out

    def find_by_primary_id(self, ids: Iterable[str]) -> dict[str, CanonicalMovie]:
        return self._index_by("primary_id", ids)

    def find_by_streaming_id(self, ids: Iterable[str]) -> dict[str, CanonicalMovie]:
        return self._index_by("streaming_id", ids)

    def find_by_title_pattern(self, pattern: re.Pattern[str]) -> list[CanonicalMovie]:
        matches = [
            CanonicalMovie.from_dict(data)
            for data in self._snapshot()
            if pattern.search(str(data.get("title") or ""))
        ]
        matches.sort(key=lambda m: (m.title.casefold(), m.year or 0))
        return matches

    def all(self) -> list[CanonicalMovie]:
        return [CanonicalMovie.from_dict(d) for d in self._snapshot()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # ------------------------------------------------------------------
    # Escritura
    # ------------------------------------------------------------------

    def _resolve_key_unlocked(self, movie: CanonicalMovie) -> str:
        key = movie.store_key
        if key in self._records:
            return key
        if movie.imdb_id:
            for existing_key, data in self._records.items():
                if data.get("imdb_id") == movie.imdb_id:
                    return existing_key
        return key

    def _imdb_duplicates_unlocked(self, key: str, imdb_id: str | None) -> list[str]:
        if not imdb_id:
            return []
        return [k for k, data in self._records.items() if k != key and data.get("imdb_id") == imdb_id]

    def _persist_unlocked(self) -> None:
        """Hook para stores con backend (JsonFileStore)."""

    def save(self, movie: CanonicalMovie) -> None:
        with self._lock:
            key = self._resolve_key_unlocked(movie)
            backup = dict(self._records)

            payload = movie.to_dict()
            for dup_key in self._imdb_duplicates_unlocked(key, movie.imdb_id):
                _fill_blanks(payload, self._records.pop(dup_key))
                logger.debug_ctx("STORE", f"merged {dup_key} into {key} imdb={movie.imdb_id}")
            self._records[key] = payload

            try:
                self._persist_unlocked()
            except OSError as exc:
                # rollback en memoria para no divergir del disco
                self._records = backup
                raise PersistenceError(f"save failed for {key}: {exc!r}") from exc


class JsonFileStore(InMemoryStore):
    """
    Store respaldado por un fichero JSON:

        {"schema": 1, "records": {"<store_key>": {...CanonicalMovie...}}}

    - Carga al construir. Fichero inexistente => store vacío.
    - Fichero ilegible / JSON roto / schema distinto => StoreUnavailableError
      (no sobrescribimos datos que no entendemos).
    - Cada save reescribe el fichero de forma atómica.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as exc:
            raise StoreUnavailableError(f"cannot read store {self.path}: {exc!r}") from exc

        if not isinstance(raw, dict) or raw.get("schema") != _SCHEMA_VERSION:
            raise StoreUnavailableError(f"unsupported store schema in {self.path}")

        records = raw.get("records")
        if not isinstance(records, dict):
            raise StoreUnavailableError(f"'records' missing in {self.path}")

        out = {str(k): v for k, v in records.items() if isinstance(v, dict)}
        logger.debug_ctx("STORE", f"loaded {len(out)} records from {self.path}")
        return out

    def _persist_unlocked(self) -> None:
        """temp file en el mismo directorio + fsync + replace."""
        dirpath = self.path.parent
        dirpath.mkdir(parents=True, exist_ok=True)

        payload = {"schema": _SCHEMA_VERSION, "records": self._records}
        temp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile("w", encoding="utf-8", delete=False, dir=str(dirpath)) as tf:
                temp_name = tf.name
                json.dump(payload, tf, ensure_ascii=False, indent=2)
                tf.flush()
                try:
                    os.fsync(tf.fileno())
                except OSError:
                    pass
            os.replace(temp_name, str(self.path))
        finally:
            if temp_name and os.path.exists(temp_name):
                try:
                    os.remove(temp_name)
                except OSError:
                    pass
