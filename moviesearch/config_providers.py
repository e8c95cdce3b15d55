from __future__ import annotations

"""
moviesearch/config_providers.py

Configuración de proveedores externos y de la búsqueda.

A diferencia de config_base (constantes de módulo), aquí exponemos dataclasses
inmutables construidas con `from_env()`: la capa de aplicación crea los
clientes con su configuración explícita (sin clientes globales memoizados).

Proveedores (prefijo de env):
- TMDB     -> primario (metadatos)
- NETFLIX  -> streaming (disponibilidad/sinopsis)
- ROTTEN   -> reviews (puntuación)
"""

from dataclasses import dataclass
from pathlib import Path

from moviesearch.config_base import (
    DATA_DIR,
    _cap_float_min,
    _cap_int,
    _get_env_float,
    _get_env_int,
    _get_env_str,
    resolve_path,
)

DEFAULT_USER_AGENT = "moviesearch/0.1 (+https://github.com/)"

_DEFAULT_BASE_URLS: dict[str, str] = {
    "TMDB": "https://api.themoviedb.org/3",
    "NETFLIX": "http://api.netflix.com",
    "ROTTEN": "https://api.rottentomatoes.com/api/public/v1.0",
}


@dataclass(frozen=True)
class ProviderConfig:
    """
    Config de un cliente HTTP de proveedor.

    - timeout_seconds: timeout por request (connect+read).
    - retry_total / retry_backoff_factor: reintentos del transporte (urllib3).
    - breaker_*: circuit breaker por proveedor.
    """

    name: str
    base_url: str
    api_key: str | None = None
    api_secret: str | None = None
    timeout_seconds: float = 10.0
    retry_total: int = 2
    retry_backoff_factor: float = 0.5
    user_agent: str = DEFAULT_USER_AGENT
    max_results: int = 10
    breaker_threshold: int = 5
    breaker_open_seconds: float = 20.0
    image_base_url: str | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @staticmethod
    def from_env(prefix: str) -> "ProviderConfig":
        p = prefix.strip().upper()
        base_url = _get_env_str(f"{p}_BASE_URL", _DEFAULT_BASE_URLS.get(p, "")) or ""

        # Netflix usa consumer key/secret; el resto API key.
        api_key = _get_env_str(f"{p}_API_KEY", None) or _get_env_str(f"{p}_CONSUMER_KEY", None)

        return ProviderConfig(
            name=p.lower(),
            base_url=base_url.rstrip("/"),
            api_key=api_key,
            api_secret=_get_env_str(f"{p}_CONSUMER_SECRET", None),
            timeout_seconds=_cap_float_min(
                f"{p}_HTTP_TIMEOUT_SECONDS",
                _get_env_float(f"{p}_HTTP_TIMEOUT_SECONDS", 10.0),
                min_v=0.5,
            ),
            retry_total=_cap_int(
                f"{p}_HTTP_RETRY_TOTAL",
                _get_env_int(f"{p}_HTTP_RETRY_TOTAL", 2),
                min_v=0,
                max_v=10,
            ),
            retry_backoff_factor=_cap_float_min(
                f"{p}_HTTP_RETRY_BACKOFF_FACTOR",
                _get_env_float(f"{p}_HTTP_RETRY_BACKOFF_FACTOR", 0.5),
                min_v=0.0,
            ),
            user_agent=_get_env_str("HTTP_USER_AGENT", DEFAULT_USER_AGENT) or DEFAULT_USER_AGENT,
            max_results=_cap_int(
                f"{p}_MAX_RESULTS",
                _get_env_int(f"{p}_MAX_RESULTS", 10),
                min_v=1,
                max_v=100,
            ),
            breaker_threshold=_cap_int(
                f"{p}_CIRCUIT_BREAKER_THRESHOLD",
                _get_env_int(f"{p}_CIRCUIT_BREAKER_THRESHOLD", 5),
                min_v=1,
                max_v=50,
            ),
            breaker_open_seconds=_cap_float_min(
                f"{p}_CIRCUIT_BREAKER_OPEN_SECONDS",
                _get_env_float(f"{p}_CIRCUIT_BREAKER_OPEN_SECONDS", 20.0),
                min_v=0.5,
            ),
            image_base_url=_get_env_str(f"{p}_IMAGE_BASE_URL", None),
        )


@dataclass(frozen=True)
class SearchSettings:
    """
    Settings del orquestador.

    - provider_timeout_seconds: deadline por llamada a proveedor (paralelas).
    - match_year_tolerance: 0 => año exacto cuando ambos proveedores lo traen.
    - store_path: None => store en memoria.
    """

    provider_timeout_seconds: float = 8.0
    match_year_tolerance: int = 0
    store_path: Path | None = None

    @staticmethod
    def from_env() -> "SearchSettings":
        raw_store = _get_env_str("MOVIE_STORE_PATH", None)
        store_path: Path | None = None
        if raw_store and raw_store.lower() != "memory":
            store_path = resolve_path(raw_store, base=DATA_DIR)

        return SearchSettings(
            provider_timeout_seconds=_cap_float_min(
                "SEARCH_PROVIDER_TIMEOUT_SECONDS",
                _get_env_float("SEARCH_PROVIDER_TIMEOUT_SECONDS", 8.0),
                min_v=0.1,
            ),
            match_year_tolerance=_cap_int(
                "MATCH_YEAR_TOLERANCE",
                _get_env_int("MATCH_YEAR_TOLERANCE", 0),
                min_v=0,
                max_v=5,
            ),
            store_path=store_path,
        )
