"""
moviesearch/errors.py

Taxonomía de errores del pipeline de búsqueda.

- TransientProviderError: red / timeout / HTTP 4xx-5xx / circuito abierto.
- ParseError: payload malformado. Se trata igual que TransientProviderError.
- PersistenceError: fallo al guardar UN draft; no aborta el batch.
- StoreUnavailableError: el store no se puede leer. Fatal solo si ni siquiera
  la búsqueda local por patrón puede ejecutarse.
"""

from __future__ import annotations


class MovieSearchError(Exception):
    """Base de todos los errores del paquete."""


class ProviderError(MovieSearchError):
    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"[{provider}] {message}")
        self.provider = provider


class TransientProviderError(ProviderError):
    pass


class ParseError(ProviderError):
    pass


class PersistenceError(MovieSearchError):
    pass


class StoreUnavailableError(MovieSearchError):
    pass


# Errores que una llamada degradada convierte en "lista vacía".
# TimeoutError cubre también concurrent.futures.TimeoutError (alias en 3.11+).
RECOVERABLE_PROVIDER_ERRORS: tuple[type[BaseException], ...] = (
    TransientProviderError,
    ParseError,
    TimeoutError,
)
