from __future__ import annotations

"""
moviesearch/app.py

Wiring de la capa de aplicación: config (env) -> clientes -> store -> orquestador.

Los clientes se construyen aquí, de forma explícita, con su ProviderConfig; no
hay clientes globales memoizados. Quien llama es dueño del ciclo de vida
(`close_orchestrator` libera sesiones HTTP).
"""

from moviesearch import logger as logger
from moviesearch.config_providers import ProviderConfig, SearchSettings
from moviesearch.orchestrator import SearchOrchestrator
from moviesearch.providers import NetflixClient, RottenTomatoesClient, TmdbClient
from moviesearch.reconciler import Reconciler
from moviesearch.store import InMemoryStore, JsonFileStore, Store


def build_store(settings: SearchSettings) -> Store:
    if settings.store_path is None:
        return InMemoryStore()
    return JsonFileStore(settings.store_path)


def build_orchestrator(
    settings: SearchSettings | None = None,
    *,
    store: Store | None = None,
) -> SearchOrchestrator:
    settings = settings or SearchSettings.from_env()

    tmdb = ProviderConfig.from_env("TMDB")
    netflix = ProviderConfig.from_env("NETFLIX")
    rotten = ProviderConfig.from_env("ROTTEN")

    for cfg in (tmdb, netflix, rotten):
        if not cfg.enabled:
            logger.warning(f"[CONFIG] provider {cfg.name!r} has no credentials; it will be skipped", always=True)

    return SearchOrchestrator(
        primary=TmdbClient(tmdb),
        streaming=NetflixClient(netflix),
        review=RottenTomatoesClient(rotten),
        store=store if store is not None else build_store(settings),
        reconciler=Reconciler(year_tolerance=settings.match_year_tolerance),
        provider_timeout_seconds=settings.provider_timeout_seconds,
    )


def close_orchestrator(orchestrator: SearchOrchestrator) -> None:
    for client in (orchestrator.primary, orchestrator.streaming, orchestrator.review):
        close = getattr(client, "close", None)
        if callable(close):
            close()
