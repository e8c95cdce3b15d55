from __future__ import annotations

"""
moviesearch/main.py

Punto de entrada CLI (capa de aplicación, fuera del core).

    moviesearch-search "the matrix"
    moviesearch-search "the matrix" --json
    moviesearch-search "matr" --suggest

Reglas de consola (alineado con moviesearch/logger.py)
-----------------------------------------------------
- Resultados: logger.progress(...) (siempre visibles)
- Avisos de proveedores: logger.warning(..., always=True)
- CTRL+C: salida limpia, sin stacktrace.
"""

import argparse
import json
import sys

from moviesearch import logger as logger
from moviesearch.app import build_orchestrator, close_orchestrator
from moviesearch.config_providers import ProviderConfig
from moviesearch.errors import MovieSearchError
from moviesearch.providers import NetflixClient
from moviesearch.records import CanonicalMovie
from moviesearch.run_metrics import METRICS


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="moviesearch-search",
        description="Busca películas combinando TMDB, Netflix y Rotten Tomatoes.",
    )
    parser.add_argument("term", help="Término de búsqueda")
    parser.add_argument("--json", action="store_true", help="Salida JSON (una lista de películas)")
    parser.add_argument(
        "--suggest",
        action="store_true",
        help="Solo sugerencias de título del catálogo de streaming",
    )
    parser.add_argument("--metrics", action="store_true", help="Muestra métricas al terminar")
    return parser.parse_args(argv)


def format_movie(movie: CanonicalMovie) -> str:
    year = movie.year if movie.year is not None else "?"
    parts = [f"{movie.title} ({year})"]
    if movie.imdb_id:
        parts.append(movie.imdb_id)
    if movie.streaming_id:
        parts.append("streaming" + (" [special edition]" if movie.special_edition else ""))
    if movie.review_score is not None:
        parts.append(f"critics {movie.review_score}%")
    return " | ".join(parts)


def _suggest(term: str) -> list[str]:
    client = NetflixClient(ProviderConfig.from_env("NETFLIX"))
    try:
        return client.autocomplete(term)
    finally:
        client.close()


def start(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        orchestrator = build_orchestrator()
    except MovieSearchError as exc:
        logger.error(f"[CLI] cannot start: {exc}")
        return 1

    try:
        if args.suggest:
            for title in _suggest(args.term):
                logger.progress(title)
            return 0

        result = orchestrator.search_with_path(args.term)
    except KeyboardInterrupt:
        logger.progress("Cancelado.")
        return 130
    except MovieSearchError as exc:
        logger.error(f"[CLI] search failed: {exc}")
        return 1
    finally:
        close_orchestrator(orchestrator)

    if args.json:
        logger.progress(json.dumps([m.to_dict() for m in result.movies], ensure_ascii=False, indent=2))
    else:
        logger.progress(f"[{result.path}] {len(result.movies)} result(s) for {args.term!r}")
        for idx, movie in enumerate(result.movies, start=1):
            logger.progress(f"{idx:>3}. {format_movie(movie)}")

    if args.metrics:
        snap = METRICS.snapshot()
        logger.progress(json.dumps(snap["counters"], indent=2, sort_keys=True))

    return 0


def main() -> None:
    sys.exit(start())


if __name__ == "__main__":
    main()
