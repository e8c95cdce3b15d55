"""
moviesearch: búsqueda de películas multi-proveedor con reconciliación y fallback.

Uso típico (capa de aplicación):

    from moviesearch.app import build_orchestrator

    orchestrator = build_orchestrator()
    movies = orchestrator.search("inception")
"""

__version__ = "0.1.0"
