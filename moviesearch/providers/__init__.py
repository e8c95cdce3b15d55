from moviesearch.providers.base import PrimaryProvider, ReviewProvider, StreamingProvider
from moviesearch.providers.netflix import NetflixClient
from moviesearch.providers.rotten import RottenTomatoesClient
from moviesearch.providers.tmdb import TmdbClient

__all__ = [
    "NetflixClient",
    "PrimaryProvider",
    "ReviewProvider",
    "RottenTomatoesClient",
    "StreamingProvider",
    "TmdbClient",
]
