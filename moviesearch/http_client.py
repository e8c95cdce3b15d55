from __future__ import annotations

"""
moviesearch/http_client.py

Transporte HTTP compartido por los clientes de proveedor.

- requests.Session con urllib3.Retry (429/5xx, best-effort) y pooling.
- Circuit breaker por proveedor+path (moviesearch/resilience.py).
- Traducción de errores:
    RequestException / HTTP >= 400 / circuito abierto -> TransientProviderError
    JSON inválido                                     -> ParseError

La sesión pertenece a la instancia (no hay singleton global): cada cliente
recibe su ProviderConfig y su ciclo de vida lo decide la capa de aplicación.
"""

import threading
from collections.abc import Mapping

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from requests.exceptions import RequestException
from urllib3.util.retry import Retry

from moviesearch import logger as logger
from moviesearch.config_providers import ProviderConfig
from moviesearch.errors import ParseError, TransientProviderError
from moviesearch.resilience import CircuitBreaker, guarded_call
from moviesearch.run_metrics import METRICS


def build_session(config: ProviderConfig) -> requests.Session:
    """requests.Session con retries y headers del proveedor."""
    session = requests.Session()

    retries = Retry(
        total=max(0, int(config.retry_total)),
        backoff_factor=max(0.0, float(config.retry_backoff_factor)),
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
        respect_retry_after_header=True,
    )
    adapter = HTTPAdapter(max_retries=retries, pool_connections=4, pool_maxsize=8)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    session.headers.update(
        {
            "User-Agent": config.user_agent,
            "Accept": "application/json,application/xml,text/xml,*/*",
        }
    )
    return session


class HttpTransport:
    def __init__(
        self,
        config: ProviderConfig,
        *,
        session: requests.Session | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self.config = config
        self._session = session
        self._session_lock = threading.Lock()
        self._breaker = breaker or CircuitBreaker(
            failure_threshold=config.breaker_threshold,
            open_seconds=config.breaker_open_seconds,
        )

    @property
    def provider(self) -> str:
        return self.config.name

    def _get_session(self) -> requests.Session:
        if self._session is not None:
            return self._session
        with self._session_lock:
            if self._session is None:
                self._session = build_session(self.config)
            return self._session

    def close(self) -> None:
        with self._session_lock:
            if self._session is not None:
                self._session.close()
                self._session = None

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}/{path.lstrip('/')}"

    def _do_get(self, path: str, params: Mapping[str, object]) -> Response:
        url = self._url(path)
        METRICS.incr(f"http.{self.provider}.requests")
        try:
            resp = self._get_session().get(
                url,
                params={k: v for k, v in params.items() if v is not None},
                timeout=self.config.timeout_seconds,
            )
        except RequestException as exc:
            METRICS.incr(f"http.{self.provider}.failures")
            raise TransientProviderError(self.provider, f"GET {path} failed: {exc!r}") from exc

        if resp.status_code >= 400:
            METRICS.incr(f"http.{self.provider}.status_{resp.status_code}")
            raise TransientProviderError(self.provider, f"GET {path} -> HTTP {resp.status_code}")

        logger.debug_ctx(self.provider, f"GET {path} -> {resp.status_code}")
        return resp

    def get(self, path: str, params: Mapping[str, object] | None = None) -> Response:
        return guarded_call(
            breaker=self._breaker,
            provider=self.provider,
            key=path,
            fn=lambda: self._do_get(path, params or {}),
        )

    def get_json(self, path: str, params: Mapping[str, object] | None = None) -> object:
        resp = self.get(path, params)
        try:
            return resp.json()
        except ValueError as exc:
            snippet = logger.truncate_line(resp.text or "", 200)
            raise ParseError(self.provider, f"invalid JSON from {path}: {snippet!r}") from exc

    def get_text(self, path: str, params: Mapping[str, object] | None = None) -> str:
        return self.get(path, params).text
