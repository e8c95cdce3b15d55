from __future__ import annotations

"""
moviesearch/resilience.py

Circuit breaker simple por proveedor/endpoint para el transporte HTTP.

Estados:
    - CLOSED (normal)
    - OPEN (bloquea temporalmente: fallo inmediato sin tocar la red)
    - HALF_OPEN (deja pasar N probes; ok => CLOSED, fallo => OPEN)

Thread-safe: varias búsquedas concurrentes comparten el mismo cliente.

Sin reintentos: los reintentos viven en urllib3.Retry (sesión HTTP). El core
de búsqueda nunca reintenta.
"""

import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Literal, TypeVar

from moviesearch.errors import TransientProviderError

T = TypeVar("T")

BreakerState = Literal["CLOSED", "OPEN", "HALF_OPEN"]


@dataclass
class CircuitState:
    failures: int = 0
    opened_at: float = 0.0
    state: BreakerState = "CLOSED"
    last_error: str = ""
    half_open_inflight: int = 0


class CircuitBreaker:
    def __init__(
        self,
        *,
        failure_threshold: int = 5,
        open_seconds: float = 20.0,
        half_open_max_calls: int = 1,
    ) -> None:
        self._lock = threading.Lock()
        self._states: dict[str, CircuitState] = {}
        self._failure_threshold = max(1, int(failure_threshold))
        self._open_seconds = max(0.1, float(open_seconds))
        self._half_open_max_calls = max(1, int(half_open_max_calls))

    def _state(self, key: str) -> CircuitState:
        st = self._states.get(key)
        if st is None:
            st = CircuitState()
            self._states[key] = st
        return st

    def allow(self, key: str) -> tuple[bool, str]:
        """Returns: (allowed, reason)"""
        now = time.monotonic()
        with self._lock:
            st = self._state(key)

            if st.state == "CLOSED":
                return True, "closed"

            if st.state == "OPEN":
                if (now - st.opened_at) < self._open_seconds:
                    return False, "open"
                st.state = "HALF_OPEN"
                st.half_open_inflight = 0

            if st.half_open_inflight >= self._half_open_max_calls:
                return False, "half_open:quota_reached"
            st.half_open_inflight += 1
            return True, "half_open:probe"

    def on_success(self, key: str) -> None:
        with self._lock:
            self._states[key] = CircuitState()

    def on_failure(self, key: str, *, error: str) -> None:
        now = time.monotonic()
        with self._lock:
            st = self._state(key)
            st.failures += 1
            st.last_error = str(error)[:500]

            # fallo en probe => OPEN directamente
            if st.state == "HALF_OPEN" or st.failures >= self._failure_threshold:
                st.state = "OPEN"
                st.opened_at = now
                st.half_open_inflight = 0

    def debug_state(self, key: str) -> CircuitState | None:
        with self._lock:
            st = self._states.get(key)
            return None if st is None else replace(st)


def guarded_call(
    *,
    breaker: CircuitBreaker,
    provider: str,
    key: str,
    fn: Callable[[], T],
) -> T:
    """
    Ejecuta fn() bajo el breaker.

    - Circuito abierto => TransientProviderError sin llamar a fn.
    - TransientProviderError de fn => cuenta como fallo y se propaga.
    - Cualquier otro error (p.ej. ParseError) se propaga; el proveedor respondió,
      así que para el breaker cuenta como éxito.
    """
    allowed, reason = breaker.allow(key)
    if not allowed:
        raise TransientProviderError(provider, f"circuit {reason} for {key}")

    try:
        out = fn()
    except TransientProviderError as exc:
        breaker.on_failure(key, error=repr(exc))
        raise
    except Exception:
        breaker.on_success(key)
        raise
    breaker.on_success(key)
    return out
