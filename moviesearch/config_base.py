"""
moviesearch/config_base.py

- Carga .env UNA vez
- Define PATHS base (PROJECT_DIR/DATA_DIR) y resolve_path() para rutas relativas de env
- Helpers defensivos (_get_env_*, _cap_*)
- Flags globales (DEBUG_MODE/SILENT_MODE/LOG_LEVEL/HTTP_DEBUG)
- LOGGER_FILE_*

Este módulo NO debe importar config_providers.py para evitar ciclos.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

# No sobre-escribimos env vars ya definidas por el proceso.
load_dotenv(override=False)

from moviesearch import logger as _logger  # noqa: E402


# ============================================================
# Paths base
# ============================================================

PACKAGE_DIR: Final[Path] = Path(__file__).resolve().parent
PROJECT_DIR: Final[Path] = PACKAGE_DIR.parent


def resolve_path(raw: str | Path, *, base: Path) -> Path:
    """Ruta absoluta: `raw` tal cual si es absoluta, si no relativa a `base`."""
    p = Path(raw).expanduser()
    return p if p.is_absolute() else (base / p)


DATA_DIR: Final[Path] = resolve_path((os.getenv("DATA_DIR") or "").strip() or "data", base=PROJECT_DIR)


# ============================================================
# Helpers: parseo defensivo de env vars
# ============================================================

_TRUE_SET: Final[set[str]] = {"1", "true", "t", "yes", "y", "on"}
_FALSE_SET: Final[set[str]] = {"0", "false", "f", "no", "n", "off"}


def _clean_env_raw(v: object | None) -> str | None:
    """strip() + quita comillas exteriores típicas de .env; vacío => None."""
    if v is None:
        return None
    s = str(v).strip()
    if not s:
        return None
    if len(s) >= 2 and (s[0] == s[-1]) and s[0] in ("'", '"'):
        s = s[1:-1].strip()
    return s or None


def _get_env_str(name: str, default: str | None = None) -> str | None:
    v = _clean_env_raw(os.getenv(name))
    return default if v is None else v


def _get_env_int(name: str, default: int) -> int:
    v = _clean_env_raw(os.getenv(name))
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        _logger.warning(f"Invalid int for {name!r}: {v!r}, using default {default}", always=True)
        return default


def _get_env_float(name: str, default: float) -> float:
    v = _clean_env_raw(os.getenv(name))
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        _logger.warning(f"Invalid float for {name!r}: {v!r}, using default {default}", always=True)
        return default


def _get_env_bool(name: str, default: bool) -> bool:
    v = _clean_env_raw(os.getenv(name))
    if v is None:
        return default
    s = v.lower()
    if s in _TRUE_SET:
        return True
    if s in _FALSE_SET:
        return False
    _logger.warning(f"Invalid bool for {name!r}: {v!r}, using default {default}", always=True)
    return default


def _cap_int(name: str, value: int, *, min_v: int, max_v: int) -> int:
    if value < min_v:
        _logger.warning(f"{name} < {min_v}; forcing to {min_v}", always=True)
        return min_v
    if value > max_v:
        _logger.warning(f"{name} too high; capping to {max_v}", always=True)
        return max_v
    return value


def _cap_float_min(name: str, value: float, *, min_v: float) -> float:
    if value < min_v:
        _logger.warning(f"{name} < {min_v}; forcing to {min_v}", always=True)
        return min_v
    return value


# ============================================================
# MODO DE EJECUCIÓN
# ============================================================

DEBUG_MODE: bool = _get_env_bool("DEBUG_MODE", False)
SILENT_MODE: bool = _get_env_bool("SILENT_MODE", False)

HTTP_DEBUG: bool = _get_env_bool("HTTP_DEBUG", False)
LOG_LEVEL: str | None = _get_env_str("LOG_LEVEL", None)

LOGGER_LOG_LINE_MAX_CHARS: int = _cap_int(
    "LOGGER_LOG_LINE_MAX_CHARS",
    _get_env_int("LOGGER_LOG_LINE_MAX_CHARS", 500),
    min_v=40,
    max_v=100_000,
)


# ============================================================
# LOGGER (persistencia opcional a fichero)
# ============================================================

LOGGER_FILE_ENABLED: bool = _get_env_bool("LOGGER_FILE_ENABLED", False)

_LOGGER_FILE_PATH_RAW: str | None = _get_env_str("LOGGER_FILE_PATH", None)


def _resolve_logger_file_path() -> Path | None:
    if not LOGGER_FILE_ENABLED:
        return None
    if _LOGGER_FILE_PATH_RAW:
        return resolve_path(_LOGGER_FILE_PATH_RAW, base=PROJECT_DIR).resolve()
    return (DATA_DIR / "logs" / "moviesearch.log").resolve()


LOGGER_FILE_PATH: Path | None = _resolve_logger_file_path()
