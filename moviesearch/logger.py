from __future__ import annotations

"""
moviesearch/logger.py

Logger central del proyecto (fachada sobre `logging`).

API estable
-----------
- debug / info / warning / error
- progress (siempre visible, sin timestamps)
- debug_ctx(tag, msg) (debug contextual alineado con SILENT/DEBUG)
- truncate_line(text) (evita volcar payloads enormes de proveedores)

Política
--------
- SILENT_MODE=True: suprime debug/info/warning (salvo always=True). `error()` siempre emite.
- DEBUG_MODE=True: permite trazas útiles; en SILENT+DEBUG se emiten por `progress`.
- El logging nunca debe romper una búsqueda.

Configuración
-------------
No importamos `moviesearch.config_base` directamente (evitamos circular imports):
lo leemos desde `sys.modules` si ya está importado.

- LOG_LEVEL / DEBUG_MODE / SILENT_MODE / HTTP_DEBUG
- LOGGER_FILE_ENABLED + LOGGER_FILE_PATH (duplicado opcional a fichero)
"""

import logging
import os
import sys
import threading
from types import ModuleType
from typing import Final

LOGGER_NAME: Final[str] = "moviesearch"

_LOGGER: logging.Logger | None = None
_CONFIGURED: bool = False
_CONFIG_LOCK = threading.Lock()

_FILE_HANDLER_TAG: Final[str] = "_moviesearch_file_handler"
_LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DEFAULT_LOG_LINE_MAX_CHARS: Final[int] = 500

# ============================================================================
# FLAGS (sin importar moviesearch.config_base directamente)
# ============================================================================


def _safe_get_cfg() -> ModuleType | None:
    mod = sys.modules.get("moviesearch.config_base")
    return mod if isinstance(mod, ModuleType) else None


def _cfg_value(name: str, default: object) -> object:
    cfg = _safe_get_cfg()
    if cfg is None:
        return default
    return getattr(cfg, name, default)


def is_silent_mode() -> bool:
    """SILENT_MODE global (si moviesearch.config_base está cargado)."""
    return bool(_cfg_value("SILENT_MODE", False))


def is_debug_mode() -> bool:
    """DEBUG_MODE global (si moviesearch.config_base está cargado)."""
    return bool(_cfg_value("DEBUG_MODE", False))


_LEVELS: Final[dict[str, int]] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _resolve_level_from_config() -> int:
    """
    Prioridad:
      1) LOG_LEVEL explícito
      2) DEBUG_MODE
      3) INFO
    """
    raw = _cfg_value("LOG_LEVEL", None)
    if isinstance(raw, str) and raw.strip():
        mapped = _LEVELS.get(raw.strip().upper())
        if mapped is not None:
            return mapped
    if is_debug_mode():
        return logging.DEBUG
    return logging.INFO


def _configure_external_loggers() -> None:
    """Silencia urllib3/requests salvo HTTP_DEBUG=True."""
    if bool(_cfg_value("HTTP_DEBUG", False)):
        return
    for name in ("urllib3", "urllib3.connectionpool", "requests"):
        logging.getLogger(name).setLevel(logging.WARNING)


# ============================================================================
# FILE LOGGING (opcional)
# ============================================================================


def _file_logging_path() -> str | None:
    """
    Prioridad:
      0) ENV LOGGER_FILE_PATH
      1) moviesearch.config_base.LOGGER_FILE_PATH
    """
    env_p = (os.getenv("LOGGER_FILE_PATH") or "").strip()
    if env_p:
        return env_p
    p = _cfg_value("LOGGER_FILE_PATH", None)
    if p is None:
        return None
    s = str(p).strip()
    return s or None


def _ensure_file_handler(root: logging.Logger, *, level: int) -> None:
    if not bool(_cfg_value("LOGGER_FILE_ENABLED", False)):
        return
    path = _file_logging_path()
    if not path:
        return

    for h in root.handlers:
        if getattr(h, _FILE_HANDLER_TAG, False):
            h.setLevel(level)
            return

    try:
        dir_name = os.path.dirname(path)
        if dir_name:
            os.makedirs(dir_name, exist_ok=True)
        fh = logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
    except OSError:
        # Sin fichero seguimos solo con consola.
        return

    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(_LOG_FORMAT))
    setattr(fh, _FILE_HANDLER_TAG, True)
    root.addHandler(fh)


# ============================================================================
# INICIALIZACIÓN
# ============================================================================


def _ensure_configured() -> logging.Logger:
    """Inicializa logging de forma idempotente y devuelve el logger principal."""
    global _LOGGER, _CONFIGURED

    if _CONFIGURED and _LOGGER is not None:
        return _LOGGER

    with _CONFIG_LOCK:
        if _CONFIGURED and _LOGGER is not None:
            return _LOGGER

        level = _resolve_level_from_config()
        root = logging.getLogger()
        if not root.handlers:
            logging.basicConfig(level=level, format=_LOG_FORMAT)

        _configure_external_loggers()
        _ensure_file_handler(root, level=level)

        log = logging.getLogger(LOGGER_NAME)
        log.setLevel(level)
        _LOGGER = log
        _CONFIGURED = True
        return log


def get_logger() -> logging.Logger:
    """Devuelve el logger principal, asegurando inicialización."""
    return _ensure_configured()


def reset_for_tests() -> None:
    """Fuerza reconfiguración en la siguiente llamada (tests)."""
    global _LOGGER, _CONFIGURED
    with _CONFIG_LOCK:
        _LOGGER = None
        _CONFIGURED = False


def _should_log(*, always: bool = False) -> bool:
    if always:
        return True
    return not is_silent_mode()


# ============================================================================
# API PÚBLICA
# ============================================================================


def progress(message: str) -> None:
    """Línea siempre visible (ignora SILENT_MODE)."""
    try:
        sys.stdout.write(f"{message}\n")
        sys.stdout.flush()
    except (OSError, ValueError):
        pass


def debug(msg: str, *args: object, always: bool = False) -> None:
    if not _should_log(always=always):
        return
    _ensure_configured().debug(msg, *args)


def info(msg: str, *args: object, always: bool = False) -> None:
    if not _should_log(always=always):
        return
    _ensure_configured().info(msg, *args)


def warning(msg: str, *args: object, always: bool = False) -> None:
    if not _should_log(always=always):
        return
    _ensure_configured().warning(msg, *args)


def error(msg: str, *args: object, exc_info: bool = False) -> None:
    """ERROR siempre se emite (ignora SILENT_MODE)."""
    _ensure_configured().error(msg, *args, exc_info=exc_info)


def truncate_line(text: str, max_chars: int | None = None) -> str:
    """Trunca una línea para evitar payloads enormes (JSON/XML de proveedores)."""
    if isinstance(max_chars, int) and max_chars > 0:
        limit = max_chars
    else:
        try:
            limit = int(_cfg_value("LOGGER_LOG_LINE_MAX_CHARS", _DEFAULT_LOG_LINE_MAX_CHARS))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            limit = _DEFAULT_LOG_LINE_MAX_CHARS
    if len(text) <= limit:
        return text
    return text[: max(0, limit - 12)] + " …(truncated)"


def debug_ctx(tag: str, msg: object) -> None:
    """
    Debug contextual con tag.

    - DEBUG_MODE=False -> no-op
    - DEBUG_MODE=True:
        * SILENT_MODE=True  -> progress("[TAG][DEBUG] ...")
        * SILENT_MODE=False -> info("[TAG][DEBUG] ...")
    """
    if not is_debug_mode():
        return

    t = (tag or "DEBUG").strip().upper()
    text = truncate_line(str(msg))

    if is_silent_mode():
        progress(f"[{t}][DEBUG] {text}")
    else:
        info(f"[{t}][DEBUG] {text}")
