"""Guide-engine telemetry on top of telelog.

Redraws run inside ``span("guides::redraw")`` and buffer edits inside
``span("buffer::<label>")``; controller state changes, glyph cache resets
and bitmap fallbacks are ``record_event`` calls. ``configure`` swaps the
telelog config, either for one of ``PRESETS`` or for the
``INDENT_GUIDE_LOG_*`` environment settings.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "INDENT_GUIDE_"
LOGGER_NAME = "indent_guide"

Settings = Dict[str, Any]

PRESETS: Dict[str, Settings] = {
    "development": {"level": "DEBUG", "console": True, "color": True},
    "production": {
        "level": "WARNING",
        "console": False,
        "buffered": True,
        "file": "indent_guide.log",
    },
    # every redraw span, written as JSON for offline latency analysis
    "performance": {
        "level": "DEBUG",
        "console": False,
        "json": True,
        "buffered": True,
        "file": "indent_guide-performance.log",
    },
}

_ACTIVE_CONFIG: Optional[Any] = None
_LOGGER: Optional[Any] = None


def _env(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}")


def _env_on(name: str) -> bool:
    return (_env(name) or "").strip().lower() in {"1", "true", "yes", "on"}


def _env_settings() -> Settings:
    settings: Settings = {
        "level": (_env("LOG_LEVEL") or "WARNING").upper(),
        "console": not _env_on("DISABLE_CONSOLE"),
        "color": not _env_on("NO_COLOR"),
        "json": _env_on("LOG_JSON"),
        "buffered": _env_on("LOG_BUFFERED"),
        "file": _env("LOG_FILE") or "",
    }
    if settings["buffered"]:
        settings["buffer_size"] = int(_env("LOG_BUFFER_SIZE") or "2048")
    return settings


def _build_config(settings: Settings) -> Any:
    config = tl.Config()
    config.with_min_level(settings["level"])
    config.with_console_output(settings.get("console", True))
    if settings.get("console", True):
        config.with_colored_output(settings.get("color", True))
    config.with_json_format(settings.get("json", False))
    if settings.get("buffered"):
        config.with_buffering(True)
        if "buffer_size" in settings:
            config.with_buffer_size(settings["buffer_size"])
    log_file = _env("LOG_FILE") or settings.get("file")
    if log_file:
        config.with_file_output(log_file)
    config.with_profiling(True)
    return config


def configure(preset: Optional[str] = None) -> None:
    """Adopt ``PRESETS[preset]``, or the environment settings when ``None``."""

    global _ACTIVE_CONFIG, _LOGGER
    if preset is None:
        settings = _env_settings()
    elif preset in PRESETS:
        settings = PRESETS[preset]
    else:
        raise ValueError(
            f"Unknown preset '{preset}', expected one of {sorted(PRESETS)}."
        )
    _ACTIVE_CONFIG = _build_config(settings)
    _LOGGER = None


def _logger() -> Any:
    global _LOGGER
    if _ACTIVE_CONFIG is None:
        configure()
    if _LOGGER is None:
        _LOGGER = tl.Logger.with_config(LOGGER_NAME, _ACTIVE_CONFIG)
    return _LOGGER


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _emit(level: str, message: str, payload: Dict[str, Any]) -> None:
    log = _logger()
    pairs: List[Tuple[str, str]] = [
        (str(key), _stringify(value)) for key, value in payload.items()
    ]
    with_data = getattr(log, f"{level}_with", None)
    if with_data is not None:
        with_data(message, pairs)
        return
    plain = getattr(log, level, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {dict(pairs)}")


def record_event(
    name: str, *, level: str = "debug", data: Optional[Dict[str, Any]] = None
) -> None:
    """Emit an ``event::<name>`` record carrying ``data``."""

    _emit(level.lower(), f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    """Yielded by ``span``; collects metadata and reports early exits."""

    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def skip(self, reason: str) -> None:
        """The block ran but had nothing to do (prompt open, excluded context)."""

        self._report("debug", "span::skip", reason)

    def fail(self, reason: str) -> None:
        self._report("error", "span::fail", reason)

    def _report(self, level: str, message: str, reason: str) -> None:
        payload: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        payload["reason"] = reason
        _emit(level, message, payload)


@contextmanager
def span(
    name: str,
    *,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile the block as ``name``; ``component=True`` also tracks it by name.

    ``metadata`` stays attached as logger context until the block exits.
    Exceptions are reported through ``SpanHandle.fail`` and re-raised.
    """

    log = _logger()
    component_name = name if component is True else component or None
    handle = SpanHandle(span_name=name, component_name=component_name)
    for key, value in (metadata or {}).items():
        handle.add_metadata(key, value)

    with ExitStack() as stack:
        for key, value in handle.metadata.items():
            log.add_context(key, value)
            stack.callback(log.remove_context, key)
        if component_name:
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise


__all__ = ["ENV_PREFIX", "PRESETS", "SpanHandle", "configure", "record_event", "span"]
