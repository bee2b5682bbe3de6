"""Structured logging and pass profiling on top of telelog.

Everything the engine logs goes through four calls:

``configure(...)`` -- pick settings, a preset or a ready ``telelog.Config``
``get_logger(name)`` -- cached logger built from the active configuration
``record_event(name, ...)`` -- one ``event::<name>`` line at a chosen level
``span(name, ...)`` -- profile a style pass or buffer transaction
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, MutableMapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "MARKDOWN_ENGINE_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "markdown_engine")
DEFAULT_LOG_FILE = "markdown_engine.log"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def env_value(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}")


def env_flag(name: str, default: bool) -> bool:
    """Read a boolean ``MARKDOWN_ENGINE_*`` variable."""

    raw = env_value(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True, slots=True)
class LogSettings:
    """Plain description of a telelog configuration."""

    level: str = "INFO"
    console: bool = True
    color: bool = True
    json: bool = False
    log_file: Optional[str] = None
    buffered: bool = False

    @classmethod
    def from_env(cls) -> "LogSettings":
        return cls(
            level=(env_value("LOG_LEVEL") or "INFO").upper(),
            console=not env_flag("DISABLE_CONSOLE", False),
            color=not env_flag("NO_COLOR", False),
            json=env_flag("LOG_JSON", False),
            log_file=env_value("LOG_FILE") or None,
        )

    def build(self) -> Any:
        config = tl.Config()
        config.with_min_level(self.level)
        config.with_console_output(self.console)
        if self.console:
            config.with_colored_output(self.color)
        if self.json:
            config.with_json_format(True)
        if self.log_file:
            config.with_file_output(self.log_file)
        if self.buffered:
            config.with_buffering(True)
        # Pass timings come from telelog's profiler.
        config.with_profiling(True)
        return config


PRESETS: Dict[str, LogSettings] = {
    "development": LogSettings(level="DEBUG"),
    "production": LogSettings(
        level="INFO", console=False, log_file=DEFAULT_LOG_FILE, buffered=True
    ),
}

_LOGGERS: MutableMapping[str, Any] = {}
_ACTIVE_CONFIG: Optional[Any] = None


def configure(
    *,
    config: Optional[Any] = None,
    preset: Optional[str] = None,
    settings: Optional[LogSettings] = None,
) -> None:
    """Replace the active configuration and forget cached loggers.

    At most one of ``config`` (a ``telelog.Config``), ``preset`` (a key of
    :data:`PRESETS`) and ``settings`` may be given; with none of them the
    ``MARKDOWN_ENGINE_LOG_*`` environment decides.
    """

    global _ACTIVE_CONFIG
    if sum(option is not None for option in (config, preset, settings)) > 1:
        raise ValueError("Provide only one of `config`, `preset` or `settings`.")

    if preset is not None:
        try:
            settings = PRESETS[preset.lower()]
        except KeyError:
            raise ValueError(f"Unknown preset '{preset}'.") from None
        log_file = env_value("LOG_FILE")
        if log_file and settings.log_file:
            settings = replace(settings, log_file=log_file)
    if config is None:
        config = (settings or LogSettings.from_env()).build()

    _ACTIVE_CONFIG = config
    _LOGGERS.clear()


def get_logger(name: Optional[str] = None) -> Any:
    """Return a cached ``telelog.Logger`` for ``name``."""

    global _ACTIVE_CONFIG
    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name not in _LOGGERS:
        if _ACTIVE_CONFIG is None:
            _ACTIVE_CONFIG = LogSettings.from_env().build()
        _LOGGERS[logger_name] = tl.Logger.with_config(logger_name, _ACTIVE_CONFIG)
    return _LOGGERS[logger_name]


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _level_method(logger: Any, level: str) -> Tuple[Any, bool]:
    name = level.lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        return structured, True
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    return plain, False


def _emit(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    method, structured = _level_method(logger, level)
    if structured:
        method(message, [(str(key), _text(value)) for key, value in payload.items()])
    else:
        method(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit ``event::<name>`` with ``data`` as structured fields."""

    _emit(
        get_logger(logger_name),
        level,
        f"event::{name}",
        {"event": name, **(data or {})},
    )


@dataclass
class PassSpan:
    """Live handle for one profiled block; metadata lands on its closing line."""

    logger: Any
    name: str
    component: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def _payload(self, **extra: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"span": self.name, **self.metadata}
        if self.component:
            payload["component"] = self.component
        payload.update({key: _text(value) for key, value in extra.items()})
        return payload

    def finish(self) -> None:
        _emit(self.logger, "debug", "span::done", self._payload())

    def fail(self, reason: str) -> None:
        _emit(self.logger, "error", "span::fail", self._payload(reason=reason))


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[PassSpan]:
    """Profile the enclosed block under ``name``.

    ``component`` additionally tracks the block as a telelog component.
    ``metadata`` is pushed as logger context for the duration of the block.
    """

    log = get_logger(logger_name)
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    for key, value in context.items():
        log.add_context(key, value)

    handle = PassSpan(
        logger=log, name=name, component=component, metadata=dict(context)
    )
    try:
        with ExitStack() as stack:
            if component:
                stack.enter_context(log.track_component(component))
            stack.enter_context(log.profile(name))
            try:
                yield handle
            except Exception as exc:
                handle.fail(str(exc))
                raise
        handle.finish()
    finally:
        for key in context:
            log.remove_context(key)


configure()

__all__ = [
    "ENV_PREFIX",
    "LogSettings",
    "PRESETS",
    "PassSpan",
    "configure",
    "env_flag",
    "env_value",
    "get_logger",
    "record_event",
    "span",
]
