"""clawlog configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (CLAWLOG_STATE_DIR, CLAWLOG_DB_PATH, CLAWLOG_LOG_LEVEL)
  3. Per-directory clawlog.yaml  (current working directory by default)
  4. Global ~/.clawlog/config.yaml
  5. Hardcoded defaults

All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from clawlog.ingest import SourceType
from clawlog.watch.patterns import WatchedPath, absolute_path

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".clawlog"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "clawlog.yaml"

DEFAULT_STATE_DIR: Path = Path.home() / ".openclaw"
DEFAULT_DB_FILENAME: str = "observability.db"

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["state_dir", "system_log_dir", "store", "reader", "watcher", "sources", "logging"]
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class StoreCfg:
    """Event store settings (clawlog.yaml: store:)."""

    path: Path | None = None  # None → <state_dir>/observability.db
    batch_size: int = 100


@dataclass
class ReaderCfg:
    """Tail reader settings (clawlog.yaml: reader:)."""

    max_bytes: int = 1_000_000


@dataclass
class WatcherCfg:
    """File watcher and debounce timings (clawlog.yaml: watcher:)."""

    stability_ms: int = 500
    poll_ms: int = 100
    debounce_ms: int = 500
    force_polling: bool = False


@dataclass
class LoggingCfg:
    """Diagnostic logging (clawlog.yaml: logging:)."""

    level: str = "INFO"
    file: str | None = None


@dataclass
class ClawlogConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    state_dir: Path = field(default_factory=lambda: DEFAULT_STATE_DIR)
    system_log_dir: Path | None = None  # None → <state_dir>/logs
    store: StoreCfg = field(default_factory=StoreCfg)
    reader: ReaderCfg = field(default_factory=ReaderCfg)
    watcher: WatcherCfg = field(default_factory=WatcherCfg)
    sources: list[WatchedPath] | None = None  # None → default_watched_paths()
    logging: LoggingCfg = field(default_factory=LoggingCfg)

    @property
    def db_path(self) -> Path:
        """Resolved event store path."""
        if self.store.path is not None:
            return self.store.path
        return self.state_dir / DEFAULT_DB_FILENAME


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"Invalid config: {name} must be an integer, got {value!r}")
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid config: {name} must be an integer, got {value!r}") from None
    if result < 1:
        raise ConfigError(f"Invalid config: {name} must be >= 1, got {result}")
    return result


def _expand(value: Any) -> Path:
    return Path(absolute_path(str(value)))


def _parse_sources(raw: Any) -> list[WatchedPath]:
    if not isinstance(raw, list):
        raise ConfigError("Invalid config: sources must be a list of {pattern, source_type}")

    valid = ", ".join(s.value for s in SourceType)
    result: list[WatchedPath] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict) or not item.get("pattern"):
            raise ConfigError(f"Invalid config: sources[{i}] needs a 'pattern'")
        try:
            source_type = SourceType(item.get("source_type"))
        except ValueError:
            raise ConfigError(
                f"Invalid config: sources[{i}].source_type {item.get('source_type')!r} "
                f"is not one of: {valid}"
            ) from None
        result.append(WatchedPath(pattern=str(_expand(item["pattern"])), source_type=source_type))
    return result


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> ClawlogConfig:
    """Build a *ClawlogConfig* from a merged raw YAML dict."""
    cfg = ClawlogConfig()

    if data.get("state_dir"):
        cfg.state_dir = _expand(data["state_dir"])

    if data.get("system_log_dir"):
        cfg.system_log_dir = _expand(data["system_log_dir"])

    if "store" in data:
        s = data["store"] or {}
        cfg.store = StoreCfg(
            path=_expand(s["path"]) if s.get("path") else None,
            batch_size=_positive_int(s.get("batch_size", cfg.store.batch_size), "store.batch_size"),
        )

    if "reader" in data:
        r = data["reader"] or {}
        cfg.reader = ReaderCfg(
            max_bytes=_positive_int(r.get("max_bytes", cfg.reader.max_bytes), "reader.max_bytes"),
        )

    if "watcher" in data:
        w = data["watcher"] or {}
        cfg.watcher = WatcherCfg(
            stability_ms=_positive_int(
                w.get("stability_ms", cfg.watcher.stability_ms), "watcher.stability_ms"
            ),
            poll_ms=_positive_int(w.get("poll_ms", cfg.watcher.poll_ms), "watcher.poll_ms"),
            debounce_ms=_positive_int(
                w.get("debounce_ms", cfg.watcher.debounce_ms), "watcher.debounce_ms"
            ),
            force_polling=bool(w.get("force_polling", cfg.watcher.force_polling)),
        )

    if data.get("sources") is not None:
        cfg.sources = _parse_sources(data["sources"])

    if "logging" in data:
        lg = data["logging"] or {}
        cfg.logging = LoggingCfg(
            level=str(lg.get("level", cfg.logging.level)).upper(),
            file=lg.get("file") or None,
        )

    return cfg


def _apply_env_overrides(cfg: ClawlogConfig) -> ClawlogConfig:
    """Apply CLAWLOG_* environment variable overrides."""
    if state_dir := os.environ.get("CLAWLOG_STATE_DIR"):
        cfg.state_dir = _expand(state_dir)
    if db_path := os.environ.get("CLAWLOG_DB_PATH"):
        cfg.store.path = _expand(db_path)
    if level := os.environ.get("CLAWLOG_LOG_LEVEL"):
        cfg.logging.level = level.upper()
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> ClawlogConfig:
    """Load and return a merged *ClawlogConfig*.

    Applies layers in order: global → per-directory → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *clawlog.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged *ClawlogConfig* with env var overrides applied.

    Raises:
        ConfigError: If a value is out of range or a source type is unknown.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)
    return _apply_env_overrides(cfg)
