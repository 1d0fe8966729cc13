"""Configuration loading for repodoc (.repodoc.yml, .env and environment)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

CONFIG_FILENAME = ".repodoc.yml"

DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_CACHE_TTL = 600
DEFAULT_COMMIT_LIMIT = 50
DEFAULT_REQUEST_TIMEOUT = 120.0


class ConfigError(RuntimeError):
    """Raised when configuration is missing or cannot be parsed."""


@dataclass(frozen=True)
class Settings:
    """Validated, read-only settings for a repodoc process."""

    api_key: str
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL
    commit_limit: int = DEFAULT_COMMIT_LIMIT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    prompts_dir: Optional[Path] = None
    debug: bool = False
    debug_dir: Path = Path("debug")


def load_settings(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    dotenv: bool = True,
) -> Settings:
    """Build the process settings from defaults, ``.repodoc.yml`` and the environment.

    Environment variables win over the YAML file. ``GEMINI_API_KEY`` is
    required; a missing key raises :class:`ConfigError` before any work starts.
    """
    if dotenv and environ is None:
        load_dotenv(find_dotenv(usecwd=True))
    env = dict(os.environ if environ is None else environ)

    config_file = _resolve_config_path(config_path)
    data = _read_config(config_file) if config_file.exists() else {}
    base_dir = config_file.parent

    gemini = _as_dict(data.get("gemini"))
    history = _as_dict(data.get("history"))

    api_key = env.get("GEMINI_API_KEY") or _as_str(gemini.get("api_key"))
    if not api_key or not api_key.strip():
        raise ConfigError("GEMINI_API_KEY is required")

    model = env.get("GEMINI_MODEL") or _as_str(gemini.get("model")) or DEFAULT_MODEL
    base_url = env.get("GEMINI_BASE_URL") or _as_str(gemini.get("base_url")) or DEFAULT_BASE_URL

    cache_ttl = _positive_int(
        "REPODOC_CACHE_TTL", env.get("REPODOC_CACHE_TTL", gemini.get("cache_ttl")), DEFAULT_CACHE_TTL
    )
    commit_limit = _positive_int(
        "REPODOC_COMMIT_LIMIT",
        env.get("REPODOC_COMMIT_LIMIT", history.get("commit_limit")),
        DEFAULT_COMMIT_LIMIT,
    )
    request_timeout = _positive_float(
        "REPODOC_REQUEST_TIMEOUT",
        env.get("REPODOC_REQUEST_TIMEOUT", gemini.get("request_timeout")),
        DEFAULT_REQUEST_TIMEOUT,
    )

    prompts_dir_value = env.get("REPODOC_PROMPTS_DIR") or _as_str(data.get("prompts_dir"))
    prompts_dir = _resolve_dir(prompts_dir_value, base_dir) if prompts_dir_value else None

    debug_value = env.get("REPODOC_DEBUG", data.get("debug"))
    debug = _as_bool(debug_value)
    if debug_value is not None and debug is None:
        raise ConfigError(f"REPODOC_DEBUG must be a boolean, got {debug_value!r}")

    debug_dir_value = env.get("REPODOC_DEBUG_DIR") or _as_str(data.get("debug_dir"))
    debug_dir = _resolve_dir(debug_dir_value, base_dir) if debug_dir_value else Path.cwd() / "debug"

    return Settings(
        api_key=api_key.strip(),
        model=model,
        base_url=base_url.rstrip("/"),
        cache_ttl_seconds=cache_ttl,
        commit_limit=commit_limit,
        request_timeout=request_timeout,
        prompts_dir=prompts_dir,
        debug=bool(debug),
        debug_dir=debug_dir,
    )


def _resolve_config_path(config_path: Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / CONFIG_FILENAME).resolve()
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _resolve_dir(value: str, base_dir: Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


def _positive_int(name: str, value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    parsed = _as_int(value)
    if parsed is None or parsed <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    return parsed


def _positive_float(name: str, value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    parsed = _as_float(value)
    if parsed is None or parsed <= 0:
        raise ConfigError(f"{name} must be a positive number, got {value!r}")
    return parsed


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off", ""}:
            return False
    return None


__all__ = ["ConfigError", "Settings", "load_settings"]
