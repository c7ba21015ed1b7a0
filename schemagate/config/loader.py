"""Helpers for loading preprocessor configuration from TOML/JSON/env sources.

This module provides a single entry point `load_preprocessor_config`
that accepts various configuration sources:

* None -> default PreprocessorConfig
* dict -> PreprocessorConfig.from_dict
* PreprocessorConfig -> returned unchanged
* Path / path-like string -> load .toml/.json from filesystem
* Inline JSON/TOML strings

`config_from_env` builds the same record from ``SCHEMAGATE_*`` variables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
import json
import logging
import os

from pydantic import ValidationError

from schemagate.config.schema import PreprocessorConfig
from schemagate.errors import ConfigurationError

logger = logging.getLogger("schemagate.config.loader")

ConfigSource = Union[str, Path, Dict[str, Any], PreprocessorConfig, None]

ENV_PREFIX = "SCHEMAGATE_"
# Table that may hold the toggles inside a larger TOML document (pyproject.toml).
TOML_SECTION = "schemagate"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _parse_toml(text: str) -> Dict[str, Any]:
    """Parse TOML text into a dict.

    Uses stdlib tomllib on Python 3.11+ and falls back to `tomli` when
    available on older interpreters.
    """
    try:
        import tomllib  # type: ignore[attr-defined]
        return tomllib.loads(text)
    except ImportError:  # pragma: no cover - Python <3.11 path
        try:
            import tomli  # type: ignore[import-not-found]

            return tomli.loads(text)
        except ImportError as inner_exc:
            raise RuntimeError(
                "TOML configuration requires Python 3.11+ (tomllib) or the "
                "`tomli` package installed"
            ) from inner_exc


def _validate(data: Dict[str, Any]) -> PreprocessorConfig:
    section = data.get(TOML_SECTION)
    if isinstance(section, dict):
        data = section
    elif "tool" in data and isinstance(data["tool"], dict):
        tool_section = data["tool"].get(TOML_SECTION)
        if isinstance(tool_section, dict):
            data = tool_section
    try:
        return PreprocessorConfig.from_dict(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid preprocessor configuration: {exc}") from exc


def load_preprocessor_config(source: ConfigSource) -> PreprocessorConfig:
    """Load PreprocessorConfig from various configuration sources.

    Args:
        source: One of:
            * None: returns PreprocessorConfig.default()
            * dict: treated as already-parsed configuration mapping
            * PreprocessorConfig: returned as is
            * str/Path: either a filesystem path to a .toml/.json file,
              or an inline TOML/JSON string (auto-detected)

    Returns:
        PreprocessorConfig instance.

    Raises:
        ConfigurationError: If the source cannot be parsed or validated.
    """
    if source is None:
        logger.debug("No config source provided; using default PreprocessorConfig")
        return PreprocessorConfig.default()

    if isinstance(source, PreprocessorConfig):
        return source

    # Already parsed mapping
    if isinstance(source, dict):
        logger.debug("Loading PreprocessorConfig from provided dict")
        return _validate(source)

    # Path or string (file path or inline text)
    if isinstance(source, (str, Path)):
        path = Path(source)
        text: Optional[str] = None
        fmt: Optional[str] = None

        if _is_existing_file(path):
            text = path.read_text(encoding="utf-8")
            suffix = path.suffix.lower()
            if suffix in {".toml", ".tml"}:
                fmt = "toml"
            elif suffix == ".json":
                fmt = "json"
            else:
                # Fallback: guess from content
                stripped = text.lstrip()
                fmt = "json" if stripped.startswith(("{", "[")) else "toml"
            logger.info("Loading configuration from file: %s (fmt=%s)", path, fmt)
        else:
            # Inline string; auto-detect format
            text = str(source)
            stripped = text.lstrip()
            fmt = "json" if stripped.startswith(("{", "[")) else "toml"
            logger.info("Loading configuration from inline %s string", fmt)

        try:
            if fmt == "json":
                data = json.loads(text)
            else:
                data = _parse_toml(text)
        except ValueError as exc:
            # json.JSONDecodeError and tomllib.TOMLDecodeError are ValueErrors
            raise ConfigurationError(f"Cannot parse {fmt} configuration: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigurationError("Top-level configuration must be a mapping/dict")

        return _validate(data)

    raise TypeError(f"Unsupported config source type: {type(source)!r}")


def _is_existing_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        # Inline documents can exceed the OS path length limit.
        return False


def _parse_env_value(raw: str) -> Any:
    lowered = raw.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    return raw


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> PreprocessorConfig:
    """Build configuration from ``SCHEMAGATE_<TOGGLE>`` environment variables.

    ``SCHEMAGATE_BETA_FEATURES_ENABLED=1`` sets ``beta_features_enabled``.
    Unknown toggles become extra fields readable by custom predicates.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        PreprocessorConfig instance.
    """
    env = os.environ if environ is None else environ
    data: Dict[str, Any] = {}
    for key, raw in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX):].lower()
        if name:
            data[name] = _parse_env_value(raw)
    logger.debug("Loaded %d toggle(s) from environment", len(data))
    return _validate(data)


__all__ = ["ConfigSource", "config_from_env", "load_preprocessor_config"]
