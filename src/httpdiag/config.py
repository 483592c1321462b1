"""Configuration loading and precedence resolution.

:class:`~httpdiag.models.DiagnosticsConfig` can be built directly, or
resolved from several layers by :func:`resolve_config`:

* **Explicit overrides** -- keyword arguments passed by the caller.
* **Environment variables** -- ``HTTPDIAG_*`` and ``NO_COLOR``; see
  :func:`env_overrides`.
* **Project config** -- ``./httpdiag.json`` in the working directory.
* **Defaults** -- the model's field defaults.

Invalid files and values raise :class:`~httpdiag.exceptions.ConfigError`.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from httpdiag.exceptions import ConfigError
from httpdiag.models import DiagnosticsConfig

_PROJECT_CONFIG_FILENAME = "httpdiag.json"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


# --- Files ---


def _read_json(path: Path, label: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_config_file(path: Union[str, Path]) -> DiagnosticsConfig:
    """Load and validate a configuration file.

    Args:
        path: Path to a JSON file whose keys are
            :class:`~httpdiag.models.DiagnosticsConfig` fields.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the file does not exist, contains invalid JSON, or
            fails Pydantic validation.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    data = _read_json(path, "config")
    try:
        return DiagnosticsConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./httpdiag.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a valid JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json(path, "project config")


# --- Environment ---


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean, got {value!r}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ConfigError(f"Environment variable {name} must be an integer, got {value!r}") from exc


def env_overrides() -> dict[str, Any]:
    """Collect configuration values from environment variables.

    Recognised variables:
        - ``HTTPDIAG_LOGGER`` -- ``logger_name``
        - ``HTTPDIAG_LEVEL`` -- ``success_level``
        - ``HTTPDIAG_CAPTURE_HEADERS`` -- ``capture_headers`` (boolean)
        - ``HTTPDIAG_CAPTURE_CONTENT`` -- ``capture_content`` (boolean)
        - ``HTTPDIAG_MAX_CONTENT_CHARS`` -- ``max_content_chars`` (integer)
        - ``HTTPDIAG_FORMAT`` -- ``console.format``
        - ``NO_COLOR`` -- sets ``console.no_color`` when present (any value)

    Returns:
        A partial config dict containing only the variables that are set.

    Raises:
        ConfigError: If a boolean or integer variable cannot be parsed.
    """
    result: dict[str, Any] = {}
    console: dict[str, Any] = {}

    logger_name = os.environ.get("HTTPDIAG_LOGGER")
    if logger_name:
        result["logger_name"] = logger_name
    level = os.environ.get("HTTPDIAG_LEVEL")
    if level:
        result["success_level"] = level
    for var, key in (
        ("HTTPDIAG_CAPTURE_HEADERS", "capture_headers"),
        ("HTTPDIAG_CAPTURE_CONTENT", "capture_content"),
    ):
        raw = os.environ.get(var)
        if raw:
            result[key] = _parse_bool(var, raw)
    max_chars = os.environ.get("HTTPDIAG_MAX_CONTENT_CHARS")
    if max_chars:
        result["max_content_chars"] = _parse_int("HTTPDIAG_MAX_CONTENT_CHARS", max_chars)
    fmt = os.environ.get("HTTPDIAG_FORMAT")
    if fmt:
        console["format"] = fmt.strip().lower()
    if os.environ.get("NO_COLOR") is not None:
        console["no_color"] = True

    if console:
        result["console"] = console
    return result


# --- Precedence resolution ---


def _merge(base: dict[str, Any], layer: dict[str, Any]) -> dict[str, Any]:
    """Merge *layer* over *base*, descending into the nested ``console`` mapping."""
    merged = dict(base)
    for key, value in layer.items():
        if key == "console" and isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def resolve_config(**overrides: Any) -> DiagnosticsConfig:
    """Resolve config with the full precedence chain.

    Precedence (high to low):
        1. Keyword *overrides* (``None`` values are ignored)
        2. Environment variables (see :func:`env_overrides`)
        3. Project config (``./httpdiag.json``)
        4. Defaults

    Example::

        config = resolve_config(capture_headers=True)

    Raises:
        ConfigError: If any layer is invalid or the merged result fails
            validation.
    """
    data: dict[str, Any] = {}

    project = load_project_config()
    if project is not None:
        data = _merge(data, project)

    data = _merge(data, env_overrides())
    data = _merge(data, {k: v for k, v in overrides.items() if v is not None})

    try:
        return DiagnosticsConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid diagnostics configuration: {exc}") from exc
