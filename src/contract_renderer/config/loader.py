"""Settings loader for the export engine.

Loads the JSON settings file, applies environment overrides and returns a
validated ExportSettings instance. Uses module-level caching so the file is
only parsed once per process.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from contract_renderer.config.models import ExportSettings
from contract_renderer.domain.errors import ConfigurationError

# Module-level cache
_settings_cache: dict[str, ExportSettings] = {}

# Default settings file, next to this module
_DEFAULT_SETTINGS_PATH = Path(__file__).parent / "export_default.json"

ENV_BASE_URL = "APP_BASE_URL"
ENV_USE_NEW_EXPORT = "USE_NEW_EXPORT"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def load_settings(path: Optional[Path] = None) -> ExportSettings:
    """Load and validate export settings from a JSON file.

    Parameters
    ----------
    path : Path | None
        Path to a custom JSON settings file.
        If ``None``, the built-in ``export_default.json`` is used.

    Returns
    -------
    ExportSettings
        Validated settings with environment overrides applied.

    Raises
    ------
    FileNotFoundError
        If the specified path does not exist.
    pydantic.ValidationError
        If the JSON content does not match the expected schema.
    ConfigurationError
        If an environment override has an unusable value.
    """
    settings_path = Path(path) if path else _DEFAULT_SETTINGS_PATH
    cache_key = str(settings_path.resolve())

    if cache_key in _settings_cache:
        return _settings_cache[cache_key]

    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    raw = json.loads(settings_path.read_text(encoding="utf-8"))
    settings = ExportSettings.model_validate(raw)
    settings = _apply_env_overrides(settings)
    _settings_cache[cache_key] = settings
    return settings


def get_settings() -> ExportSettings:
    """Get the default export settings (cached).

    This is the main entry point used by the rest of the application.
    """
    return load_settings()


def clear_cache() -> None:
    """Clear the settings cache — useful for testing."""
    _settings_cache.clear()


def _apply_env_overrides(settings: ExportSettings) -> ExportSettings:
    updates: dict[str, object] = {}

    base_url = os.environ.get(ENV_BASE_URL)
    if base_url:
        updates["base_url"] = base_url

    flag = os.environ.get(ENV_USE_NEW_EXPORT)
    if flag is not None:
        value = flag.strip().lower()
        if value in _TRUE:
            updates["use_new_export"] = True
        elif value in _FALSE:
            updates["use_new_export"] = False
        else:
            raise ConfigurationError(f"{ENV_USE_NEW_EXPORT} must be true/false, got {flag!r}")

    return settings.model_copy(update=updates) if updates else settings
