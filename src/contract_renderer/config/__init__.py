"""Export engine configuration package."""

from contract_renderer.config.loader import get_settings, load_settings
from contract_renderer.config.models import ExportSettings

__all__ = ["ExportSettings", "get_settings", "load_settings"]
