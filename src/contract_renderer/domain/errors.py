"""Domain errors — custom exceptions for the export engine.

These exceptions are raised by domain services and exporters and caught by
the application or presentation layers. They carry no infrastructure
dependencies.
"""

from __future__ import annotations

from typing import Optional


class ContractRendererError(Exception):
    """Base exception for all rendering and export errors."""


class ConfigurationError(ContractRendererError):
    """Raised when configuration is invalid or missing. Never retried."""


class StyleResolutionError(ConfigurationError):
    """Raised when a style enum value has no entry in the resolver tables."""


class ContentError(ConfigurationError):
    """Raised when required document content is missing."""


class RenderingError(ContractRendererError):
    """Transient failure inside a renderer (navigation, hydration, fonts).

    Carries enough context to diagnose timing issues: which readiness gate
    failed, the URL the page was on, and how much text had rendered.
    """

    def __init__(
        self,
        message: str,
        *,
        gate: Optional[str] = None,
        url: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.gate = gate
        self.url = url
        self.content_length = content_length


class OutputValidationError(ContractRendererError):
    """Raised when a produced file is empty or has the wrong signature."""


class ExportUnavailableError(ContractRendererError):
    """Raised when neither the modern nor the legacy exporter could run."""

    tag = "export_unavailable"
