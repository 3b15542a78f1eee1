"""Composition Root — Dependency Injection Container.

This module is the ONLY place where concrete infrastructure classes are
imported and wired together.  All other layers refer to ports (interfaces).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from contract_renderer.config.loader import get_settings, load_settings
from contract_renderer.config.models import ExportSettings
from contract_renderer.domain.ports.document_source import DocumentSourcePort

from contract_renderer.infrastructure.exporters.docx_exporter import DocxExporter
from contract_renderer.infrastructure.exporters.legacy import LegacyDocxExporter, LegacyPdfExporter
from contract_renderer.infrastructure.exporters.pdf_exporter import (
    BrowserManager,
    PlaywrightPdfExporter,
)
from contract_renderer.infrastructure.print_route.app import SessionResolver, create_print_app
from contract_renderer.infrastructure.print_route.memory_source import InMemoryDocumentSource

from contract_renderer.application.use_cases.export_document import ExportService


class Container:
    """Simple dependency injection container.

    Wires the exporters, the shared browser and the print route.

    Usage::

        container = Container()
        result = container.export_service.export_docx(request)
        await container.shutdown()
    """

    def __init__(
        self,
        settings_path: Optional[str] = None,
        *,
        settings: Optional[ExportSettings] = None,
        browser_manager: Optional[BrowserManager] = None,
    ) -> None:
        # -- Settings -------------------------------------------------------
        if settings is None:
            settings = load_settings(Path(settings_path)) if settings_path else get_settings()
        self._settings = settings

        # -- Infrastructure singletons ---------------------------------------
        self._browser_manager = browser_manager or BrowserManager(settings.browser)
        self._pdf_exporter = PlaywrightPdfExporter(self._browser_manager, settings)
        self._docx_exporter = DocxExporter(settings.page_format)
        self._legacy_pdf = LegacyPdfExporter(settings.page_format)
        self._legacy_docx = LegacyDocxExporter()

        self._export_service = ExportService(
            self._pdf_exporter,
            self._docx_exporter,
            self._legacy_pdf,
            self._legacy_docx,
            use_new_export=settings.use_new_export,
        )

    # -- Accessors -----------------------------------------------------------

    @property
    def settings(self) -> ExportSettings:
        return self._settings

    @property
    def browser_manager(self) -> BrowserManager:
        return self._browser_manager

    @property
    def pdf_exporter(self) -> PlaywrightPdfExporter:
        return self._pdf_exporter

    @property
    def export_service(self) -> ExportService:
        return self._export_service

    def print_app(
        self,
        source: Optional[DocumentSourcePort] = None,
        session_resolver: Optional[SessionResolver] = None,
    ):
        """FastAPI app serving the print route over *source*."""
        return create_print_app(
            source or InMemoryDocumentSource(),
            session_resolver=session_resolver,
            settings=self._settings,
        )

    async def shutdown(self) -> None:
        """Close the shared browser, if it was ever launched."""
        await self._browser_manager.shutdown()
