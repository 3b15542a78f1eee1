"""Use Case: Export Document — choose an engine, fall back once, never return junk.

Policy:

1. The modern engine runs only when ``use_new_export`` is on **and** its
   availability probe passes.
2. Any other failure of the modern engine (a ``RenderingError`` or a raw
   browser error) is logged and the legacy engine is tried once.
3. If nothing could produce a file, ``ExportUnavailableError`` is raised,
   chained to the last failure.
4. Configuration errors and output validation errors are never retried.

Usage::

    service = ExportService(pdf_exporter, docx_exporter, legacy_pdf, legacy_docx)
    result = service.export_docx(ExportRequest(content="# Title"))
    result = asyncio.run(service.export_pdf(request, PdfJob(document_id="abc")))
"""

from __future__ import annotations

import logging
from typing import Optional

from contract_renderer.content.normalizer import require_content
from contract_renderer.domain.errors import (
    ConfigurationError,
    ExportUnavailableError,
    OutputValidationError,
    RenderingError,
)
from contract_renderer.domain.models.document import ExportRequest, ExportResult, PdfJob
from contract_renderer.domain.models.enums import ExportFormat
from contract_renderer.domain.ports.document_exporter import DocumentExporterPort
from contract_renderer.infrastructure.exporters.pdf_exporter import PlaywrightPdfExporter
from contract_renderer.rules.constants import CONTENT_TYPE_PDF

logger = logging.getLogger(__name__)

# Never retried through the fallback
_FATAL = (ConfigurationError, OutputValidationError)


class ExportService:
    """Export orchestrator for PDF and .docx output."""

    def __init__(
        self,
        pdf_exporter: Optional[PlaywrightPdfExporter] = None,
        docx_exporter: Optional[DocumentExporterPort] = None,
        legacy_pdf: Optional[DocumentExporterPort] = None,
        legacy_docx: Optional[DocumentExporterPort] = None,
        *,
        use_new_export: bool = True,
    ) -> None:
        self._pdf = pdf_exporter
        self._docx = docx_exporter
        self._legacy_pdf = legacy_pdf
        self._legacy_docx = legacy_docx
        self.use_new_export = use_new_export

    # -- Public API ----------------------------------------------------------

    async def export(
        self,
        fmt: ExportFormat,
        request: Optional[ExportRequest] = None,
        pdf_job: Optional[PdfJob] = None,
    ) -> ExportResult:
        """Dispatch on *fmt*."""
        if fmt == ExportFormat.PDF:
            return await self.export_pdf(request, pdf_job)
        if request is None:
            raise ConfigurationError("A .docx export needs an ExportRequest")
        return self.export_docx(request)

    async def export_pdf(
        self,
        request: Optional[ExportRequest] = None,
        job: Optional[PdfJob] = None,
    ) -> ExportResult:
        """Print the stored document, or draw *request* with the legacy engine.

        Raises:
            ExportUnavailableError: neither engine produced a file.
            OutputValidationError: an engine produced an invalid file.
            ConfigurationError: the style or content is unusable.
        """
        last_error: Optional[Exception] = None

        if job is not None and self._pdf is not None and self.use_new_export:
            if await self._pdf.is_available():
                try:
                    data = await self._pdf.export_pdf(job.document_id, job.credential, job.options)
                except RenderingError as exc:
                    logger.warning(
                        "Modern PDF export failed at gate %s (%s); trying legacy engine",
                        exc.gate,
                        exc,
                    )
                    last_error = exc
                except _FATAL:
                    raise
                except Exception as exc:
                    logger.warning("Modern PDF export failed (%s); trying legacy engine", exc)
                    last_error = exc
                else:
                    return ExportResult(
                        data=data,
                        content_type=CONTENT_TYPE_PDF,
                        format=ExportFormat.PDF,
                        engine=self._pdf.engine,
                    )
            else:
                logger.warning("Modern PDF engine unavailable; using legacy engine")

        if request is not None:
            require_content(request.content)
        return self._run_legacy(self._legacy_pdf, request, ExportFormat.PDF, last_error)

    def export_docx(self, request: ExportRequest) -> ExportResult:
        """Build a .docx, falling back to the plain legacy builder once."""
        require_content(request.content)
        last_error: Optional[Exception] = None

        if self._docx is not None and self.use_new_export:
            if self._docx.is_available():
                try:
                    return self._docx.export(request)
                except _FATAL:
                    raise
                except Exception as exc:
                    logger.warning("DOCX export failed (%s); trying legacy engine", exc)
                    last_error = exc
            else:
                logger.warning("DOCX engine unavailable; using legacy engine")

        return self._run_legacy(self._legacy_docx, request, ExportFormat.DOCX, last_error)

    async def availability(self) -> dict[str, bool]:
        """Which formats can be produced right now, by any engine."""
        pdf = self._legacy_pdf is not None and self._legacy_pdf.is_available()
        if not pdf and self._pdf is not None and self.use_new_export:
            pdf = await self._pdf.is_available()
        docx = any(
            exporter is not None and exporter.is_available()
            for exporter in (self._docx, self._legacy_docx)
        )
        return {ExportFormat.PDF.value: pdf, ExportFormat.DOCX.value: docx}

    # -- Internal ------------------------------------------------------------

    def _run_legacy(
        self,
        exporter: Optional[DocumentExporterPort],
        request: Optional[ExportRequest],
        fmt: ExportFormat,
        last_error: Optional[Exception],
    ) -> ExportResult:
        if exporter is None or request is None or not exporter.is_available():
            raise ExportUnavailableError(
                f"{fmt.value} export unavailable: no engine could run"
            ) from last_error

        try:
            result = exporter.export(request)
        except _FATAL:
            raise
        except Exception as exc:
            logger.error("Legacy %s export failed: %s", fmt.value, exc)
            raise ExportUnavailableError(f"{fmt.value} export unavailable: {exc}") from exc

        logger.info("%s exported with %s", fmt.value, result.engine)
        return result
