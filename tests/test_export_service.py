"""Tests for the export orchestrator's engine selection and fallback."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from contract_renderer.application.use_cases.export_document import ExportService
from contract_renderer.domain.errors import (
    ContentError,
    ExportUnavailableError,
    OutputValidationError,
    RenderingError,
    StyleResolutionError,
)
from contract_renderer.domain.models.document import ExportRequest, ExportResult, PdfJob
from contract_renderer.domain.models.enums import ExportFormat
from contract_renderer.infrastructure.exporters.docx_exporter import DocxExporter
from contract_renderer.infrastructure.exporters.legacy import LegacyDocxExporter, LegacyPdfExporter

REQUEST = ExportRequest(content="# Lease\n\nThe tenant agrees to the terms below.")
JOB = PdfJob(document_id="doc-1", credential="token")


def _pdf_engine(*, available=True, data=b"%PDF-1.7 modern", error=None):
    engine = MagicMock()
    engine.engine = "playwright"
    engine.is_available = AsyncMock(return_value=available)
    engine.export_pdf = AsyncMock(return_value=data, side_effect=error)
    return engine


def _port(fmt: ExportFormat, *, available=True, error=None, engine="stub"):
    port = MagicMock()
    port.is_available.return_value = available
    if error is not None:
        port.export.side_effect = error
    else:
        port.export.return_value = ExportResult(
            data=b"%PDF-1.4 legacy" if fmt == ExportFormat.PDF else b"PK\x03\x04",
            content_type="application/octet-stream",
            format=fmt,
            engine=engine,
        )
    return port


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------


class TestExportPdf:
    def test_modern_engine_used(self):
        modern = _pdf_engine()
        legacy = _port(ExportFormat.PDF)
        service = ExportService(pdf_exporter=modern, legacy_pdf=legacy)

        result = asyncio.run(service.export_pdf(REQUEST, JOB))

        assert result.engine == "playwright"
        assert result.content_type == "application/pdf"
        modern.export_pdf.assert_awaited_once_with("doc-1", "token", JOB.options)
        legacy.export.assert_not_called()

    def test_rendering_error_falls_back_once(self, caplog):
        modern = _pdf_engine(error=RenderingError("late hydration", gate="content"))
        legacy = _port(ExportFormat.PDF, engine="legacy-fpdf")
        service = ExportService(pdf_exporter=modern, legacy_pdf=legacy)

        result = asyncio.run(service.export_pdf(REQUEST, JOB))

        assert result.engine == "legacy-fpdf"
        assert modern.export_pdf.await_count == 1
        legacy.export.assert_called_once_with(REQUEST)
        assert "content" in caplog.text

    def test_unexpected_error_falls_back(self, caplog):
        modern = _pdf_engine(error=RuntimeError("browser crashed"))
        legacy = _port(ExportFormat.PDF, engine="legacy-fpdf")
        service = ExportService(pdf_exporter=modern, legacy_pdf=legacy)

        result = asyncio.run(service.export_pdf(REQUEST, JOB))

        assert result.engine == "legacy-fpdf"
        assert "browser crashed" in caplog.text

    def test_unavailable_modern_goes_legacy(self):
        modern = _pdf_engine(available=False)
        legacy = _port(ExportFormat.PDF, engine="legacy-fpdf")
        service = ExportService(pdf_exporter=modern, legacy_pdf=legacy)

        result = asyncio.run(service.export_pdf(REQUEST, JOB))

        assert result.engine == "legacy-fpdf"
        modern.export_pdf.assert_not_awaited()

    def test_flag_off_skips_modern(self):
        modern = _pdf_engine()
        legacy = _port(ExportFormat.PDF, engine="legacy-fpdf")
        service = ExportService(pdf_exporter=modern, legacy_pdf=legacy, use_new_export=False)

        result = asyncio.run(service.export_pdf(REQUEST, JOB))

        assert result.engine == "legacy-fpdf"
        modern.is_available.assert_not_awaited()

    def test_no_job_uses_legacy(self):
        modern = _pdf_engine()
        service = ExportService(pdf_exporter=modern, legacy_pdf=LegacyPdfExporter())

        result = asyncio.run(service.export_pdf(REQUEST))

        assert result.data[:4] == b"%PDF"
        assert result.engine == "legacy-fpdf"

    def test_both_fail_is_unavailable(self):
        error = RenderingError("fonts never loaded", gate="fonts")
        modern = _pdf_engine(error=error)
        service = ExportService(pdf_exporter=modern)

        with pytest.raises(ExportUnavailableError) as exc_info:
            asyncio.run(service.export_pdf(REQUEST, JOB))
        assert exc_info.value.__cause__ is error
        assert exc_info.value.tag == "export_unavailable"

    def test_modern_failure_without_request(self):
        modern = _pdf_engine(error=RenderingError("timeout", gate="paper"))
        service = ExportService(pdf_exporter=modern, legacy_pdf=LegacyPdfExporter())

        with pytest.raises(ExportUnavailableError):
            asyncio.run(service.export_pdf(job=JOB))

    def test_invalid_output_not_retried(self):
        modern = _pdf_engine(error=OutputValidationError("empty"))
        legacy = _port(ExportFormat.PDF)
        service = ExportService(pdf_exporter=modern, legacy_pdf=legacy)

        with pytest.raises(OutputValidationError):
            asyncio.run(service.export_pdf(REQUEST, JOB))
        legacy.export.assert_not_called()

    def test_legacy_crash_is_unavailable(self):
        legacy = _port(ExportFormat.PDF, error=RuntimeError("font table"))
        service = ExportService(legacy_pdf=legacy)

        with pytest.raises(ExportUnavailableError):
            asyncio.run(service.export_pdf(REQUEST))

    def test_blank_content_for_legacy(self):
        service = ExportService(legacy_pdf=LegacyPdfExporter())
        with pytest.raises(ContentError):
            asyncio.run(service.export_pdf(ExportRequest(content="  ")))


# ---------------------------------------------------------------------------
# DOCX
# ---------------------------------------------------------------------------


class TestExportDocx:
    def test_modern_engine(self):
        service = ExportService(docx_exporter=DocxExporter(), legacy_docx=LegacyDocxExporter())
        result = service.export_docx(REQUEST)
        assert result.engine == "python-docx"
        assert result.data[:2] == b"PK"

    def test_blank_content_rejected(self):
        modern = _port(ExportFormat.DOCX)
        service = ExportService(docx_exporter=modern)

        with pytest.raises(ContentError):
            service.export_docx(ExportRequest(content=""))
        modern.export.assert_not_called()

    def test_failure_falls_back(self):
        modern = _port(ExportFormat.DOCX, error=RuntimeError("bad table"))
        service = ExportService(docx_exporter=modern, legacy_docx=LegacyDocxExporter())

        result = service.export_docx(REQUEST)

        assert result.engine == "legacy-docx"
        assert result.data[:2] == b"PK"

    def test_configuration_error_not_retried(self):
        modern = _port(ExportFormat.DOCX, error=StyleResolutionError("unknown size"))
        legacy = _port(ExportFormat.DOCX)
        service = ExportService(docx_exporter=modern, legacy_docx=legacy)

        with pytest.raises(StyleResolutionError):
            service.export_docx(REQUEST)
        legacy.export.assert_not_called()

    def test_flag_off(self):
        modern = _port(ExportFormat.DOCX)
        service = ExportService(
            docx_exporter=modern, legacy_docx=LegacyDocxExporter(), use_new_export=False
        )
        assert service.export_docx(REQUEST).engine == "legacy-docx"
        modern.export.assert_not_called()

    def test_nothing_configured(self):
        with pytest.raises(ExportUnavailableError):
            ExportService().export_docx(REQUEST)


# ---------------------------------------------------------------------------
# Dispatch / availability
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_export_docx_by_format(self):
        service = ExportService(docx_exporter=DocxExporter())
        result = asyncio.run(service.export(ExportFormat.DOCX, REQUEST))
        assert result.format == ExportFormat.DOCX

    def test_docx_needs_request(self):
        from contract_renderer.domain.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            asyncio.run(ExportService().export(ExportFormat.DOCX))

    def test_availability(self):
        service = ExportService(
            pdf_exporter=_pdf_engine(available=False),
            docx_exporter=DocxExporter(),
        )
        assert asyncio.run(service.availability()) == {"pdf": False, "docx": True}

    def test_availability_with_legacy_pdf(self):
        service = ExportService(legacy_pdf=LegacyPdfExporter())
        assert asyncio.run(service.availability()) == {"pdf": True, "docx": False}
