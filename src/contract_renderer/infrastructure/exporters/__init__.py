"""Document exporters — turn rendered content into PDF and .docx files."""

from contract_renderer.infrastructure.exporters.docx_exporter import DocxExporter
from contract_renderer.infrastructure.exporters.legacy import LegacyDocxExporter, LegacyPdfExporter
from contract_renderer.infrastructure.exporters.pdf_exporter import (
    BrowserManager,
    PlaywrightPdfExporter,
    ReadinessGate,
)

__all__ = [
    "BrowserManager",
    "DocxExporter",
    "LegacyDocxExporter",
    "LegacyPdfExporter",
    "PlaywrightPdfExporter",
    "ReadinessGate",
]
