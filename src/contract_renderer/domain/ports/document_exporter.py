"""Port: Document exporter — turns an export request into file bytes.

This is a domain-level contract. Infrastructure exporters (python-docx,
Playwright, fpdf2) implement this interface.
"""

from abc import ABC, abstractmethod

from contract_renderer.domain.models.document import ExportRequest, ExportResult
from contract_renderer.domain.models.enums import ExportFormat


class DocumentExporterPort(ABC):
    """Contract for exporting a document to one file format."""

    format: ExportFormat
    engine: str

    @abstractmethod
    def is_available(self) -> bool:
        """Probe whether the backing engine can run in this process."""
        ...

    @abstractmethod
    def export(self, request: ExportRequest) -> ExportResult:
        """Render the request and return validated bytes."""
        ...
