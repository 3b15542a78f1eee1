"""Output signature checks shared by every exporter."""

from __future__ import annotations

from contract_renderer.domain.errors import OutputValidationError
from contract_renderer.rules.constants import PDF_MAGIC, ZIP_MAGIC


def validate_output(data: bytes, magic: bytes, label: str) -> bytes:
    """Return *data* if it is non-empty and starts with *magic*.

    Raises:
        OutputValidationError: the buffer is empty or has the wrong signature.
    """
    if not data:
        raise OutputValidationError(f"{label} export produced an empty file")
    if not data.startswith(magic):
        raise OutputValidationError(
            f"{label} export produced an invalid file (starts with {data[:8]!r})"
        )
    return data


def validate_pdf(data: bytes) -> bytes:
    return validate_output(data, PDF_MAGIC, "PDF")


def validate_docx(data: bytes) -> bytes:
    return validate_output(data, ZIP_MAGIC, "DOCX")
