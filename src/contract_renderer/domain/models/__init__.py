"""Domain models for the rendering engine."""

from contract_renderer.domain.models.blocks import (
    Block,
    HeadingBlock,
    InlineSpan,
    ListItemBlock,
    ParagraphBlock,
    RenderedDocument,
)
from contract_renderer.domain.models.document import (
    Content,
    ExportRequest,
    ExportResult,
    PageMargin,
    PdfJob,
    PdfOptions,
    SignatureRecord,
)
from contract_renderer.domain.models.style import DEFAULT_STYLE, PRESETS, DocumentStyle, get_preset

__all__ = [
    "Block",
    "Content",
    "DEFAULT_STYLE",
    "DocumentStyle",
    "ExportRequest",
    "ExportResult",
    "HeadingBlock",
    "InlineSpan",
    "ListItemBlock",
    "PRESETS",
    "PageMargin",
    "ParagraphBlock",
    "PdfJob",
    "PdfOptions",
    "RenderedDocument",
    "SignatureRecord",
    "get_preset",
]
