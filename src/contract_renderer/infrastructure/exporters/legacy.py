"""Legacy exporters used when the modern path is unavailable or fails.

``LegacyPdfExporter`` draws the parsed blocks directly with fpdf2 and its
core fonts; no browser is involved.  ``LegacyDocxExporter`` writes plain
text paragraphs with python-docx.  Both read the same typography as the
modern exporters and both validate their output.
"""

from __future__ import annotations

import io
import logging

from docx import Document
from docx.image.image import Image as DocxImage
from docx.shared import Pt
from fpdf import FPDF

from contract_renderer.content.normalizer import normalize
from contract_renderer.content.parser import extract_content_region, parse_blocks
from contract_renderer.content.signatures import (
    decode_signature_image,
    fit_image_box,
    signature_lines,
)
from contract_renderer.domain.models.blocks import (
    Block,
    HeadingBlock,
    InlineSpan,
    ListItemBlock,
    ParagraphBlock,
)
from contract_renderer.domain.models.document import ExportRequest, ExportResult, SignatureRecord
from contract_renderer.domain.models.enums import ExportFormat, PageFormat
from contract_renderer.domain.ports.document_exporter import DocumentExporterPort
from contract_renderer.infrastructure.exporters.validation import validate_docx, validate_pdf
from contract_renderer.rules.constants import (
    CONTENT_TYPE_DOCX,
    CONTENT_TYPE_PDF,
    LIST_HANGING_INDENT_IN,
    LIST_INDENT_REM,
    MM_PER_INCH,
    SIGNATURES_HEADING,
)
from contract_renderer.styling.resolver import (
    Typography,
    pt_to_mm,
    px_to_mm,
    rem_to_pt,
    resolve_typography,
)

logger = logging.getLogger(__name__)

# Core PDF fonts only cover Latin-1
_REPLACEMENTS = {
    "\u2013": "-",
    "\u2014": "--",
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u2026": "...",
    "\u2022": "-",
}


def _blocks_for(request: ExportRequest) -> list[Block]:
    return parse_blocks(extract_content_region(normalize(request.content)))


def _sanitize(text: str) -> str:
    """Replace characters the core fonts cannot encode."""
    if not text:
        return ""
    for char, repl in _REPLACEMENTS.items():
        text = text.replace(char, repl)
    return text.encode("latin-1", "replace").decode("latin-1")


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------


class _LegacyPDF(FPDF):
    """Letter/A4 page without header or footer."""

    def __init__(self, page_format: PageFormat) -> None:
        super().__init__(orientation="P", unit="mm", format=page_format.value.lower())

    def footer(self) -> None:
        pass


class LegacyPdfExporter(DocumentExporterPort):
    """Draw the document with fpdf2."""

    format = ExportFormat.PDF
    engine = "legacy-fpdf"

    def __init__(self, page_format: PageFormat = PageFormat.LETTER) -> None:
        self._page_format = page_format

    def is_available(self) -> bool:
        return True

    def export(self, request: ExportRequest) -> ExportResult:
        return ExportResult(
            data=self.export_pdf(request),
            content_type=CONTENT_TYPE_PDF,
            format=self.format,
            engine=self.engine,
        )

    def export_pdf(self, request: ExportRequest) -> bytes:
        typo = resolve_typography(request.style)
        writer = _PdfWriter(typo, self._page_format)

        blocks = _blocks_for(request)
        for block in blocks:
            writer.block(block)
        if request.signatures:
            writer.signatures(request.signatures)
        if request.title:
            writer.pdf.set_title(request.title)

        data = bytes(writer.pdf.output())
        logger.info("Legacy PDF export: %d block(s), %d bytes", len(blocks), len(data))
        return validate_pdf(data)


class _PdfWriter:
    def __init__(self, typo: Typography, page_format: PageFormat) -> None:
        self.typo = typo
        self.font = typo.font_pdf_core_name
        self.pdf = _LegacyPDF(page_format)

        margin = typo.page_margin_mm
        self.pdf.set_margins(margin, margin, margin)
        self.pdf.set_auto_page_break(auto=True, margin=margin)
        self.pdf.add_page()

        self.spacing_mm = pt_to_mm(rem_to_pt(typo.paragraph_spacing_rem))

    def _line_h(self, size: float) -> float:
        return pt_to_mm(size) * self.typo.line_height_multiplier

    def _write_spans(
        self, spans: tuple[InlineSpan, ...], size: float, *, force_bold: bool = False
    ) -> None:
        line_h = self._line_h(size)
        for span in spans:
            style = ("B" if span.bold or force_bold else "") + ("I" if span.italic else "")
            self.pdf.set_font(self.font, style, size)
            parts = span.text.split("\n")
            for index, part in enumerate(parts):
                if index:
                    self.pdf.ln(line_h)
                if part:
                    self.pdf.write(line_h, _sanitize(part))
        self.pdf.ln(line_h)

    def block(self, block: Block) -> None:
        if isinstance(block, HeadingBlock):
            self.heading(block)
        elif isinstance(block, ListItemBlock):
            self.list_item(block)
        elif isinstance(block, ParagraphBlock):
            self._write_spans(block.spans, self.typo.point_size)
            self.pdf.ln(self.spacing_mm)

    def heading(self, block: HeadingBlock) -> None:
        typo = self.typo
        size = typo.heading_point_size(block.level)
        self.pdf.ln(pt_to_mm(rem_to_pt(typo.heading_margin_top_rem(block.level))))

        left = self.pdf.l_margin
        indent = pt_to_mm(rem_to_pt(typo.heading_indent_rem))
        self.pdf.set_left_margin(left + indent)
        self.pdf.set_x(left + indent)
        spans = tuple(
            InlineSpan(typo.apply_heading_case(s.text), s.bold, s.italic) for s in block.spans
        )
        self._write_spans(spans, size, force_bold=typo.heading_bold)
        self.pdf.set_left_margin(left)
        self.pdf.ln(self.spacing_mm)

    def list_item(self, block: ListItemBlock) -> None:
        typo = self.typo
        left = self.pdf.l_margin
        text_x = left + pt_to_mm(rem_to_pt(LIST_INDENT_REM * (block.depth + 1)))
        marker_x = text_x - LIST_HANGING_INDENT_IN * MM_PER_INCH

        marker = f"{block.index}." if block.ordered else "-"
        self.pdf.set_font(self.font, "", typo.point_size)
        self.pdf.set_x(marker_x)
        self.pdf.write(self._line_h(typo.point_size), marker)

        # Wrapped lines return to l_margin, so indent it for the item
        self.pdf.set_left_margin(text_x)
        self.pdf.set_x(text_x)
        self._write_spans(block.spans, typo.point_size)
        self.pdf.set_left_margin(left)
        self.pdf.ln(self.spacing_mm / 2)

    def signatures(self, signatures: list[SignatureRecord]) -> None:
        typo = self.typo
        self.pdf.add_page()

        self._write_spans(
            (InlineSpan(SIGNATURES_HEADING, bold=True),), typo.signatures_heading_size
        )
        self.pdf.ln(self.spacing_mm)

        for signature in signatures:
            signed_by, email, date = signature_lines(signature)
            self._image(signature)
            self._write_spans((InlineSpan(signed_by),), typo.point_size)
            if email:
                self.pdf.set_text_color(102, 102, 102)
                self._write_spans((InlineSpan(email),), typo.email_point_size)
                self.pdf.set_text_color(0, 0, 0)
            self._write_spans((InlineSpan(date),), typo.point_size)
            self.pdf.ln(self.spacing_mm * 2)

    def _image(self, signature: SignatureRecord) -> None:
        raw = decode_signature_image(signature.signature_image)
        if raw is None:
            return
        try:
            header = DocxImage.from_blob(raw)
            width, height = fit_image_box(header.px_width, header.px_height)
            self.pdf.image(io.BytesIO(raw), w=px_to_mm(width), h=px_to_mm(height))
        except Exception as exc:
            # A broken image never fails the export
            logger.warning("Skipping signature image for %s: %s", signature.signer_name, exc)
            return
        self.pdf.ln(self.spacing_mm / 2)


# ---------------------------------------------------------------------------
# DOCX
# ---------------------------------------------------------------------------


class LegacyDocxExporter(DocumentExporterPort):
    """Text-only .docx: one paragraph per block, no images."""

    format = ExportFormat.DOCX
    engine = "legacy-docx"

    def is_available(self) -> bool:
        return True

    def export(self, request: ExportRequest) -> ExportResult:
        return ExportResult(
            data=self.export_word_document(request),
            content_type=CONTENT_TYPE_DOCX,
            format=self.format,
            engine=self.engine,
        )

    def export_word_document(self, request: ExportRequest) -> bytes:
        typo = resolve_typography(request.style)
        doc = Document()
        normal = doc.styles["Normal"]
        normal.font.name = typo.font_word_processor_name
        normal.font.size = Pt(typo.point_size)
        normal.paragraph_format.line_spacing = typo.line_height_multiplier

        for block in _blocks_for(request):
            if isinstance(block, HeadingBlock):
                p = doc.add_paragraph(style="Normal")
                run = p.add_run(typo.apply_heading_case(block.text))
                run.bold = typo.heading_bold
                run.font.size = Pt(typo.heading_point_size(block.level))
            elif isinstance(block, ListItemBlock):
                marker = f"{block.index}. " if block.ordered else "\u2022 "
                doc.add_paragraph("    " * block.depth + marker + block.text, style="Normal")
            else:
                p = doc.add_paragraph(style="Normal")
                for span in block.spans:
                    run = p.add_run(span.text)
                    run.bold = span.bold or None
                    run.italic = span.italic or None

        if request.signatures:
            doc.add_page_break()
            heading = doc.add_paragraph(style="Normal").add_run(SIGNATURES_HEADING)
            heading.bold = True
            heading.font.size = Pt(typo.signatures_heading_size)
            for signature in request.signatures:
                for line in signature_lines(signature):
                    if line:
                        doc.add_paragraph(line, style="Normal")

        if request.title:
            doc.core_properties.title = request.title

        buffer = io.BytesIO()
        doc.save(buffer)
        return validate_docx(buffer.getvalue())
