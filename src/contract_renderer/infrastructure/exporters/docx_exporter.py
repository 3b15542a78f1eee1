"""Word (.docx) exporter using python-docx.

Blocks come from the same tree walk the preview uses, so they are in
document order by construction.  Every size and distance is converted
from the resolved typography: points to Word's half-point grid, rem and
millimetres to twips, pixels to EMU.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Optional

from docx import Document
from docx.enum.section import WD_ORIENT
from docx.enum.text import WD_BREAK, WD_LINE_SPACING
from docx.image.image import Image as DocxImage
from docx.oxml.ns import qn
from docx.shared import Emu, Inches, Length, Mm, Pt, RGBColor, Twips

from contract_renderer.content.normalizer import normalize
from contract_renderer.content.parser import extract_content_region, parse_blocks
from contract_renderer.content.signatures import (
    decode_signature_image,
    fit_image_box,
    signature_lines,
)
from contract_renderer.domain.models.blocks import (
    HeadingBlock,
    InlineSpan,
    ListItemBlock,
    ParagraphBlock,
)
from contract_renderer.domain.models.document import ExportRequest, ExportResult, SignatureRecord
from contract_renderer.domain.models.enums import ExportFormat, PageFormat
from contract_renderer.domain.ports.document_exporter import DocumentExporterPort
from contract_renderer.infrastructure.exporters.validation import validate_docx
from contract_renderer.rules.constants import (
    CONTENT_TYPE_DOCX,
    HALF_POINTS_PER_POINT,
    LIST_HANGING_INDENT_IN,
    LIST_INDENT_REM,
    MUTED_COLOR_EXPORT,
    SIGNATURE_BLOCK_GAP_REM,
    SIGNATURES_HEADING,
)
from contract_renderer.styling.resolver import (
    Typography,
    line_spacing_to_twips,
    mm_to_twips,
    page_size_mm,
    pt_to_half_points,
    px_to_emu,
    rem_to_twips,
    resolve_typography,
)

logger = logging.getLogger(__name__)

_BLACK = RGBColor(0, 0, 0)
# Word ships list styles for three nesting levels
_MAX_LIST_STYLE_LEVEL = 3


def _font_size(points: float) -> Length:
    """Run size snapped to Word's half-point grid."""
    return Pt(pt_to_half_points(points) / HALF_POINTS_PER_POINT)


def _hex_color(value: str) -> RGBColor:
    return RGBColor.from_string(value.lstrip("#").upper())


def _set_line_spacing(element, multiplier: float) -> None:
    """Write *multiplier* as w:line twips with the 'auto' line rule."""
    spacing = element.get_or_add_pPr().get_or_add_spacing()
    spacing.line = Twips(line_spacing_to_twips(multiplier))
    spacing.lineRule = WD_LINE_SPACING.MULTIPLE


def _force_font(element, name: str) -> None:
    """Set every rFonts slot to *name* and drop theme font references."""
    rpr = element.get_or_add_rPr()
    rfonts = rpr.get_or_add_rFonts()
    for attr in ("w:ascii", "w:hAnsi", "w:cs", "w:eastAsia"):
        rfonts.set(qn(attr), name)
    for attr in ("w:asciiTheme", "w:hAnsiTheme", "w:cstheme", "w:eastAsiaTheme"):
        rfonts.attrib.pop(qn(attr), None)


class DocxExporter(DocumentExporterPort):
    """Build a .docx that mirrors the canonical rendering."""

    format = ExportFormat.DOCX
    engine = "python-docx"

    def __init__(self, page_format: PageFormat = PageFormat.LETTER) -> None:
        self._page_format = page_format

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def is_available(self) -> bool:
        # python-docx is a hard dependency; importing this module proves it
        return True

    def export(self, request: ExportRequest) -> ExportResult:
        data = self.export_word_document(request)
        return ExportResult(
            data=data,
            content_type=CONTENT_TYPE_DOCX,
            format=self.format,
            engine=self.engine,
        )

    def export_word_document(self, request: ExportRequest) -> bytes:
        """Render *request* and return validated .docx bytes."""
        typo = resolve_typography(request.style)
        builder = _DocxBuilder(typo, self._page_format)

        markup = extract_content_region(normalize(request.content))
        blocks = parse_blocks(markup)
        for block in blocks:
            if isinstance(block, HeadingBlock):
                builder.heading(block)
            elif isinstance(block, ListItemBlock):
                builder.list_item(block)
            elif isinstance(block, ParagraphBlock):
                builder.paragraph(block)

        if request.signatures:
            builder.signatures(request.signatures)

        if request.title:
            builder.docx.core_properties.title = request.title

        buffer = io.BytesIO()
        builder.docx.save(buffer)
        data = buffer.getvalue()
        logger.info(
            "DOCX export: %d block(s), %d signature(s), %d bytes",
            len(blocks),
            len(request.signatures),
            len(data),
        )
        return validate_docx(data)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


@dataclass
class _ListRun:
    ordered: bool
    num_id: Optional[int] = None
    ilvl: int = 0
    last_index: int = 0


class _DocxBuilder:
    def __init__(self, typo: Typography, page_format: PageFormat) -> None:
        self.typo = typo
        self.docx = Document()
        # Open list runs by nesting depth
        self._lists: dict[int, _ListRun] = {}
        self._setup_page_layout(page_format)
        self._setup_styles()

    # ------------------------------------------------------------------
    # Page layout / styles
    # ------------------------------------------------------------------

    def _setup_page_layout(self, page_format: PageFormat) -> None:
        width_mm, height_mm = page_size_mm(page_format)
        margin = Twips(mm_to_twips(self.typo.page_margin_mm))

        section = self.docx.sections[0]
        section.orientation = WD_ORIENT.PORTRAIT
        section.page_width = Mm(width_mm)
        section.page_height = Mm(height_mm)
        section.top_margin = margin
        section.bottom_margin = margin
        section.left_margin = margin
        section.right_margin = margin

    def _setup_styles(self) -> None:
        typo = self.typo
        spacing = Twips(rem_to_twips(typo.paragraph_spacing_rem))

        normal = self.docx.styles["Normal"]
        _force_font(normal.element, typo.font_word_processor_name)
        normal.font.size = _font_size(typo.point_size)
        normal.font.color.rgb = _BLACK
        _set_line_spacing(normal.element, typo.line_height_multiplier)
        pf = normal.paragraph_format
        pf.space_before = Twips(0)
        pf.space_after = spacing

        for level in (1, 2, 3):
            style = self.docx.styles[f"Heading {level}"]
            _force_font(style.element, typo.font_word_processor_name)
            style.font.size = _font_size(typo.heading_point_size(level))
            style.font.bold = typo.heading_bold
            style.font.italic = False
            style.font.color.rgb = _BLACK
            _set_line_spacing(style.element, typo.line_height_multiplier)
            hpf = style.paragraph_format
            hpf.space_before = Twips(rem_to_twips(typo.heading_margin_top_rem(level)))
            hpf.space_after = spacing
            hpf.left_indent = Twips(rem_to_twips(typo.heading_indent_rem))

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    def _add_run(
        self,
        paragraph,
        text: str,
        *,
        size: float,
        bold: Optional[bool] = None,
        italic: bool = False,
        color: RGBColor = _BLACK,
    ):
        run = paragraph.add_run()
        # Soft line breaks inside a block become w:br
        for index, part in enumerate(text.split("\n")):
            if index:
                run.add_break()
            if part:
                run.add_text(part)
        _force_font(run._element, self.typo.font_word_processor_name)
        run.font.size = _font_size(size)
        run.font.color.rgb = color
        if bold is not None:
            run.bold = bold
        if italic:
            run.italic = True
        return run

    def _add_spans(self, paragraph, spans: tuple[InlineSpan, ...], *, size: float) -> None:
        for span in spans:
            self._add_run(paragraph, span.text, size=size, bold=span.bold or None, italic=span.italic)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def heading(self, block: HeadingBlock) -> None:
        self._lists.clear()
        typo = self.typo
        p = self.docx.add_paragraph(style=f"Heading {block.level}")
        size = typo.heading_point_size(block.level)
        for span in block.spans:
            self._add_run(
                p,
                typo.apply_heading_case(span.text),
                size=size,
                bold=typo.heading_bold or span.bold,
                italic=span.italic,
            )

    def paragraph(self, block: ParagraphBlock) -> None:
        self._lists.clear()
        p = self.docx.add_paragraph(style="Normal")
        self._add_spans(p, block.spans, size=self.typo.point_size)

    def list_item(self, block: ListItemBlock) -> None:
        base = "List Number" if block.ordered else "List Bullet"
        level = min(block.depth + 1, _MAX_LIST_STYLE_LEVEL)
        style_name = base if level == 1 else f"{base} {level}"

        for depth in [d for d in self._lists if d > block.depth]:
            del self._lists[depth]

        p = self.docx.add_paragraph(style=style_name)
        pf = p.paragraph_format
        pf.left_indent = Twips(rem_to_twips(LIST_INDENT_REM * (block.depth + 1)))
        pf.first_line_indent = -Inches(LIST_HANGING_INDENT_IN)
        pf.space_after = Twips(rem_to_twips(self.typo.paragraph_spacing_rem / 2))
        _set_line_spacing(p._p, self.typo.line_height_multiplier)
        if block.ordered:
            self._number_item(p, block, style_name)
        else:
            self._lists[block.depth] = _ListRun(ordered=False)
        self._add_spans(p, block.spans, size=self.typo.point_size)

    def _number_item(self, p, block: ListItemBlock, style_name: str) -> None:
        """Attach *p* to the numbering instance of its list.

        Each ordered list gets its own w:num with a start override, so a
        second list restarts at its first item's index instead of
        continuing the style's shared counter.
        """
        index = block.index or 1
        current = self._lists.get(block.depth)
        if current is None or not current.ordered or current.last_index + 1 != index:
            current = self._new_numbering(style_name, index)
        current.last_index = index
        self._lists[block.depth] = current
        if current.num_id is None:
            return

        num_pr = p._p.get_or_add_pPr().get_or_add_numPr()
        num_pr.get_or_add_ilvl().val = current.ilvl
        num_pr.get_or_add_numId().val = current.num_id

    def _new_numbering(self, style_name: str, start: int) -> _ListRun:
        style_ppr = self.docx.styles[style_name].element.pPr
        num_pr = style_ppr.numPr if style_ppr is not None else None
        if num_pr is None or num_pr.numId is None:
            logger.debug("Style %s has no numbering; list numbers not restarted", style_name)
            return _ListRun(ordered=True)

        ilvl = num_pr.ilvl.val if num_pr.ilvl is not None else 0
        numbering = self.docx.part.numbering_part.element
        abstract_id = numbering.num_having_numId(num_pr.numId.val).abstractNumId.val
        num = numbering.add_num(abstract_id)
        num.add_lvlOverride(ilvl=ilvl).add_startOverride(start)
        return _ListRun(ordered=True, num_id=num.numId, ilvl=ilvl)

    # ------------------------------------------------------------------
    # Signatures
    # ------------------------------------------------------------------

    def signatures(self, signatures: list[SignatureRecord]) -> None:
        self._lists.clear()
        typo = self.typo

        # Section always starts on a fresh page
        break_p = self.docx.add_paragraph(style="Normal")
        break_p.add_run().add_break(WD_BREAK.PAGE)

        heading = self.docx.add_paragraph(style="Normal")
        self._add_run(heading, SIGNATURES_HEADING, size=typo.signatures_heading_size, bold=True)

        tight = Twips(rem_to_twips(typo.paragraph_spacing_rem / 4))
        for signature in signatures:
            signed_by, email, date = signature_lines(signature)

            self._add_signature_image(signature)

            name_p = self.docx.add_paragraph(style="Normal")
            name_p.paragraph_format.space_after = tight
            self._add_run(name_p, signed_by, size=typo.point_size)

            if email:
                email_p = self.docx.add_paragraph(style="Normal")
                email_p.paragraph_format.space_after = tight
                self._add_run(
                    email_p,
                    email,
                    size=typo.email_point_size,
                    color=_hex_color(MUTED_COLOR_EXPORT),
                )

            date_p = self.docx.add_paragraph(style="Normal")
            date_p.paragraph_format.space_after = Twips(rem_to_twips(SIGNATURE_BLOCK_GAP_REM))
            self._add_run(date_p, date, size=typo.point_size)

    def _add_signature_image(self, signature: SignatureRecord) -> None:
        raw = decode_signature_image(signature.signature_image)
        if raw is None:
            return

        paragraph = self.docx.add_paragraph(style="Normal")
        try:
            image = DocxImage.from_blob(raw)
            width, height = fit_image_box(image.px_width, image.px_height)
            paragraph.add_run().add_picture(
                io.BytesIO(raw),
                width=Emu(px_to_emu(width)),
                height=Emu(px_to_emu(height)),
            )
        except Exception as exc:
            # A broken image never fails the export
            logger.warning(
                "Skipping signature image for %s: %s", signature.signer_name, exc
            )
            paragraph._element.getparent().remove(paragraph._element)
