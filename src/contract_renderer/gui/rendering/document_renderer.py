"""Canonical document renderer — builds a QTextDocument from content + style.

This is the reference appearance for every export.  Content goes through
the same normalize/parse pipeline the file exporters use, and every size,
margin and line height comes from :func:`resolve_typography`, so the
screen, the standalone page and the word-processor file agree.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from PySide6.QtCore import QUrl
from PySide6.QtGui import (
    QBrush,
    QColor,
    QFont,
    QImage,
    QTextBlockFormat,
    QTextCharFormat,
    QTextCursor,
    QTextDocument,
    QTextFormat,
    QTextImageFormat,
    QTextLength,
    QTextList,
    QTextListFormat,
)

from contract_renderer.content.normalizer import normalize
from contract_renderer.content.parser import parse_blocks
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
from contract_renderer.domain.models.document import Content, SignatureRecord
from contract_renderer.domain.models.style import DocumentStyle
from contract_renderer.rules.constants import (
    LIST_INDENT_REM,
    LIST_ITEM_GAP_REM,
    MUTED_COLOR_EXPORT,
    MUTED_COLOR_SCREEN,
    SIGNATURE_BLOCK_GAP_REM,
    SIGNATURES_HEADING,
    SIGNATURES_MARGIN_TOP_REM,
    TEXT_COLOR_EXPORT,
    TEXT_COLOR_SCREEN,
)
from contract_renderer.styling.resolver import Typography, rem_to_px, resolve_typography

logger = logging.getLogger(__name__)

# Qt turns "\n" into a new block; inside a paragraph we need a soft break
_LINE_SEPARATOR = "\u2028"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render_to_qtextdocument(
    content: Union[Content, str, None],
    style: Optional[DocumentStyle] = None,
    signatures: Sequence[SignatureRecord] = (),
    *,
    for_export: bool = False,
) -> QTextDocument:
    """Build a fully formatted QTextDocument.

    ``for_export`` switches to pure black text, matching the exported files.
    """
    typo = resolve_typography(style or DocumentStyle())
    qt_doc = QTextDocument()
    qt_doc.setUndoRedoEnabled(False)
    qt_doc.setDocumentMargin(0)
    qt_doc.setIndentWidth(rem_to_px(LIST_INDENT_REM))

    builder = _DocumentBuilder(qt_doc, typo, for_export=for_export)
    qt_doc.setDefaultFont(builder.base_char.font())

    for block in parse_blocks(normalize(content)):
        if isinstance(block, HeadingBlock):
            builder.heading(block)
        elif isinstance(block, ListItemBlock):
            builder.list_item(block)
        elif isinstance(block, ParagraphBlock):
            builder.paragraph(block)

    if signatures:
        builder.signatures(signatures)

    qt_doc.setUndoRedoEnabled(True)
    return qt_doc


def font_families(stack: str) -> list[str]:
    """Split a CSS font stack into family names."""
    return [name.strip().strip("'\"") for name in stack.split(",") if name.strip()]


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


class _DocumentBuilder:
    """Cursor plus the base formats derived from one Typography."""

    def __init__(self, qt_doc: QTextDocument, typo: Typography, *, for_export: bool) -> None:
        self.doc = qt_doc
        self.typo = typo
        self.cursor = QTextCursor(qt_doc)
        self._first = True
        # depth -> (ordered, list) for the list run being built
        self._lists: dict[int, tuple[bool, QTextList]] = {}

        text_color = QColor(TEXT_COLOR_EXPORT if for_export else TEXT_COLOR_SCREEN)
        self.muted_color = QColor(MUTED_COLOR_EXPORT if for_export else MUTED_COLOR_SCREEN)

        font = QFont(typo.font_word_processor_name)
        font.setFamilies(font_families(typo.font_stack_css))
        font.setPointSizeF(typo.point_size)
        self.base_char = QTextCharFormat()
        self.base_char.setFont(font)
        self.base_char.setForeground(QBrush(text_color))

        self.base_block = QTextBlockFormat()
        self.base_block.setLineHeight(
            typo.line_height_multiplier * 100,
            QTextBlockFormat.LineHeightTypes.ProportionalHeight.value,
        )
        self.base_block.setTopMargin(0)
        self.base_block.setBottomMargin(rem_to_px(typo.paragraph_spacing_rem))

    # -- block insertion ---------------------------------------------------

    def _start_block(self, block_fmt: QTextBlockFormat, char_fmt: QTextCharFormat) -> None:
        # First block exists already; reuse it instead of leaving an empty line
        if self._first:
            self.cursor.setBlockFormat(block_fmt)
            self.cursor.setBlockCharFormat(char_fmt)
            self.cursor.setCharFormat(char_fmt)
            self._first = False
        else:
            self.cursor.insertBlock(block_fmt, char_fmt)

    def _insert_spans(self, spans: Sequence[InlineSpan], base: QTextCharFormat) -> None:
        for span in spans:
            fmt = QTextCharFormat(base)
            if span.bold:
                fmt.setFontWeight(QFont.Weight.Bold)
            if span.italic:
                fmt.setFontItalic(True)
            self.cursor.setCharFormat(fmt)
            self.cursor.insertText(span.text.replace("\n", _LINE_SEPARATOR))

    def _end_list(self) -> None:
        self._lists.clear()

    # -- content blocks ----------------------------------------------------

    def heading(self, block: HeadingBlock) -> None:
        self._end_list()
        typo = self.typo

        h_block = QTextBlockFormat(self.base_block)
        h_block.setHeadingLevel(block.level)
        h_block.setTopMargin(rem_to_px(typo.heading_margin_top_rem(block.level)))
        h_block.setLeftMargin(rem_to_px(typo.heading_indent_rem))

        h_char = QTextCharFormat(self.base_char)
        h_char.setFontPointSize(typo.heading_point_size(block.level))
        h_char.setFontWeight(QFont.Weight.Bold if typo.heading_bold else QFont.Weight.Normal)
        if typo.heading_uppercase:
            h_char.setFontCapitalization(QFont.Capitalization.AllUppercase)

        self._start_block(h_block, h_char)
        self._insert_spans(block.spans, h_char)

    def paragraph(self, block: ParagraphBlock) -> None:
        self._end_list()
        self._start_block(self.base_block, self.base_char)
        self._insert_spans(block.spans, self.base_char)

    def list_item(self, block: ListItemBlock) -> None:
        item_block = QTextBlockFormat(self.base_block)
        item_block.setBottomMargin(rem_to_px(LIST_ITEM_GAP_REM))
        self._start_block(item_block, self.base_char)

        # Deeper lists end when we climb back out of them
        for depth in [d for d in self._lists if d > block.depth]:
            del self._lists[depth]

        current = self._lists.get(block.depth)
        if current is not None and current[0] == block.ordered:
            current[1].add(self.cursor.block())
        else:
            list_fmt = QTextListFormat()
            list_fmt.setStyle(
                QTextListFormat.Style.ListDecimal
                if block.ordered
                else QTextListFormat.Style.ListDisc
            )
            list_fmt.setIndent(block.depth + 1)
            self._lists[block.depth] = (block.ordered, self.cursor.createList(list_fmt))

        self._insert_spans(block.spans, self.base_char)

    # -- signatures --------------------------------------------------------

    def signatures(self, signatures: Sequence[SignatureRecord]) -> None:
        self._end_list()
        typo = self.typo

        # Rule that opens the section on a new page
        rule = QTextBlockFormat(self.base_block)
        rule.setPageBreakPolicy(QTextBlockFormat.PageBreakFlag.PageBreak_AlwaysBefore)
        rule.setTopMargin(rem_to_px(SIGNATURES_MARGIN_TOP_REM))
        rule.setProperty(
            QTextFormat.Property.BlockTrailingHorizontalRulerWidth,
            QTextLength(QTextLength.Type.PercentageLength, 100),
        )
        self._start_block(rule, self.base_char)

        heading_char = QTextCharFormat(self.base_char)
        heading_char.setFontPointSize(typo.signatures_heading_size)
        heading_char.setFontWeight(QFont.Weight.Bold)
        self._start_block(self.base_block, heading_char)
        self.cursor.insertText(SIGNATURES_HEADING)

        line_block = QTextBlockFormat(self.base_block)
        line_block.setBottomMargin(rem_to_px(LIST_ITEM_GAP_REM))
        email_char = QTextCharFormat(self.base_char)
        email_char.setFontPointSize(typo.email_point_size)
        email_char.setForeground(QBrush(self.muted_color))

        for index, signature in enumerate(signatures):
            signed_by, email, date = signature_lines(signature)

            image = self._signature_image(signature, index)
            if image is not None:
                self._start_block(line_block, self.base_char)
                self.cursor.insertImage(image)

            self._start_block(line_block, self.base_char)
            self.cursor.insertText(signed_by)
            if email:
                self._start_block(line_block, email_char)
                self.cursor.insertText(email)

            last = QTextBlockFormat(self.base_block)
            last.setBottomMargin(rem_to_px(SIGNATURE_BLOCK_GAP_REM))
            self._start_block(last, self.base_char)
            self.cursor.insertText(date)

    def _signature_image(
        self, signature: SignatureRecord, index: int
    ) -> Optional[QTextImageFormat]:
        raw = decode_signature_image(signature.signature_image)
        if raw is None:
            return None
        image = QImage.fromData(raw)
        if image.isNull():
            logger.warning("Signature image for %s could not be decoded", signature.signer_name)
            return None

        name = f"signature://{index}"
        self.doc.addResource(
            QTextDocument.ResourceType.ImageResource.value, QUrl(name), image
        )
        width, height = fit_image_box(image.width(), image.height())
        fmt = QTextImageFormat()
        fmt.setName(name)
        fmt.setWidth(width)
        fmt.setHeight(height)
        return fmt
