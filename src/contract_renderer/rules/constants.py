"""Typography, page and unit-conversion constants.

Every numeric value that more than one renderer needs lives here and only
here.  The Style Resolver reads these tables; the Qt renderer, the
standalone markup generator and both word-processor/PDF builders go through
the resolver, never through local copies.
"""

from __future__ import annotations

from contract_renderer.domain.models.enums import (
    FontFamily,
    FontSize,
    Layout,
    LineSpacing,
    PageFormat,
    ParagraphSpacing,
)


# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------

FONT_STACKS_CSS: dict[FontFamily, str] = {
    FontFamily.MODERN: "Inter, Helvetica, Arial, sans-serif",
    FontFamily.CLASSIC: "Georgia, 'Times New Roman', Times, serif",
    FontFamily.MONO: "'Courier New', Courier, monospace",
}

# First family of each stack, as Word knows it
FONT_WORD_PROCESSOR_NAMES: dict[FontFamily, str] = {
    FontFamily.MODERN: "Arial",
    FontFamily.CLASSIC: "Georgia",
    FontFamily.MONO: "Courier New",
}

# fpdf2 core fonts (legacy exporter only has the 14 standard PDF fonts)
FONT_PDF_CORE_NAMES: dict[FontFamily, str] = {
    FontFamily.MODERN: "Helvetica",
    FontFamily.CLASSIC: "Times",
    FontFamily.MONO: "Courier",
}

FONT_SIZES_PT: dict[FontSize, int] = {
    FontSize.SMALL: 11,
    FontSize.MEDIUM: 12,
    FontSize.LARGE: 14,
}

LINE_HEIGHT_MULTIPLIERS: dict[LineSpacing, float] = {
    LineSpacing.SINGLE: 1.0,
    LineSpacing.ONE_POINT_ONE_FIVE: 1.15,
    LineSpacing.ONE_POINT_FIVE: 1.5,
}

PARAGRAPH_SPACING_REM: dict[ParagraphSpacing, float] = {
    ParagraphSpacing.COMPACT: 0.5,
    ParagraphSpacing.NORMAL: 1.0,
    ParagraphSpacing.ROOMY: 1.5,
}

# Heading size = body size + offset (points)
HEADING_SIZE_OFFSETS_PT: dict[int, int] = {1: 4, 2: 2, 3: 1}

# Top margin before each heading level (rem)
HEADING_MARGIN_TOP_REM: dict[int, float] = {1: 0.75, 2: 0.75, 3: 0.625}

HEADING_INDENT_REM = 1.0
HEADING_WEIGHT_BOLD = 700
HEADING_WEIGHT_NORMAL = 400

LIST_INDENT_REM = 1.5
LIST_ITEM_GAP_REM = 0.25
LIST_HANGING_INDENT_IN = 0.25

# Signatures block
SIGNATURES_HEADING = "Signatures"
SIGNATURES_HEADING_OFFSET_PT = 2
SIGNATURE_EMAIL_OFFSET_PT = -1
SIGNATURES_MARGIN_TOP_REM = 3.0
SIGNATURE_BLOCK_GAP_REM = 2.0
SIGNATURE_IMAGE_MAX_WIDTH_PX = 120
SIGNATURE_IMAGE_MAX_HEIGHT_PX = 40

TEXT_COLOR_SCREEN = "#101623"
TEXT_COLOR_EXPORT = "#000000"
MUTED_COLOR_SCREEN = "#6C7783"
MUTED_COLOR_EXPORT = "#666666"
RULE_COLOR = "#E5E7EB"


# ---------------------------------------------------------------------------
# Page geometry
# ---------------------------------------------------------------------------

PAGE_SIZES_MM: dict[PageFormat, tuple[float, float]] = {
    PageFormat.LETTER: (215.9, 279.4),
    PageFormat.A4: (210.0, 297.0),
}

PAGE_MARGINS_MM: dict[Layout, float] = {
    Layout.STANDARD: 25.4,  # 1 inch
    Layout.WIDE: 12.7,  # 0.5 inch
}

# Preview page is drawn wider for the wide layout
PREVIEW_WIDTH_FACTORS: dict[Layout, float] = {
    Layout.STANDARD: 1.0,
    Layout.WIDE: 1.2,
}

MIN_PREVIEW_SCALE = 0.1
PREVIEW_SETTLE_DELAY_MS = 150


# ---------------------------------------------------------------------------
# Unit conversions
# ---------------------------------------------------------------------------

CSS_PX_PER_REM = 16.0
CSS_PX_PER_INCH = 96.0
POINTS_PER_INCH = 72.0
MM_PER_INCH = 25.4
TWIPS_PER_POINT = 20
TWIPS_PER_INCH = 1440
TWIPS_PER_MM = TWIPS_PER_INCH / MM_PER_INCH
HALF_POINTS_PER_POINT = 2
EMU_PER_PX = 9525
# Word "auto" line rule: 240 = single spacing
LINE_RULE_AUTO_UNIT = 240


# ---------------------------------------------------------------------------
# Output signatures
# ---------------------------------------------------------------------------

PDF_MAGIC = b"%PDF"
ZIP_MAGIC = b"PK"

RASTER_MAGIC: dict[str, bytes] = {
    "png": b"\x89PNG\r\n\x1a\n",
    "jpeg": b"\xff\xd8\xff",
    "gif": b"GIF8",
    "bmp": b"BM",
}

CONTENT_TYPE_PDF = "application/pdf"
CONTENT_TYPE_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
