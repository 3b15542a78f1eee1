"""Style Resolver — maps a DocumentStyle to concrete typography values.

Pure functions only. The on-screen renderer, the standalone markup
generator and both file builders call :func:`resolve_typography` and the
unit helpers below, so a style always produces the same point size,
line-height multiplier and spacing token everywhere.

An enum value missing from the tables is a programming error and raises
:class:`StyleResolutionError`; nothing falls back to a default.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, TypeVar

from contract_renderer.domain.errors import StyleResolutionError
from contract_renderer.domain.models.enums import (
    HeadingCase,
    HeadingIndent,
    HeadingStyle,
    Layout,
    PageFormat,
)
from contract_renderer.domain.models.style import DocumentStyle
from contract_renderer.rules.constants import (
    CSS_PX_PER_INCH,
    CSS_PX_PER_REM,
    EMU_PER_PX,
    FONT_PDF_CORE_NAMES,
    FONT_SIZES_PT,
    FONT_STACKS_CSS,
    FONT_WORD_PROCESSOR_NAMES,
    HALF_POINTS_PER_POINT,
    HEADING_INDENT_REM,
    HEADING_MARGIN_TOP_REM,
    HEADING_SIZE_OFFSETS_PT,
    HEADING_WEIGHT_BOLD,
    HEADING_WEIGHT_NORMAL,
    LINE_HEIGHT_MULTIPLIERS,
    LINE_RULE_AUTO_UNIT,
    MM_PER_INCH,
    PAGE_MARGINS_MM,
    PAGE_SIZES_MM,
    PARAGRAPH_SPACING_REM,
    POINTS_PER_INCH,
    PREVIEW_WIDTH_FACTORS,
    SIGNATURE_EMAIL_OFFSET_PT,
    SIGNATURES_HEADING_OFFSET_PT,
    TWIPS_PER_MM,
    TWIPS_PER_POINT,
)

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True)
class Typography:
    """Concrete values derived from a DocumentStyle."""

    font_stack_css: str
    font_word_processor_name: str
    font_pdf_core_name: str
    point_size: int
    line_height_multiplier: float
    paragraph_spacing_rem: float
    heading_weight: int
    heading_uppercase: bool
    heading_indent_rem: float
    page_margin_mm: float
    preview_width_factor: float
    heading_size_offsets: Mapping[int, int] = field(
        default_factory=lambda: dict(HEADING_SIZE_OFFSETS_PT)
    )

    @property
    def heading_bold(self) -> bool:
        return self.heading_weight >= HEADING_WEIGHT_BOLD

    @property
    def heading_transform(self) -> str:
        """CSS ``text-transform`` value for headings."""
        return "uppercase" if self.heading_uppercase else "none"

    @property
    def signatures_heading_size(self) -> int:
        return self.point_size + SIGNATURES_HEADING_OFFSET_PT

    @property
    def email_point_size(self) -> int:
        return self.point_size + SIGNATURE_EMAIL_OFFSET_PT

    def heading_point_size(self, level: int) -> int:
        """Body size plus the level offset; levels past 3 use the h3 offset."""
        clamped = min(max(level, 1), max(self.heading_size_offsets))
        return self.point_size + self.heading_size_offsets[clamped]

    def heading_margin_top_rem(self, level: int) -> float:
        clamped = min(max(level, 1), max(HEADING_MARGIN_TOP_REM))
        return HEADING_MARGIN_TOP_REM[clamped]

    def apply_heading_case(self, text: str) -> str:
        return text.upper() if self.heading_uppercase else text


def _lookup(table: Mapping[K, V], key: K, what: str) -> V:
    try:
        return table[key]
    except (KeyError, TypeError):
        raise StyleResolutionError(f"Unrecognized {what}: {key!r}") from None


def resolve_typography(style: DocumentStyle) -> Typography:
    """Resolve *style* into the values every renderer consumes."""
    family = style.font_family

    if style.heading_style not in (HeadingStyle.BOLD, HeadingStyle.NORMAL):
        raise StyleResolutionError(f"Unrecognized heading style: {style.heading_style!r}")
    if style.heading_case not in (HeadingCase.NORMAL, HeadingCase.UPPERCASE):
        raise StyleResolutionError(f"Unrecognized heading case: {style.heading_case!r}")
    if style.heading_indent not in (HeadingIndent.FLUSH, HeadingIndent.INDENTED):
        raise StyleResolutionError(f"Unrecognized heading indent: {style.heading_indent!r}")

    return Typography(
        font_stack_css=_lookup(FONT_STACKS_CSS, family, "font family"),
        font_word_processor_name=_lookup(FONT_WORD_PROCESSOR_NAMES, family, "font family"),
        font_pdf_core_name=_lookup(FONT_PDF_CORE_NAMES, family, "font family"),
        point_size=_lookup(FONT_SIZES_PT, style.font_size, "font size"),
        line_height_multiplier=_lookup(LINE_HEIGHT_MULTIPLIERS, style.line_spacing, "line spacing"),
        paragraph_spacing_rem=_lookup(
            PARAGRAPH_SPACING_REM, style.paragraph_spacing, "paragraph spacing"
        ),
        heading_weight=(
            HEADING_WEIGHT_BOLD if style.heading_style == HeadingStyle.BOLD else HEADING_WEIGHT_NORMAL
        ),
        heading_uppercase=style.heading_case == HeadingCase.UPPERCASE,
        heading_indent_rem=(
            HEADING_INDENT_REM if style.heading_indent == HeadingIndent.INDENTED else 0.0
        ),
        page_margin_mm=_lookup(PAGE_MARGINS_MM, style.layout, "layout"),
        preview_width_factor=_lookup(PREVIEW_WIDTH_FACTORS, style.layout, "layout"),
    )


def page_size_mm(page_format: PageFormat) -> tuple[float, float]:
    """(width, height) of a physical page in millimetres."""
    return _lookup(PAGE_SIZES_MM, page_format, "page format")


def page_margin_mm(layout: Layout) -> float:
    return _lookup(PAGE_MARGINS_MM, layout, "layout")


# ---------------------------------------------------------------------------
# Unit conversions
# ---------------------------------------------------------------------------


def pt_to_half_points(points: float) -> int:
    """Word run sizes are expressed in half-points."""
    return int(round(points * HALF_POINTS_PER_POINT))


def pt_to_twips(points: float) -> int:
    return int(round(points * TWIPS_PER_POINT))


def mm_to_twips(mm: float) -> int:
    return int(round(mm * TWIPS_PER_MM))


def px_to_pt(px: float) -> float:
    return px * POINTS_PER_INCH / CSS_PX_PER_INCH


def rem_to_px(rem: float) -> float:
    return rem * CSS_PX_PER_REM


def rem_to_pt(rem: float) -> float:
    return px_to_pt(rem_to_px(rem))


def rem_to_twips(rem: float) -> int:
    return pt_to_twips(rem_to_pt(rem))


def mm_to_px(mm: float) -> float:
    return mm * CSS_PX_PER_INCH / MM_PER_INCH


def px_to_mm(px: float) -> float:
    return px * MM_PER_INCH / CSS_PX_PER_INCH


def px_to_emu(px: float) -> int:
    return int(round(px * EMU_PER_PX))


def line_spacing_to_twips(multiplier: float) -> int:
    """Line spacing for Word's ``auto`` line rule (240 = single)."""
    return int(round(multiplier * LINE_RULE_AUTO_UNIT))


def pt_to_mm(points: float) -> float:
    return points * MM_PER_INCH / POINTS_PER_INCH
