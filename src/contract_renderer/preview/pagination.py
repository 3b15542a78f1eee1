"""Page geometry for the paged preview.

This is an approximation of print layout, not a pagination engine: the
preview measures how tall the rendered content is, wraps it in a page
with the layout's margins, and scales the whole page to fit the viewport.
Content is never split at page boundaries; :func:`calculate_page_breaks`
only estimates where those boundaries would fall.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from contract_renderer.domain.models.enums import PageFormat
from contract_renderer.domain.models.style import DocumentStyle
from contract_renderer.rules.constants import MIN_PREVIEW_SCALE
from contract_renderer.styling.resolver import mm_to_px, page_size_mm, resolve_typography


@dataclass(frozen=True)
class PageInfo:
    """Vertical extent of one estimated page, in unscaled content pixels."""

    page_number: int
    start_y: float
    end_y: float

    @property
    def height(self) -> float:
        return self.end_y - self.start_y


@dataclass(frozen=True)
class PageGeometry:
    """Unscaled page box in CSS pixels."""

    width_px: float
    height_px: float
    margin_px: float

    @classmethod
    def for_style(
        cls, style: DocumentStyle, page_format: PageFormat = PageFormat.LETTER
    ) -> "PageGeometry":
        typo = resolve_typography(style)
        width_mm, height_mm = page_size_mm(page_format)
        return cls(
            width_px=mm_to_px(width_mm) * typo.preview_width_factor,
            height_px=mm_to_px(height_mm),
            margin_px=mm_to_px(typo.page_margin_mm),
        )

    @property
    def content_width_px(self) -> float:
        return max(self.width_px - 2 * self.margin_px, 1.0)

    @property
    def printable_height_px(self) -> float:
        return max(self.height_px - 2 * self.margin_px, 1.0)

    def fit_scale(self, target_width: float) -> float:
        """Uniform scale that fits the page into *target_width* pixels."""
        if self.width_px <= 0:
            return MIN_PREVIEW_SCALE
        return max(target_width / self.width_px, MIN_PREVIEW_SCALE)

    def container_height(self, content_height: float) -> float:
        """Unscaled page container height: measured content plus vertical margins."""
        return max(content_height, 0.0) + 2 * self.margin_px

    def estimated_page_count(self, content_height: float) -> int:
        if content_height <= 0:
            return 1
        return max(1, math.ceil(content_height / self.printable_height_px))

    def calculate_page_breaks(self, content_height: float) -> list[PageInfo]:
        """Split *content_height* into printable-height slices."""
        return calculate_page_breaks(content_height, self.printable_height_px)


def calculate_page_breaks(content_height: float, printable_height: float) -> list[PageInfo]:
    if printable_height <= 0:
        raise ValueError("printable_height must be positive")

    pages: list[PageInfo] = []
    y = 0.0
    number = 1
    while y < content_height:
        end = min(y + printable_height, content_height)
        pages.append(PageInfo(page_number=number, start_y=y, end_y=end))
        y = end
        number += 1
    return pages


def page_for_position(y: float, pages: list[PageInfo]) -> int:
    """1-based page holding offset *y*; past the end maps to the last page."""
    for page in pages:
        if page.start_y <= y < page.end_y:
            return page.page_number
    if pages and y >= pages[-1].end_y:
        return len(pages)
    return 1
