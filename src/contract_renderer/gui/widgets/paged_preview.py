"""Paged preview — the canonical rendering drawn on a scaled page.

The page is laid out at its real (unscaled) pixel size and the view
applies one uniform transform so it fits the viewport width.  Content
height is only reliable once Qt has finished laying the document out, so
it is re-measured after a short settle delay whenever the document or the
viewport changes.

This is an approximation: content flows down one tall page and is never
split at page boundaries.  The page count shown is an estimate.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtGui import QBrush, QColor, QPainter, QPen, QResizeEvent, QTextDocument, QTransform
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsDropShadowEffect,
    QGraphicsRectItem,
    QGraphicsScene,
    QGraphicsTextItem,
    QGraphicsView,
    QWidget,
)

from contract_renderer.domain.models.enums import PageFormat
from contract_renderer.domain.models.style import DocumentStyle
from contract_renderer.preview.pagination import PageGeometry
from contract_renderer.rules.constants import PREVIEW_SETTLE_DELAY_MS

logger = logging.getLogger(__name__)

# Grey gutter around the page, in viewport pixels
_GUTTER_PX = 24


class PagedPreviewWidget(QGraphicsView):
    """Page-shaped, width-fitted view of a QTextDocument."""

    page_count_changed = Signal(int)
    measured = Signal(float)  # unscaled content height

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        page_format: PageFormat = PageFormat.LETTER,
        settle_delay_ms: int = PREVIEW_SETTLE_DELAY_MS,
    ) -> None:
        super().__init__(parent)
        self._page_format = page_format
        self._geometry = PageGeometry.for_style(DocumentStyle(), page_format)
        self._content_height = 0.0
        self._scale = 1.0
        self._page_count = 1

        self.setFrameShape(QFrame.Shape.NoFrame)
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setRenderHint(QPainter.RenderHint.TextAntialiasing)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setAlignment(Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignTop)
        self.setBackgroundBrush(QBrush(QColor("#E8E8E8")))

        self._scene = QGraphicsScene(self)
        self.setScene(self._scene)

        self._page = QGraphicsRectItem()
        self._page.setBrush(QBrush(QColor("#FFFFFF")))
        self._page.setPen(QPen(QColor(200, 200, 200)))
        shadow = QGraphicsDropShadowEffect()
        shadow.setBlurRadius(12)
        shadow.setOffset(0, 2)
        shadow.setColor(QColor(0, 0, 0, 40))
        self._page.setGraphicsEffect(shadow)
        self._scene.addItem(self._page)

        self._text = QGraphicsTextItem(self._page)
        self._text.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)

        # Single-shot timer restarted on every change, so bursts coalesce
        self._settle_timer = QTimer(self)
        self._settle_timer.setSingleShot(True)
        self._settle_timer.setInterval(settle_delay_ms)
        self._settle_timer.timeout.connect(self.remeasure)

        self._layout_page()

    # ── Public API ──────────────────────────────────────────────────────────

    @property
    def geometry_model(self) -> PageGeometry:
        return self._geometry

    @property
    def content_height(self) -> float:
        return self._content_height

    @property
    def scale_factor(self) -> float:
        return self._scale

    @property
    def page_count(self) -> int:
        return self._page_count

    def show_document(self, qt_doc: QTextDocument, style: DocumentStyle | None = None) -> None:
        """Display *qt_doc* on a page shaped by *style*'s layout."""
        self._geometry = PageGeometry.for_style(style or DocumentStyle(), self._page_format)
        qt_doc.setTextWidth(self._geometry.content_width_px)
        self._text.setDocument(qt_doc)
        self._text.setPos(self._geometry.margin_px, self._geometry.margin_px)
        self._layout_page()
        self._settle_timer.start()

    def remeasure(self) -> None:
        """Measure the laid-out content and resize/rescale the page."""
        doc = self._text.document()
        height = float(doc.size().height()) if doc is not None else 0.0
        self._content_height = height
        self._layout_page()

        count = self._geometry.estimated_page_count(height)
        if count != self._page_count:
            self._page_count = count
            self.page_count_changed.emit(count)
        self.measured.emit(height)
        logger.debug(
            "Preview measured %.1fpx content, scale %.3f, ~%d page(s)",
            height,
            self._scale,
            count,
        )

    # ── Layout ──────────────────────────────────────────────────────────────

    def _layout_page(self) -> None:
        geo = self._geometry
        container = max(geo.container_height(self._content_height), geo.height_px)
        self._page.setRect(0, 0, geo.width_px, container)
        self._scene.setSceneRect(
            -_GUTTER_PX,
            -_GUTTER_PX,
            geo.width_px + 2 * _GUTTER_PX,
            container + 2 * _GUTTER_PX,
        )
        self._apply_scale()

    def _apply_scale(self) -> None:
        target = max(self.viewport().width() - 2 * _GUTTER_PX, 0)
        self._scale = self._geometry.fit_scale(target)
        self.setTransform(QTransform.fromScale(self._scale, self._scale))

    def resizeEvent(self, event: QResizeEvent) -> None:  # noqa: N802
        super().resizeEvent(event)
        self._apply_scale()
        self._settle_timer.start()
