"""Export preview panel — Web / PDF / DOCX preview modes.

Web shows the canonical rendering as-is.  PDF and DOCX show the same
rendering in export colours on the paged preview, which is what the
exported files look like.
"""

from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QButtonGroup,
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QStackedWidget,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from contract_renderer.domain.models.document import ExportRequest
from contract_renderer.domain.models.enums import PageFormat, PreviewMode
from contract_renderer.gui.rendering.document_renderer import render_to_qtextdocument
from contract_renderer.gui.widgets.paged_preview import PagedPreviewWidget

_MODE_LABELS = {
    PreviewMode.WEB: "Web",
    PreviewMode.PDF: "PDF",
    PreviewMode.DOCX: "DOCX",
}


class ExportPreviewWidget(QWidget):
    """Mode selector on top of a web view and a paged view."""

    mode_changed = Signal(str)

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        page_format: PageFormat = PageFormat.LETTER,
    ) -> None:
        super().__init__(parent)
        self._request: ExportRequest | None = None
        self._mode = PreviewMode.WEB

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        # ── Mode bar ────────────────────────────────────────────────────────
        bar = QWidget()
        bar_layout = QHBoxLayout(bar)
        bar_layout.setContentsMargins(8, 4, 8, 4)
        bar_layout.setSpacing(6)

        self._buttons = QButtonGroup(self)
        self._buttons.setExclusive(True)
        self._mode_buttons: dict[PreviewMode, QPushButton] = {}
        for mode, label in _MODE_LABELS.items():
            btn = QPushButton(label)
            btn.setCheckable(True)
            btn.clicked.connect(lambda _checked=False, m=mode: self.set_mode(m))
            self._buttons.addButton(btn)
            self._mode_buttons[mode] = btn
            bar_layout.addWidget(btn)
        self._mode_buttons[PreviewMode.WEB].setChecked(True)
        bar_layout.addStretch()

        self._status_label = QLabel("")
        self._status_label.setStyleSheet("font-size: 8pt; color: #777;")
        self._status_label.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        bar_layout.addWidget(self._status_label)
        layout.addWidget(bar)

        # ── Views ───────────────────────────────────────────────────────────
        self._stack = QStackedWidget()
        self._web_view = QTextEdit()
        self._web_view.setReadOnly(True)
        self._web_view.setFrameShape(QFrame.Shape.NoFrame)
        self._paged_view = PagedPreviewWidget(page_format=page_format)
        self._paged_view.page_count_changed.connect(self._update_status)
        self._stack.addWidget(self._web_view)
        self._stack.addWidget(self._paged_view)
        layout.addWidget(self._stack, stretch=1)

    # ── Public API ──────────────────────────────────────────────────────────

    @property
    def mode(self) -> PreviewMode:
        return self._mode

    @property
    def paged_view(self) -> PagedPreviewWidget:
        return self._paged_view

    @property
    def web_view(self) -> QTextEdit:
        return self._web_view

    def set_request(self, request: ExportRequest) -> None:
        """Show *request* in the current mode."""
        self._request = request
        self._refresh()

    def set_mode(self, mode: PreviewMode | str) -> None:
        mode = PreviewMode(mode)
        if mode == self._mode:
            return
        self._mode = mode
        self._mode_buttons[mode].setChecked(True)
        self._refresh()
        self.mode_changed.emit(mode.value)

    # ── Internals ───────────────────────────────────────────────────────────

    def _refresh(self) -> None:
        if self._mode == PreviewMode.WEB:
            self._stack.setCurrentWidget(self._web_view)
        else:
            self._stack.setCurrentWidget(self._paged_view)

        if self._request is None:
            return

        request = self._request
        qt_doc = render_to_qtextdocument(
            request.content,
            request.style,
            request.signatures,
            for_export=self._mode != PreviewMode.WEB,
        )
        if self._mode == PreviewMode.WEB:
            qt_doc.setParent(self._web_view)
            self._web_view.setDocument(qt_doc)
            self._status_label.setText("")
        else:
            qt_doc.setParent(self._paged_view)
            self._paged_view.show_document(qt_doc, request.style)
            self._update_status(self._paged_view.page_count)

    def _update_status(self, count: int) -> None:
        if self._mode == PreviewMode.WEB:
            return
        label = _MODE_LABELS[self._mode]
        self._status_label.setText(f"{label} preview  •  ~{count} page(s), approximate")
