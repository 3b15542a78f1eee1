"""Preview window entry point.

Launch with:
    contract-preview PATH        (after pip install -e .)
    contract-render preview PATH
"""

from __future__ import annotations

import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication, QMainWindow, QWidget

from contract_renderer.domain.models.document import ExportRequest
from contract_renderer.domain.models.enums import PageFormat
from contract_renderer.gui.widgets.export_preview import ExportPreviewWidget


class PreviewWindow(QMainWindow):
    """Main window hosting the export preview panel."""

    def __init__(
        self,
        request: ExportRequest,
        parent: QWidget | None = None,
        *,
        page_format: PageFormat = PageFormat.LETTER,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(request.title or "Document preview")
        self.resize(900, 1000)

        self.preview = ExportPreviewWidget(page_format=page_format)
        self.setCentralWidget(self.preview)
        self.preview.set_request(request)


def run_preview(request: ExportRequest, page_format: PageFormat = PageFormat.LETTER) -> int:
    """Show *request* in a preview window and block until it is closed."""
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("Contract Renderer")
    app.setOrganizationName("contract-renderer")

    window = PreviewWindow(request, page_format=page_format)
    window.show()
    return app.exec()


def main() -> None:
    """Open the file given on the command line in the preview window."""
    if len(sys.argv) < 2:
        print("usage: contract-preview PATH", file=sys.stderr)
        sys.exit(2)

    path = Path(sys.argv[1])
    request = ExportRequest(content=path.read_text(encoding="utf-8"), title=path.stem)
    sys.exit(run_preview(request))


if __name__ == "__main__":
    main()
