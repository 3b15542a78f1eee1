"""Pydantic models for export engine settings.

These models validate and type the JSON settings file that drives the
browser-automation PDF path, the print route and the orchestrator.
"""

from __future__ import annotations

from urllib.parse import quote

from pydantic import BaseModel, Field

from contract_renderer.domain.models.document import PageMargin
from contract_renderer.domain.models.enums import PageFormat


# ---------------------------------------------------------------------------
# Browser
# ---------------------------------------------------------------------------


class BrowserSettings(BaseModel):
    """Headless browser launch options."""

    headless: bool = True
    launch_args: list[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"]
    )


class TimeoutSettings(BaseModel):
    """Per-gate timeouts, in milliseconds."""

    navigation_ms: int = Field(30_000, gt=0)
    paper_ms: int = Field(10_000, gt=0)
    renderer_ms: int = Field(15_000, gt=0)
    content_ms: int = Field(15_000, gt=0)
    fonts_ms: int = Field(5_000, gt=0)
    settle_ms: int = Field(1_000, ge=0)


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class ExportSettings(BaseModel):
    """Complete export engine configuration."""

    base_url: str = "http://localhost:3000"
    use_new_export: bool = True
    page_format: PageFormat = PageFormat.LETTER
    default_margin: PageMargin = Field(default_factory=PageMargin)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    timeouts: TimeoutSettings = Field(default_factory=TimeoutSettings)
    min_content_chars: int = Field(50, ge=0)
    session_cookie_name: str = "session-token"
    print_route_template: str = "/documents/{document_id}/print"

    def print_url(self, document_id: str, base_url: str | None = None) -> str:
        """Absolute URL of the print view for *document_id*, percent-encoded."""
        root = (base_url or self.base_url).rstrip("/")
        return root + self.print_route_template.format(document_id=quote(document_id, safe=""))
