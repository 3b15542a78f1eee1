"""PDF exporter that prints the standalone page with headless Chromium.

The browser is owned by :class:`BrowserManager`: launched lazily on first
use, reused by every export and closed only by an explicit ``shutdown()``.
Each export opens its own context and page, waits on a fixed sequence of
readiness gates, and closes both in ``finally``.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlencode

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright.async_api import Error as PlaywrightError

from contract_renderer.config.models import BrowserSettings, ExportSettings
from contract_renderer.domain.errors import RenderingError
from contract_renderer.domain.models.document import PdfOptions
from contract_renderer.domain.models.enums import ExportFormat
from contract_renderer.infrastructure.exporters.validation import validate_pdf

logger = logging.getLogger(__name__)

Launcher = Callable[[BrowserSettings], Awaitable[Browser]]


class ReadinessGate(str, Enum):
    """Ordered wait conditions a print page must pass before printing."""

    NAVIGATION = "navigation"
    PAPER = "paper"
    RENDERER = "renderer"
    CONTENT = "content"
    FONTS = "fonts"
    FONTS_MARKER = "fonts-marker"
    # Browser failure opening the context/page or printing it
    PRINT = "print"


PAPER_SELECTOR = ".paper"
RENDERER_SELECTOR = ".document-renderer"
FONTS_MARKER_SELECTOR = 'body[data-fonts-ready="true"]'

_CONTENT_LENGTH_JS = """
() => {
  const el = document.querySelector('.document-renderer');
  return el ? (el.innerText || '').trim().length : 0;
}
"""

_CONTENT_READY_JS = """
(minChars) => {
  const el = document.querySelector('.document-renderer');
  return !!el && (el.innerText || '').trim().length > minChars;
}
"""

_FONTS_READY_JS = "() => document.fonts.ready.then(() => true)"

# Hides hosting-runtime branding; never touches the document itself
_SCRUB_BRANDING_JS = """
() => {
  const isProtected = (el) => !!el.closest('.paper, .document-renderer, .document-preview-web');
  const hide = (el) => { el.style.display = 'none'; el.style.visibility = 'hidden'; };
  const hidden = [];

  document.querySelectorAll('img, svg').forEach((el) => {
    if (isProtected(el)) return;
    const src = (el.getAttribute('src') || '').toLowerCase();
    const alt = (el.getAttribute('alt') || '').toLowerCase();
    const cls = (el.getAttribute('class') || '').toLowerCase();
    const id = (el.id || '').toLowerCase();
    const marked = (s) => s.includes('logo') || s.includes('brand') || s.includes('watermark');
    if (
      src.includes('next') || src.includes('vercel') ||
      alt.includes('next') || alt.includes('vercel') ||
      (cls.includes('next') && marked(cls)) ||
      (id.includes('next') && marked(id))
    ) {
      hide(el);
      hidden.push(el.tagName);
    }
  });

  document.querySelectorAll('body *').forEach((el) => {
    if (isProtected(el)) return;
    const style = window.getComputedStyle(el);
    const corner = (style.position === 'fixed' || style.position === 'absolute') &&
      style.bottom !== 'auto' && parseFloat(style.bottom) < 50;
    const text = (el.textContent || '');
    const lower = text.toLowerCase();
    if (corner && parseFloat(style.fontSize) < 14 && text.length < 100 &&
        (lower.includes('next.js') || lower.includes('powered by next'))) {
      hide(el);
      hidden.push(el.tagName);
    }
  });

  return hidden;
}
"""


# ---------------------------------------------------------------------------
# Browser lifecycle
# ---------------------------------------------------------------------------


class BrowserManager:
    """Process-wide headless browser, created on first use.

    Only the launch is guarded by a lock; once running, the browser is
    shared by concurrent exports, each in its own context.
    """

    def __init__(
        self,
        settings: Optional[BrowserSettings] = None,
        launcher: Optional[Launcher] = None,
    ) -> None:
        self._settings = settings or BrowserSettings()
        self._launcher = launcher
        self._browser: Optional[Browser] = None
        self._playwright: Any = None
        self._lock = asyncio.Lock()
        self.launch_count = 0

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def get_browser(self) -> Browser:
        if self.is_running:
            return self._browser
        async with self._lock:
            if not self.is_running:
                self._browser = await self._launch()
                self.launch_count += 1
                logger.info("Headless browser launched (launch #%d)", self.launch_count)
        return self._browser

    async def _launch(self) -> Browser:
        if self._launcher is not None:
            return await self._launcher(self._settings)
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        return await self._playwright.chromium.launch(
            headless=self._settings.headless,
            args=list(self._settings.launch_args),
        )

    async def shutdown(self) -> None:
        """Close the browser and the driver; the next call relaunches."""
        async with self._lock:
            browser, self._browser = self._browser, None
            driver, self._playwright = self._playwright, None
            if browser is not None:
                try:
                    await browser.close()
                except PlaywrightError as exc:
                    logger.warning("Browser close failed: %s", exc)
            if driver is not None:
                await driver.stop()
        logger.info("Headless browser shut down")


# ---------------------------------------------------------------------------
# Exporter
# ---------------------------------------------------------------------------


class PlaywrightPdfExporter:
    """Print a stored document's print route to PDF."""

    format = ExportFormat.PDF
    engine = "playwright"

    def __init__(
        self,
        browser_manager: BrowserManager,
        settings: Optional[ExportSettings] = None,
    ) -> None:
        self._browsers = browser_manager
        self._settings = settings or ExportSettings()

    async def is_available(self) -> bool:
        """True when the browser can be launched (or is already running)."""
        try:
            await self._browsers.get_browser()
        except Exception as exc:
            logger.warning("PDF engine unavailable: %s", exc)
            return False
        return True

    def print_url(self, document_id: str, user_id: Optional[str] = None) -> str:
        url = self._settings.print_url(document_id)
        if user_id:
            url += "?" + urlencode({"userId": user_id})
        return url

    def default_options(self) -> PdfOptions:
        return PdfOptions(
            format=self._settings.page_format,
            margin=self._settings.default_margin,
        )

    async def export_pdf(
        self,
        document_id: str,
        credential: Optional[str] = None,
        options: Optional[PdfOptions] = None,
    ) -> bytes:
        """Render the print route for *document_id* and return PDF bytes.

        Raises:
            RenderingError: a readiness gate failed or timed out, or the
                browser failed while setting up or printing the page.
            OutputValidationError: the browser produced no usable PDF.
        """
        options = options or self.default_options()
        url = self.print_url(document_id, options.user_id)
        page_errors: list[str] = []

        browser = await self._browsers.get_browser()
        context: Optional[BrowserContext] = None
        page: Optional[Page] = None
        try:
            context = await browser.new_context()
            if credential:
                await self._add_session_cookie(context, credential)
            page = await context.new_page()
            page.on("pageerror", lambda exc: page_errors.append(str(exc)))
            page.on(
                "console",
                lambda msg: page_errors.append(msg.text) if msg.type == "error" else None,
            )

            await self._wait_until_ready(page, url, page_errors)
            data = await self._print(page, options)
        except (PlaywrightError, asyncio.TimeoutError) as exc:
            raise await self._gate_failure(
                ReadinessGate.PRINT, page, url, page_errors, str(exc) or type(exc).__name__
            ) from exc
        finally:
            await self._close(page, context)

        if page_errors:
            logger.warning("Page reported %d error(s) during export: %s", len(page_errors), page_errors)
        logger.info("PDF export of %s: %d bytes", document_id, len(data))
        return validate_pdf(data)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _print(self, page: Page, options: PdfOptions) -> bytes:
        hidden = await page.evaluate(_SCRUB_BRANDING_JS)
        if hidden:
            logger.debug("Hid %d branding element(s): %s", len(hidden), hidden)

        await page.emulate_media(media="screen")
        return await page.pdf(
            format=options.format.value,
            margin=options.margin.model_dump(),
            print_background=True,
            display_header_footer=False,
            prefer_css_page_size=False,
        )

    @staticmethod
    async def _close(page: Optional[Page], context: Optional[BrowserContext]) -> None:
        for target in (page, context):
            if target is None:
                continue
            try:
                await target.close()
            except PlaywrightError as exc:
                # Browser already gone; the next export relaunches it
                logger.warning("Could not close %s: %s", type(target).__name__, exc)

    async def _add_session_cookie(self, context: BrowserContext, credential: str) -> None:
        try:
            await context.add_cookies(
                [
                    {
                        "name": self._settings.session_cookie_name,
                        "value": credential,
                        "url": self._settings.base_url,
                    }
                ]
            )
        except PlaywrightError as exc:
            # The userId query parameter still identifies the caller
            logger.warning("Could not set session cookie: %s", exc)

    async def _wait_until_ready(self, page: Page, url: str, page_errors: list[str]) -> None:
        timeouts = self._settings.timeouts

        logger.debug("Navigating to %s", url)
        response = await self._gate(
            ReadinessGate.NAVIGATION,
            page,
            url,
            page_errors,
            page.goto(url, wait_until="domcontentloaded", timeout=timeouts.navigation_ms),
        )
        if response is None or not response.ok:
            status = response.status if response is not None else "no response"
            raise await self._gate_failure(
                ReadinessGate.NAVIGATION, page, url, page_errors, f"HTTP status {status}"
            )

        await self._gate(
            ReadinessGate.PAPER,
            page,
            url,
            page_errors,
            page.wait_for_selector(PAPER_SELECTOR, state="attached", timeout=timeouts.paper_ms),
        )
        await self._gate(
            ReadinessGate.RENDERER,
            page,
            url,
            page_errors,
            page.wait_for_selector(
                RENDERER_SELECTOR, state="attached", timeout=timeouts.renderer_ms
            ),
        )
        await self._gate(
            ReadinessGate.CONTENT,
            page,
            url,
            page_errors,
            page.wait_for_function(
                _CONTENT_READY_JS,
                arg=self._settings.min_content_chars,
                timeout=timeouts.content_ms,
            ),
        )
        await self._gate(
            ReadinessGate.FONTS,
            page,
            url,
            page_errors,
            asyncio.wait_for(page.evaluate(_FONTS_READY_JS), timeout=timeouts.fonts_ms / 1000),
        )
        await self._gate(
            ReadinessGate.FONTS_MARKER,
            page,
            url,
            page_errors,
            page.wait_for_selector(
                FONTS_MARKER_SELECTOR, state="attached", timeout=timeouts.fonts_ms
            ),
        )

        if timeouts.settle_ms:
            await page.wait_for_timeout(timeouts.settle_ms)
        logger.debug("All readiness gates passed for %s", url)

    async def _gate(
        self,
        gate: ReadinessGate,
        page: Page,
        url: str,
        page_errors: list[str],
        step: Awaitable[Any],
    ) -> Any:
        try:
            result = await step
        except (PlaywrightError, asyncio.TimeoutError) as exc:
            raise await self._gate_failure(
                gate, page, url, page_errors, str(exc) or type(exc).__name__
            ) from exc
        logger.debug("Gate %s passed", gate.value)
        return result

    async def _gate_failure(
        self,
        gate: ReadinessGate,
        page: Optional[Page],
        url: str,
        page_errors: list[str],
        reason: str,
    ) -> RenderingError:
        length = await self._content_length(page)
        message = f"Print page not ready: gate '{gate.value}' failed at {url} ({reason})"
        if length is not None:
            message += f"; rendered content length {length}"
        if page_errors:
            message += f"; page errors: {'; '.join(page_errors[:3])}"
        logger.error(
            "Readiness gate %s failed: url=%s content_length=%s reason=%s",
            gate.value,
            url,
            length,
            reason,
        )
        return RenderingError(message, gate=gate.value, url=url, content_length=length)

    @staticmethod
    async def _content_length(page: Optional[Page]) -> Optional[int]:
        if page is None:
            return None
        try:
            return int(await page.evaluate(_CONTENT_LENGTH_JS))
        except (PlaywrightError, TypeError, ValueError):
            return None
