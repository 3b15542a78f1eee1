"""Standalone Markup Generator.

Serializes content + style into a self-contained page: inline ``<style>``
computed from :class:`Typography`, no external stylesheet or script, and a
``data-fonts-ready`` marker on ``<body>`` that the PDF exporter waits for.
The print route serves exactly this page.
"""

from __future__ import annotations

import base64
import html
import logging
from typing import Optional, Sequence

from contract_renderer.content.normalizer import normalize
from contract_renderer.content.signatures import (
    decode_signature_image,
    signature_lines,
    sniff_raster_format,
)
from contract_renderer.domain.models.document import ExportRequest, SignatureRecord
from contract_renderer.domain.models.style import DocumentStyle
from contract_renderer.rules.constants import (
    LIST_INDENT_REM,
    LIST_ITEM_GAP_REM,
    MUTED_COLOR_EXPORT,
    RULE_COLOR,
    SIGNATURE_BLOCK_GAP_REM,
    SIGNATURE_IMAGE_MAX_HEIGHT_PX,
    SIGNATURE_IMAGE_MAX_WIDTH_PX,
    SIGNATURES_HEADING,
    SIGNATURES_MARGIN_TOP_REM,
    TEXT_COLOR_EXPORT,
)
from contract_renderer.styling.resolver import Typography, resolve_typography

logger = logging.getLogger(__name__)

FONTS_READY_ATTR = "data-fonts-ready"
FONTS_READY_FALLBACK_MS = 500

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width, initial-scale=1" />
<title>{title}</title>
<style>
{css}
</style>
</head>
<body {fonts_attr}="false">
<div class="paper">
<div class="document-preview-web">
<article class="document-renderer document-content">
{body}
</article>
{signatures}
</div>
</div>
<script>
{script}
</script>
</body>
</html>
"""

# Flips the marker once webfonts settle; the timeout covers browsers
# without the FontFaceSet API.
_FONTS_READY_SCRIPT = """(function () {{
  var body = document.body;
  function markReady() {{ body.setAttribute("{attr}", "true"); }}
  if (document.fonts && document.fonts.ready) {{
    document.fonts.ready.then(markReady, markReady);
  }}
  setTimeout(markReady, {fallback_ms});
}})();"""


# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------


def build_css(typo: Typography, *, page_padding: Optional[str] = None) -> str:
    """Inline rules equivalent to the canonical renderer's formats."""
    spacing = f"{typo.paragraph_spacing_rem}rem"
    padding = page_padding or f"{typo.page_margin_mm}mm"

    rules = [
        "html, body { margin: 0; padding: 0; background: #ffffff; }",
        (
            f".paper {{ box-sizing: border-box; padding: {padding}; "
            f"font-family: {typo.font_stack_css}; font-size: {typo.point_size}pt; "
            f"line-height: {typo.line_height_multiplier}; color: {TEXT_COLOR_EXPORT}; }}"
        ),
        f".document-renderer p {{ margin: 0 0 {spacing} 0; }}",
        (
            f".document-renderer ul, .document-renderer ol {{ margin: 0 0 {spacing} 0; "
            f"padding-left: {LIST_INDENT_REM}rem; }}"
        ),
        ".document-renderer ul { list-style-type: disc; }",
        ".document-renderer ol { list-style-type: decimal; }",
        f".document-renderer li {{ margin-bottom: {LIST_ITEM_GAP_REM}rem; }}",
        ".document-renderer strong, .document-renderer b { font-weight: 700; }",
        ".document-renderer em, .document-renderer i { font-style: italic; }",
    ]
    for level in (1, 2, 3):
        rules.append(
            f".document-renderer h{level} {{ font-size: {typo.heading_point_size(level)}pt; "
            f"font-weight: {typo.heading_weight}; text-transform: {typo.heading_transform}; "
            f"margin: {typo.heading_margin_top_rem(level)}rem 0 {spacing} "
            f"{typo.heading_indent_rem}rem; page-break-after: avoid; }}"
        )
    # h4-h6 render like h3
    rules.append(
        f".document-renderer h4, .document-renderer h5, .document-renderer h6 {{ "
        f"font-size: {typo.heading_point_size(3)}pt; font-weight: {typo.heading_weight}; "
        f"text-transform: {typo.heading_transform}; "
        f"margin: {typo.heading_margin_top_rem(3)}rem 0 {spacing} {typo.heading_indent_rem}rem; }}"
    )
    rules.extend(
        [
            (
                f"section.signatures {{ page-break-before: always; break-before: page; "
                f"margin-top: {SIGNATURES_MARGIN_TOP_REM}rem; padding-top: 2rem; "
                f"border-top: 2px solid {RULE_COLOR}; }}"
            ),
            (
                f"section.signatures h3 {{ font-size: {typo.signatures_heading_size}pt; "
                f"font-weight: 700; margin: 0 0 1.5rem 0; }}"
            ),
            (
                f".signature-block {{ margin-bottom: {SIGNATURE_BLOCK_GAP_REM}rem; "
                "page-break-inside: avoid; }"
            ),
            ".signature-block p { margin: 0 0 0.25rem 0; }",
            (
                f".signature-block .signer-email {{ font-size: {typo.email_point_size}pt; "
                f"color: {MUTED_COLOR_EXPORT}; }}"
            ),
            (
                f".signature-block img {{ max-width: {SIGNATURE_IMAGE_MAX_WIDTH_PX}px; "
                f"max-height: {SIGNATURE_IMAGE_MAX_HEIGHT_PX}px; object-fit: contain; }}"
            ),
        ]
    )
    return "\n".join(rules)


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------


def _signature_image_tag(signature: SignatureRecord) -> str:
    raw = decode_signature_image(signature.signature_image)
    if raw is None:
        return ""
    mime = f"image/{sniff_raster_format(raw)}"
    encoded = base64.b64encode(raw).decode("ascii")
    return f'<div class="signature-image"><img src="data:{mime};base64,{encoded}" alt="Signature" /></div>'


def render_signatures_section(signatures: Sequence[SignatureRecord]) -> str:
    """Signatures section markup, or ``""`` when there are no signers."""
    if not signatures:
        return ""

    parts = [
        '<section class="signatures" style="page-break-before: always; break-before: page">',
        f'<h3 class="signatures-heading">{SIGNATURES_HEADING}</h3>',
    ]
    for signature in signatures:
        signed_by, email, date = signature_lines(signature)
        parts.append('<div class="signature-block">')
        image = _signature_image_tag(signature)
        if image:
            parts.append(image)
        parts.append(f'<p class="signer-name">{html.escape(signed_by)}</p>')
        if email:
            parts.append(f'<p class="signer-email">{html.escape(email)}</p>')
        parts.append(f'<p class="signed-at">{html.escape(date)}</p>')
        parts.append("</div>")
    parts.append("</section>")
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _page(title: str, css: str, body: str, signatures: str) -> str:
    script = _FONTS_READY_SCRIPT.format(attr=FONTS_READY_ATTR, fallback_ms=FONTS_READY_FALLBACK_MS)
    return _PAGE_TEMPLATE.format(
        title=html.escape(title),
        css=css,
        fonts_attr=FONTS_READY_ATTR,
        body=body,
        signatures=signatures,
        script=script,
    )


def render_standalone_markup(request: ExportRequest) -> str:
    """Render a complete, self-contained page for *request*."""
    typo = resolve_typography(request.style)
    body = normalize(request.content)
    logger.debug(
        "Standalone markup: %d chars body, %d signature(s)", len(body), len(request.signatures)
    )
    return _page(
        request.title or "Document",
        build_css(typo),
        body,
        render_signatures_section(request.signatures),
    )


def render_empty_document_page(document_id: str, style: Optional[DocumentStyle] = None) -> str:
    """Placeholder page served when a stored document has no content."""
    typo = resolve_typography(style or DocumentStyle())
    body = (
        '<div class="empty-document">'
        "<h2>No Content Available</h2>"
        f"<p>Document {html.escape(document_id)} does not have any content yet.</p>"
        "</div>"
    )
    return _page("No Content Available", build_css(typo), body, "")
