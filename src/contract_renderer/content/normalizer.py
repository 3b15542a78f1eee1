"""Content Normalizer — turns a content blob into safe markup.

Generated documents arrive either as lightweight markup text (headings
with ``#``, ``-``/``*``/``1.`` lists, ``**bold**`` and ``*italic*``) or as
markup that was already converted and stored.  Both paths end in the same
BeautifulSoup serialization so ``normalize(normalize(x)) == normalize(x)``.
"""

from __future__ import annotations

import html
import logging
import re
from typing import Optional, Union

import markdown
from bs4 import BeautifulSoup

from contract_renderer.domain.errors import ContentError
from contract_renderer.domain.models.document import Content
from contract_renderer.domain.models.enums import ContentKind

logger = logging.getLogger(__name__)

BLOCK_TAGS = (
    "p", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "li", "div",
    "section", "article", "table", "blockquote", "pre", "br", "hr",
)  # fmt: skip

# Interactive or executable elements never allowed in a document body
FOREIGN_TAGS = (
    "script", "style", "button", "input", "select", "textarea",
    "iframe", "object", "embed", "form",
)  # fmt: skip

_BLOCK_TAG_RE = re.compile(
    r"<\s*/?\s*(?:%s)\b[^>]*>" % "|".join(BLOCK_TAGS),
    re.IGNORECASE,
)
_FENCE = "```"
_LIST_LINE_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+\S")
_MARKDOWN_EXTENSIONS = ["sane_lists"]
# Generated bodies nest list items by two spaces
_TAB_LENGTH = 2
# Inline code spans; markdown escapes their contents itself
_CODE_SPAN_RE = re.compile(r"(`+)(?!`).+?(?<!`)\1(?!`)")


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def is_markup(text: Optional[str]) -> bool:
    """True when *text* contains at least one block-level tag."""
    if not text:
        return False
    return _BLOCK_TAG_RE.search(text) is not None


def detect_content(text: Optional[str]) -> Content:
    """Tag raw text as markup or lightweight markup."""
    text = text or ""
    kind = ContentKind.MARKUP if is_markup(text) else ContentKind.MARKDOWN
    return Content(kind=kind, text=text)


def strip_code_fence(text: str) -> str:
    """Remove a code fence only when it wraps the entire content."""
    trimmed = text.strip()
    if not (trimmed.startswith(_FENCE) and trimmed.endswith(_FENCE)) or len(trimmed) < 6:
        return text

    lines = trimmed.split("\n")
    if lines[0].startswith(_FENCE):
        lines.pop(0)
    if lines and lines[-1].strip() == _FENCE:
        lines.pop()
    return "\n".join(lines).strip()


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def _separate_lists(text: str) -> str:
    """Insert a blank line before a list that directly follows a paragraph line.

    Generated bodies often put ``- item`` right under a sentence; without
    the blank line the list would be folded into the paragraph.
    """
    out: list[str] = []
    previous = ""
    for line in text.split("\n"):
        if (
            _LIST_LINE_RE.match(line)
            and previous.strip()
            and not _LIST_LINE_RE.match(previous)
            and not previous.lstrip().startswith("#")
            and not line.startswith((" ", "\t"))
        ):
            out.append("")
        out.append(line)
        previous = line
    return "\n".join(out)


def _escape_outside_code(text: str) -> str:
    """Escape user text, leaving inline code spans for markdown to escape."""
    parts: list[str] = []
    last = 0
    for match in _CODE_SPAN_RE.finditer(text):
        parts.append(html.escape(text[last : match.start()], quote=False))
        parts.append(match.group(0))
        last = match.end()
    parts.append(html.escape(text[last:], quote=False))
    return "".join(parts)


def markdown_to_markup(text: str) -> str:
    """Convert lightweight markup text to markup, escaping user text first."""
    return markdown.markdown(
        _separate_lists(_escape_outside_code(text)),
        extensions=_MARKDOWN_EXTENSIONS,
        output_format="html",
        tab_length=_TAB_LENGTH,
    )


def sanitize_markup(markup: str) -> str:
    """Drop foreign interactive elements and inline event handlers."""
    soup = BeautifulSoup(markup, "html.parser")

    removed = 0
    for tag in soup.find_all(FOREIGN_TAGS):
        # Nested inside one already removed
        if tag.decomposed:
            continue
        tag.decompose()
        removed += 1

    for tag in soup.find_all(True):
        handlers = [name for name in tag.attrs if name.lower().startswith("on")]
        for name in handlers:
            del tag.attrs[name]
            removed += 1

    if removed:
        logger.debug("Removed %d foreign elements/attributes from markup", removed)
    return str(soup).strip()


def normalize(content: Union[Content, str, None]) -> str:
    """Return sanitized markup for *content*.

    ``None`` and blank input give ``""``.  A :class:`Content` keeps its tag;
    a plain string is tagged with :func:`is_markup`.
    """
    if content is None:
        return ""
    if isinstance(content, Content):
        kind, text = content.kind, content.text
    else:
        text = content
        kind = ContentKind.MARKUP if is_markup(text) else ContentKind.MARKDOWN

    if not text or not text.strip():
        return ""

    text = strip_code_fence(text)
    if kind == ContentKind.MARKDOWN and not is_markup(text):
        text = markdown_to_markup(text)
    return sanitize_markup(text)


def require_content(text: Optional[str]) -> str:
    """Return *text* unchanged, raising ``ContentError`` when it is blank."""
    if text is None or not text.strip():
        raise ContentError("Document content is required for export")
    return text
