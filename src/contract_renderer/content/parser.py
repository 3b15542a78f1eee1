"""Markup → ordered block list.

A single recursive walk over the BeautifulSoup tree emits headings,
paragraphs and list items in the order they occur in the source, so no
block type can overtake another.  Every exporter that needs structured
content (word-processor builder, legacy PDF) goes through
:func:`parse_blocks`.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment

from contract_renderer.domain.models.blocks import (
    Block,
    HeadingBlock,
    InlineSpan,
    ListItemBlock,
    ParagraphBlock,
    RenderedDocument,
)

_HEADING_LEVELS = {"h1": 1, "h2": 2, "h3": 3, "h4": 3, "h5": 3, "h6": 3}
_CONTAINERS = {
    "div", "section", "article", "main", "blockquote", "body", "html",
    "header", "footer", "table", "thead", "tbody", "tr", "td", "th",
}  # fmt: skip
_BOLD_TAGS = {"strong", "b"}
_ITALIC_TAGS = {"em", "i"}
# Marks a <br>; source newlines are plain whitespace
_BREAK = "\u2028"
_SPACED_BREAK_RE = re.compile(r" *\n *")
_SKIP_TAGS = {"head", "script", "style", "title", "meta", "link", "img", "hr"}

# Selectors tried in order when locating the document body inside a full page
_CONTENT_REGION_SELECTORS = (".document-content", ".document-renderer", "body")


# ---------------------------------------------------------------------------
# Inline spans
# ---------------------------------------------------------------------------


def _collect_spans(
    node: Tag,
    bold: bool = False,
    italic: bool = False,
    *,
    stop_at: Iterable[str] = (),
) -> list[InlineSpan]:
    spans: list[InlineSpan] = []
    for child in node.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            text = str(child)
            if text:
                spans.append(InlineSpan(text=text, bold=bold, italic=italic))
            continue
        if not isinstance(child, Tag) or child.name in _SKIP_TAGS or child.name in stop_at:
            continue
        if child.name == "br":
            spans.append(InlineSpan(text=_BREAK, bold=bold, italic=italic))
            continue
        spans.extend(
            _collect_spans(
                child,
                bold or child.name in _BOLD_TAGS,
                italic or child.name in _ITALIC_TAGS,
                stop_at=stop_at,
            )
        )
    return spans


def _clean_spans(spans: list[InlineSpan]) -> tuple[InlineSpan, ...]:
    """Collapse source whitespace and merge adjacent spans of equal emphasis."""
    merged: list[InlineSpan] = []
    for span in spans:
        if span.text == _BREAK:
            text = "\n"
        else:
            text = " ".join(span.text.split())
            if span.text[:1].isspace():
                text = " " + text
            if span.text[-1:].isspace() and text.strip():
                text = text + " "
        if not text:
            continue
        if merged and merged[-1].bold == span.bold and merged[-1].italic == span.italic:
            merged[-1] = InlineSpan(merged[-1].text + text, span.bold, span.italic)
        else:
            merged.append(InlineSpan(text, span.bold, span.italic))

    # Trim the outer edges only
    while merged and not merged[0].text.strip():
        merged.pop(0)
    while merged and not merged[-1].text.strip():
        merged.pop()
    if merged:
        first = merged[0]
        merged[0] = InlineSpan(first.text.lstrip(), first.bold, first.italic)
        last = merged[-1]
        merged[-1] = InlineSpan(last.text.rstrip(), last.bold, last.italic)
    return tuple(s for s in merged if s.text)


def _normalize_breaks(spans: tuple[InlineSpan, ...]) -> tuple[InlineSpan, ...]:
    """Drop spaces hugging a line break."""
    return tuple(
        InlineSpan(_SPACED_BREAK_RE.sub("\n", s.text), s.bold, s.italic) if "\n" in s.text else s
        for s in spans
    )


# ---------------------------------------------------------------------------
# Block walk
# ---------------------------------------------------------------------------


class _Walker:
    def __init__(self) -> None:
        self.blocks: list[Block] = []
        self._loose: list[InlineSpan] = []

    def flush_loose(self) -> None:
        spans = _normalize_breaks(_clean_spans(self._loose))
        self._loose = []
        if spans:
            self.blocks.append(ParagraphBlock(spans=spans))

    def walk(self, node: Tag) -> None:
        for child in node.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                self._loose.append(InlineSpan(text=str(child)))
                continue
            if not isinstance(child, Tag) or child.name in _SKIP_TAGS:
                continue

            name = child.name
            if name in _HEADING_LEVELS:
                self.flush_loose()
                spans = _clean_spans(_collect_spans(child))
                if spans:
                    self.blocks.append(HeadingBlock(level=_HEADING_LEVELS[name], spans=spans))
            elif name == "p":
                self.flush_loose()
                spans = _normalize_breaks(_clean_spans(_collect_spans(child)))
                if spans:
                    self.blocks.append(ParagraphBlock(spans=spans))
            elif name in ("ul", "ol"):
                self.flush_loose()
                self._walk_list(child, depth=0)
            elif name == "pre":
                self.flush_loose()
                text = child.get_text().strip("\n")
                if text.strip():
                    self.blocks.append(ParagraphBlock(spans=(InlineSpan(text),)))
            elif name in _CONTAINERS:
                self.flush_loose()
                self.walk(child)
                self.flush_loose()
            elif name == "br":
                self._loose.append(InlineSpan(_BREAK))
            else:
                # Inline element sitting directly in a container
                self._loose.extend(
                    _collect_spans(child, name in _BOLD_TAGS, name in _ITALIC_TAGS)
                )

    def _walk_list(self, node: Tag, depth: int) -> None:
        ordered = node.name == "ol"
        start = _list_start(node) if ordered else None
        position = 0
        for item in node.find_all("li", recursive=False):
            position += 1
            spans = _clean_spans(_collect_spans(item, stop_at=("ul", "ol")))
            # Block children of the item (e.g. <p> from loose lists) are flattened
            spans = _normalize_breaks(spans)
            if spans:
                self.blocks.append(
                    ListItemBlock(
                        ordered=ordered,
                        index=(start + position - 1) if ordered else None,
                        spans=spans,
                        depth=depth,
                    )
                )
            for nested in item.find_all(("ul", "ol"), recursive=False):
                self._walk_list(nested, depth + 1)


def _list_start(node: Tag) -> int:
    try:
        return int(node.get("start", 1))
    except (TypeError, ValueError):
        return 1


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_blocks(markup: Optional[str]) -> RenderedDocument:
    """Parse *markup* into blocks in document order."""
    if not markup or not markup.strip():
        return []
    soup = BeautifulSoup(markup, "html.parser")
    walker = _Walker()
    walker.walk(soup)
    walker.flush_loose()
    return walker.blocks


def extract_content_region(markup: Optional[str]) -> str:
    """Return the inner markup of the document body inside a full page.

    Fragments without a recognisable region are returned unchanged.  The
    signatures section of a standalone page is dropped; exporters render
    signatures from the records, not from markup.
    """
    if not markup:
        return ""
    soup = BeautifulSoup(markup, "html.parser")
    for selector in _CONTENT_REGION_SELECTORS:
        region = soup.select_one(selector)
        if region is not None:
            for section in region.select("section.signatures"):
                section.decompose()
            return region.decode_contents().strip()
    return markup
