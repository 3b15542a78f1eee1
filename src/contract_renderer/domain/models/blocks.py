"""Typed blocks of a rendered document.

A ``RenderedDocument`` is an ordered list of these blocks, built fresh from
markup for every export call and thrown away once the file is written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class InlineSpan:
    """A run of text with uniform emphasis."""

    text: str
    bold: bool = False
    italic: bool = False


def _spans_text(spans: tuple[InlineSpan, ...]) -> str:
    return "".join(s.text for s in spans)


def _all(spans: tuple[InlineSpan, ...], attr: str) -> bool:
    visible = [s for s in spans if s.text.strip()]
    return bool(visible) and all(getattr(s, attr) for s in visible)


@dataclass(frozen=True)
class HeadingBlock:
    """Heading of level 1-3."""

    level: int
    spans: tuple[InlineSpan, ...] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        return _spans_text(self.spans)

    @property
    def bold(self) -> bool:
        return _all(self.spans, "bold")

    @property
    def italic(self) -> bool:
        return _all(self.spans, "italic")


@dataclass(frozen=True)
class ParagraphBlock:
    """Body paragraph."""

    spans: tuple[InlineSpan, ...] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        return _spans_text(self.spans)

    @property
    def bold(self) -> bool:
        return _all(self.spans, "bold")

    @property
    def italic(self) -> bool:
        return _all(self.spans, "italic")


@dataclass(frozen=True)
class ListItemBlock:
    """One item of an ordered or unordered list."""

    ordered: bool
    index: Optional[int] = None  # 1-based position for ordered lists
    spans: tuple[InlineSpan, ...] = field(default_factory=tuple)
    depth: int = 0

    @property
    def text(self) -> str:
        return _spans_text(self.spans)


Block = Union[HeadingBlock, ParagraphBlock, ListItemBlock]
RenderedDocument = list[Block]
