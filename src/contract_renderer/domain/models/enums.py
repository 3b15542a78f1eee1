"""Enumerations for document styling and export."""

from enum import Enum


class FontFamily(str, Enum):
    """Font family classes offered to the user."""

    MODERN = "modern"  # sans-serif stack
    CLASSIC = "classic"  # serif stack
    MONO = "mono"  # monospace stack


class FontSize(str, Enum):
    """Body text size classes."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class LineSpacing(str, Enum):
    """Line-height classes."""

    SINGLE = "single"
    ONE_POINT_ONE_FIVE = "1.15"
    ONE_POINT_FIVE = "1.5"


class ParagraphSpacing(str, Enum):
    """Vertical gap after paragraphs, headings and lists."""

    COMPACT = "compact"
    NORMAL = "normal"
    ROOMY = "roomy"


class HeadingStyle(str, Enum):
    """Heading weight."""

    BOLD = "bold"
    NORMAL = "normal"


class HeadingCase(str, Enum):
    """Heading text transform."""

    NORMAL = "normal"
    UPPERCASE = "uppercase"


class HeadingIndent(str, Enum):
    """Heading left offset."""

    FLUSH = "flush"
    INDENTED = "indented"


class Layout(str, Enum):
    """Page layout (drives margins and preview width)."""

    STANDARD = "standard"
    WIDE = "wide"


class PageFormat(str, Enum):
    """Physical page sizes supported by the exporters."""

    LETTER = "Letter"
    A4 = "A4"


class ExportFormat(str, Enum):
    """Output file formats."""

    PDF = "pdf"
    DOCX = "docx"


class ContentKind(str, Enum):
    """Tag of the content union."""

    MARKDOWN = "markdown"  # lightweight markup text
    MARKUP = "markup"  # already-serialized HTML


class PreviewMode(str, Enum):
    """Preview modes of the export preview panel."""

    WEB = "web"
    PDF = "pdf"
    DOCX = "docx"
