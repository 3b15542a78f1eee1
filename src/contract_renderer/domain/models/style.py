"""DocumentStyle — the enum-valued style configuration.

Consumed identically by the on-screen renderer, the standalone markup
generator and the word-processor builder. The JSON shape persisted by the
preferences collaborator uses camelCase keys; both spellings are accepted.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contract_renderer.domain.models.enums import (
    FontFamily,
    FontSize,
    HeadingCase,
    HeadingIndent,
    HeadingStyle,
    Layout,
    LineSpacing,
    ParagraphSpacing,
)

# Spellings used by older persisted preferences
_LINE_SPACING_ALIASES = {
    "onePointOneFive": LineSpacing.ONE_POINT_ONE_FIVE.value,
    "onePointFive": LineSpacing.ONE_POINT_FIVE.value,
    "1.0": LineSpacing.SINGLE.value,
}
_HEADING_STYLE_ALIASES = {"regular": HeadingStyle.NORMAL.value}


class DocumentStyle(BaseModel):
    """Immutable style configuration for one document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    font_family: FontFamily = Field(FontFamily.MODERN, alias="fontFamily")
    font_size: FontSize = Field(FontSize.MEDIUM, alias="fontSize")
    line_spacing: LineSpacing = Field(LineSpacing.ONE_POINT_ONE_FIVE, alias="lineSpacing")
    paragraph_spacing: ParagraphSpacing = Field(ParagraphSpacing.NORMAL, alias="paragraphSpacing")
    heading_style: HeadingStyle = Field(HeadingStyle.BOLD, alias="headingStyle")
    heading_case: HeadingCase = Field(HeadingCase.NORMAL, alias="headingCase")
    heading_indent: HeadingIndent = Field(HeadingIndent.FLUSH, alias="headingIndent")
    layout: Layout = Field(Layout.STANDARD, alias="layout")

    @field_validator("line_spacing", mode="before")
    @classmethod
    def _accept_legacy_line_spacing(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = "single" if float(value) == 1.0 else str(value)
        if isinstance(value, str):
            return _LINE_SPACING_ALIASES.get(value, value)
        return value

    @field_validator("heading_style", mode="before")
    @classmethod
    def _accept_legacy_heading_style(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _HEADING_STYLE_ALIASES.get(value, value)
        return value

    def to_json_dict(self) -> dict[str, str]:
        """Serialize with camelCase keys, as the preferences store expects."""
        return self.model_dump(mode="json", by_alias=True)


DEFAULT_STYLE = DocumentStyle()

PRESETS: dict[str, DocumentStyle] = {
    "standard-legal": DocumentStyle(
        font_family=FontFamily.CLASSIC,
        font_size=FontSize.MEDIUM,
        line_spacing=LineSpacing.ONE_POINT_ONE_FIVE,
        paragraph_spacing=ParagraphSpacing.NORMAL,
        heading_style=HeadingStyle.BOLD,
        heading_case=HeadingCase.NORMAL,
        heading_indent=HeadingIndent.FLUSH,
        layout=Layout.STANDARD,
    ),
    "readable-business": DocumentStyle(
        font_family=FontFamily.MODERN,
        font_size=FontSize.LARGE,
        line_spacing=LineSpacing.ONE_POINT_FIVE,
        paragraph_spacing=ParagraphSpacing.ROOMY,
        heading_style=HeadingStyle.BOLD,
        heading_case=HeadingCase.UPPERCASE,
        heading_indent=HeadingIndent.FLUSH,
        layout=Layout.WIDE,
    ),
    "compact-print": DocumentStyle(
        font_family=FontFamily.MODERN,
        font_size=FontSize.SMALL,
        line_spacing=LineSpacing.SINGLE,
        paragraph_spacing=ParagraphSpacing.COMPACT,
        heading_style=HeadingStyle.BOLD,
        heading_case=HeadingCase.NORMAL,
        heading_indent=HeadingIndent.INDENTED,
        layout=Layout.STANDARD,
    ),
}


def get_preset(name: str) -> DocumentStyle:
    """Return a named preset. Raises ``KeyError`` for unknown names."""
    try:
        return PRESETS[name]
    except KeyError:
        raise KeyError(f"Unknown style preset: {name!r}") from None
