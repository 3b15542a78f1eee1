"""Tests for the markup → block parser."""

from __future__ import annotations

from contract_renderer.content.normalizer import normalize
from contract_renderer.content.parser import extract_content_region, parse_blocks
from contract_renderer.domain.models.blocks import HeadingBlock, ListItemBlock, ParagraphBlock
from contract_renderer.domain.models.document import ExportRequest
from contract_renderer.markup.generator import render_standalone_markup


def _kinds(blocks):
    return [type(b).__name__ for b in blocks]


class TestDocumentOrder:
    """Blocks come out in source order whatever their type."""

    def test_interleaved_headings_and_paragraphs(self):
        markup = "<p>p1</p><h2>h1</h2><p>p2</p><h1>h2</h1><p>p3</p><h3>h3</h3>"
        blocks = parse_blocks(markup)
        assert [b.text for b in blocks] == ["p1", "h1", "p2", "h2", "p3", "h3"]
        assert _kinds(blocks) == [
            "ParagraphBlock",
            "HeadingBlock",
            "ParagraphBlock",
            "HeadingBlock",
            "ParagraphBlock",
            "HeadingBlock",
        ]

    def test_paragraph_before_first_heading(self):
        blocks = parse_blocks(normalize("Preamble.\n\n# Agreement\n\nBody."))
        assert [b.text for b in blocks] == ["Preamble.", "Agreement", "Body."]

    def test_lists_between_paragraphs(self):
        blocks = parse_blocks(normalize("Intro\n\n- a\n- b\n- c\n\nOutro"))
        assert [b.text for b in blocks] == ["Intro", "a", "b", "c", "Outro"]
        assert all(isinstance(b, ListItemBlock) for b in blocks[1:4])

    def test_nested_containers(self):
        markup = "<div><section><h2>A</h2><p>x</p></section><blockquote><p>y</p></blockquote></div>"
        assert [b.text for b in parse_blocks(markup)] == ["A", "x", "y"]


class TestBlocks:
    def test_heading_levels_fold_to_three(self):
        blocks = parse_blocks("<h1>a</h1><h4>b</h4><h6>c</h6>")
        assert [b.level for b in blocks] == [1, 3, 3]

    def test_inline_emphasis(self):
        (para,) = parse_blocks("<p>Plain <strong>bold</strong> and <em>italic</em>.</p>")
        assert isinstance(para, ParagraphBlock)
        assert [(s.text, s.bold, s.italic) for s in para.spans] == [
            ("Plain ", False, False),
            ("bold", True, False),
            (" and ", False, False),
            ("italic", False, True),
            (".", False, False),
        ]

    def test_bold_heading(self):
        (heading,) = parse_blocks("<h2><strong>All bold</strong></h2>")
        assert isinstance(heading, HeadingBlock)
        assert heading.bold is True
        assert heading.italic is False

    def test_line_break_inside_paragraph(self):
        (para,) = parse_blocks("<p>line one<br/>line two</p>")
        assert para.text == "line one\nline two"

    def test_ordered_list_indices(self):
        blocks = parse_blocks('<ol start="3"><li>c</li><li>d</li></ol>')
        assert [(b.ordered, b.index) for b in blocks] == [(True, 3), (True, 4)]

    def test_nested_list_depth(self):
        blocks = parse_blocks("<ul><li>a<ul><li>a1</li></ul></li><li>b</li></ul>")
        assert [(b.text, b.depth) for b in blocks] == [("a", 0), ("a1", 1), ("b", 0)]

    def test_nested_list_from_lightweight_markup(self):
        blocks = parse_blocks(normalize("- a\n  - nested\n- b"))
        assert [(b.text, b.depth) for b in blocks] == [("a", 0), ("nested", 1), ("b", 0)]

    def test_loose_text_becomes_paragraph(self):
        blocks = parse_blocks("<div>loose <b>text</b></div><p>after</p>")
        assert [b.text for b in blocks] == ["loose text", "after"]

    def test_empty(self):
        assert parse_blocks("") == []
        assert parse_blocks(None) == []
        assert parse_blocks("<p>  </p>") == []


class TestContentRegion:
    def test_fragment_unchanged(self):
        assert extract_content_region("<p>x</p>") == "<p>x</p>"

    def test_standalone_page(self, signer):
        page = render_standalone_markup(
            ExportRequest(content="# Title\n\nBody", signatures=[signer])
        )
        region = extract_content_region(page)
        assert "<h1>Title</h1>" in region
        assert "Signed by" not in region
        assert "paper" not in region
