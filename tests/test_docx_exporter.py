"""Tests for the python-docx exporter."""

from __future__ import annotations

import base64
import io
from datetime import datetime

import pytest
from docx import Document
from docx.shared import Inches, Pt

from contract_renderer.domain.models.document import ExportRequest, SignatureRecord
from contract_renderer.domain.models.enums import (
    ExportFormat,
    FontFamily,
    FontSize,
    HeadingCase,
    Layout,
    PageFormat,
)
from contract_renderer.domain.models.style import DocumentStyle
from contract_renderer.infrastructure.exporters.docx_exporter import DocxExporter
from contract_renderer.rules.constants import CONTENT_TYPE_DOCX


def _export(request: ExportRequest, page_format: PageFormat = PageFormat.LETTER):
    data = DocxExporter(page_format).export_word_document(request)
    return data, Document(io.BytesIO(data))


def _body_paragraphs(doc):
    return [p for p in doc.paragraphs if p.text.strip()]


def _has_page_break(paragraph) -> bool:
    return 'w:type="page"' in paragraph._p.xml


def _num_id(paragraph) -> int:
    return paragraph._p.pPr.numPr.numId.val


def _start_override(doc, num_id: int) -> list[str]:
    num = doc.part.numbering_part.element.num_having_numId(num_id)
    return num.xpath("./w:lvlOverride/w:startOverride/@w:val")


@pytest.fixture
def exporter():
    return DocxExporter()


class TestOutput:
    def test_zip_signature(self):
        data, _ = _export(ExportRequest(content="Hello"))
        assert data[:2] == b"PK"

    def test_export_result(self, exporter):
        result = exporter.export(ExportRequest(content="Hello"))
        assert result.format == ExportFormat.DOCX
        assert result.engine == "python-docx"
        assert result.content_type == CONTENT_TYPE_DOCX
        assert result.size == len(result.data)

    def test_title_property(self):
        _, doc = _export(ExportRequest(content="Hello", title="Lease"))
        assert doc.core_properties.title == "Lease"


class TestStructure:
    def test_uppercase_heading_scenario(self):
        style = DocumentStyle(
            font_family=FontFamily.CLASSIC,
            font_size=FontSize.MEDIUM,
            heading_case=HeadingCase.UPPERCASE,
        )
        _, doc = _export(ExportRequest(content="# Title\nBody text.", style=style))
        heading, body = _body_paragraphs(doc)

        assert heading.style.name == "Heading 1"
        assert heading.text == "TITLE"
        assert heading.runs[0].font.size == Pt(16)
        assert heading.runs[0].bold is True

        assert body.text == "Body text."
        assert body.runs[0].font.size == Pt(12)
        assert doc.styles["Normal"].font.name == "Georgia"

    def test_three_list_items(self):
        _, doc = _export(ExportRequest(content="- a\n- b\n- c"))
        items = [p for p in doc.paragraphs if p.style.name == "List Bullet"]
        assert [p.text for p in items] == ["a", "b", "c"]

    def test_ordered_list_style(self):
        _, doc = _export(ExportRequest(content="1. one\n2. two"))
        items = [p for p in doc.paragraphs if p.style.name == "List Number"]
        assert len(items) == 2

    def test_ordered_lists_restart_numbering(self):
        content = "1. one\n2. two\n\nBetween.\n\n1. again"
        _, doc = _export(ExportRequest(content=content))
        items = [p for p in doc.paragraphs if p.style.name == "List Number"]
        first, second, third = (_num_id(p) for p in items)

        assert first == second
        assert third != first
        assert _start_override(doc, first) == ["1"]
        assert _start_override(doc, third) == ["1"]

    def test_ordered_list_start_attribute(self):
        _, doc = _export(ExportRequest(content='<ol start="3"><li>c</li><li>d</li></ol>'))
        items = [p for p in doc.paragraphs if p.style.name == "List Number"]
        assert len({_num_id(p) for p in items}) == 1
        assert _start_override(doc, _num_id(items[0])) == ["3"]

    def test_list_line_spacing_twips(self):
        _, doc = _export(ExportRequest(content="- a"))
        (item,) = [p for p in doc.paragraphs if p.style.name == "List Bullet"]
        assert 'w:line="276"' in item._p.xml
        assert item.paragraph_format.line_spacing == pytest.approx(1.15)

    def test_hanging_indent(self):
        _, doc = _export(ExportRequest(content="- a"))
        (item,) = [p for p in doc.paragraphs if p.style.name == "List Bullet"]
        pf = item.paragraph_format
        assert pf.first_line_indent == -Inches(0.25)
        # 1.5rem = 24px = 18pt
        assert pf.left_indent == Pt(18)

    def test_document_order(self):
        markup = "<p>p1</p><h2>h1</h2><p>p2</p><h1>h2</h1><p>p3</p><h3>h3</h3>"
        _, doc = _export(ExportRequest(content=markup))
        assert [p.text for p in _body_paragraphs(doc)] == ["p1", "h1", "p2", "h2", "p3", "h3"]

    def test_inline_emphasis_runs(self):
        _, doc = _export(ExportRequest(content="Plain **bold** and *italic*"))
        (para,) = _body_paragraphs(doc)
        runs = {r.text: r for r in para.runs}
        assert runs["bold"].bold is True
        assert runs["italic"].italic is True
        assert not runs["Plain "].bold

    def test_line_break_in_paragraph(self):
        _, doc = _export(ExportRequest(content="<p>one<br>two</p>"))
        (para,) = _body_paragraphs(doc)
        assert "<w:br/>" in para._p.xml

    def test_standalone_page_input(self):
        from contract_renderer.markup.generator import render_standalone_markup

        page = render_standalone_markup(ExportRequest(content="# Head\n\nText"))
        _, doc = _export(ExportRequest(content=page))
        assert [p.text for p in _body_paragraphs(doc)] == ["Head", "Text"]


class TestPageSetup:
    def test_letter_standard_margins(self):
        _, doc = _export(ExportRequest(content="x"))
        section = doc.sections[0]
        assert section.left_margin == Inches(1)
        assert section.top_margin == Inches(1)
        assert abs(section.page_width.mm - 215.9) < 0.1
        assert abs(section.page_height.mm - 279.4) < 0.1

    def test_a4_wide(self):
        style = DocumentStyle(layout=Layout.WIDE)
        _, doc = _export(ExportRequest(content="x", style=style), PageFormat.A4)
        section = doc.sections[0]
        assert section.right_margin == Inches(0.5)
        assert abs(section.page_width.mm - 210) < 0.1

    def test_normal_style_spacing(self):
        _, doc = _export(ExportRequest(content="x"))
        pf = doc.styles["Normal"].paragraph_format
        assert pf.line_spacing == pytest.approx(1.15)
        # 1rem = 12pt
        assert pf.space_after == Pt(12)


class TestSignatures:
    def test_no_signatures_no_page_break(self):
        _, doc = _export(ExportRequest(content="x"))
        assert not any(_has_page_break(p) for p in doc.paragraphs)
        assert "Signatures" not in [p.text for p in doc.paragraphs]

    def test_page_break_before_signatures(self, signer):
        _, doc = _export(ExportRequest(content="Body", signatures=[signer]))
        texts = [p.text for p in doc.paragraphs]
        heading_index = texts.index("Signatures")
        assert _has_page_break(doc.paragraphs[heading_index - 1])
        assert texts.index("Body") < heading_index - 1

    def test_signer_lines(self, signer):
        _, doc = _export(ExportRequest(content="Body", signatures=[signer]))
        texts = [p.text for p in doc.paragraphs]
        assert "Signed by: Ada Lovelace" in texts
        assert "ada@example.com" in texts
        assert "Date: January 5, 2025" in texts

    def test_image_embedded(self, signer):
        _, doc = _export(ExportRequest(content="Body", signatures=[signer]))
        assert len(doc.inline_shapes) == 1

    def test_invalid_image_skipped(self, broken_signer):
        data, doc = _export(ExportRequest(content="Body", signatures=[broken_signer]))
        assert data[:2] == b"PK"
        assert len(doc.inline_shapes) == 0
        assert "Signed by: Charles Babbage" in [p.text for p in doc.paragraphs]

    def test_corrupt_png_skipped(self, caplog):
        corrupt = base64.b64encode(b"\x89PNG\r\n\x1a\ncorrupt-data-here").decode()
        record = SignatureRecord(
            signer_name="Eve", signature_image=corrupt, signed_at=datetime(2025, 1, 1)
        )
        data, doc = _export(ExportRequest(content="Body", signatures=[record]))
        assert data[:2] == b"PK"
        assert len(doc.inline_shapes) == 0
        assert "Skipping signature image" in caplog.text
