"""Tests for the paged-preview geometry."""

from __future__ import annotations

import pytest

from contract_renderer.domain.models.enums import Layout, PageFormat
from contract_renderer.domain.models.style import DocumentStyle
from contract_renderer.preview.pagination import (
    PageGeometry,
    calculate_page_breaks,
    page_for_position,
)


class TestGeometry:
    def test_letter_standard(self):
        geometry = PageGeometry.for_style(DocumentStyle())
        assert geometry.width_px == pytest.approx(816.0)
        assert geometry.height_px == pytest.approx(1056.0)
        assert geometry.margin_px == pytest.approx(96.0)
        assert geometry.content_width_px == pytest.approx(624.0)

    def test_wide_layout(self):
        geometry = PageGeometry.for_style(DocumentStyle(layout=Layout.WIDE))
        assert geometry.width_px == pytest.approx(816.0 * 1.2)
        assert geometry.margin_px == pytest.approx(48.0)

    def test_a4(self):
        geometry = PageGeometry.for_style(DocumentStyle(), PageFormat.A4)
        assert geometry.height_px == pytest.approx(297 / 25.4 * 96)

    def test_fit_scale(self):
        geometry = PageGeometry(width_px=800, height_px=1000, margin_px=50)
        assert geometry.fit_scale(400) == pytest.approx(0.5)
        assert geometry.fit_scale(10) == pytest.approx(0.1)

    def test_container_height(self):
        geometry = PageGeometry(width_px=800, height_px=1000, margin_px=50)
        assert geometry.container_height(300) == 400
        assert geometry.container_height(-5) == 100

    def test_page_count(self):
        geometry = PageGeometry(width_px=800, height_px=1000, margin_px=100)
        assert geometry.estimated_page_count(0) == 1
        assert geometry.estimated_page_count(800) == 1
        assert geometry.estimated_page_count(801) == 2


class TestPageBreaks:
    def test_slices(self):
        pages = calculate_page_breaks(250, 100)
        assert [(p.start_y, p.end_y) for p in pages] == [(0, 100), (100, 200), (200, 250)]
        assert [p.page_number for p in pages] == [1, 2, 3]
        assert pages[-1].height == 50

    def test_empty(self):
        assert calculate_page_breaks(0, 100) == []

    def test_invalid_height(self):
        with pytest.raises(ValueError):
            calculate_page_breaks(100, 0)

    def test_page_for_position(self):
        pages = calculate_page_breaks(250, 100)
        assert page_for_position(0, pages) == 1
        assert page_for_position(150, pages) == 2
        assert page_for_position(999, pages) == 3
        assert page_for_position(10, []) == 1
