"""Tests for signature record helpers."""

from __future__ import annotations

import base64
from datetime import datetime

import pytest
from conftest import NOT_AN_IMAGE_URI, PNG_1PX_B64, PNG_DATA_URI

from contract_renderer.content.signatures import (
    decode_signature_image,
    fit_image_box,
    format_signed_at,
    signature_lines,
    sniff_raster_format,
    split_data_uri,
)
from contract_renderer.domain.models.document import SignatureRecord


class TestDecodeSignatureImage:
    def test_data_uri(self):
        raw = decode_signature_image(PNG_DATA_URI)
        assert raw is not None
        assert sniff_raster_format(raw) == "png"

    def test_bare_base64(self):
        assert decode_signature_image(PNG_1PX_B64) == base64.b64decode(PNG_1PX_B64)

    def test_not_an_image(self, caplog):
        assert decode_signature_image(NOT_AN_IMAGE_URI) is None
        assert "raster header" in caplog.text

    def test_truncated_base64(self):
        assert decode_signature_image("data:image/png;base64,iVBORw0KGgo=x") is None

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing(self, value):
        assert decode_signature_image(value) is None

    def test_jpeg_and_gif_headers(self):
        jpeg = base64.b64encode(b"\xff\xd8\xff\xe0rest").decode()
        gif = base64.b64encode(b"GIF89a....").decode()
        assert decode_signature_image(jpeg) is not None
        assert decode_signature_image(gif) is not None

    def test_bmp_header(self):
        raw = b"BM" + b"\x00" * 52
        assert sniff_raster_format(raw) == "bmp"
        assert decode_signature_image(base64.b64encode(raw).decode()) == raw


class TestFormatting:
    def test_split_data_uri(self):
        assert split_data_uri("data:image/gif;base64,AAAA") == ("image/gif", "AAAA")
        assert split_data_uri("AAAA") == (None, "AAAA")

    def test_signed_at(self):
        assert format_signed_at(datetime(2025, 1, 5)) == "January 5, 2025"
        assert format_signed_at(datetime(2024, 12, 31, 23, 59)) == "December 31, 2024"

    def test_lines(self, signer):
        assert signature_lines(signer) == (
            "Signed by: Ada Lovelace",
            "ada@example.com",
            "Date: January 5, 2025",
        )

    def test_camel_case_record(self):
        record = SignatureRecord.model_validate(
            {
                "signerName": "Grace Hopper",
                "signerEmail": "grace@example.com",
                "signatureData": PNG_DATA_URI,
                "createdAt": "2025-03-09T10:00:00Z",
            }
        )
        assert record.signer_name == "Grace Hopper"
        assert record.signature_image == PNG_DATA_URI
        assert format_signed_at(record.signed_at) == "March 9, 2025"


class TestFitImageBox:
    def test_scales_down_keeping_ratio(self):
        assert fit_image_box(240, 40) == (120.0, 20.0)
        assert fit_image_box(100, 80) == (50.0, 40.0)

    def test_small_image_unchanged(self):
        assert fit_image_box(60, 20) == (60, 20)

    def test_degenerate_size(self):
        assert fit_image_box(0, 0) == (120.0, 40.0)
