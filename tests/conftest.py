"""Shared fixtures for the contract renderer test suite."""

from __future__ import annotations

import os
from datetime import datetime, timezone

import pytest

from contract_renderer.domain.models.document import SignatureRecord

# 1x1 RGBA PNG
PNG_1PX_B64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
PNG_DATA_URI = "data:image/png;base64," + PNG_1PX_B64
# Valid base64, but not an image
NOT_AN_IMAGE_URI = "data:image/png;base64,aGVsbG8gd29ybGQ="


@pytest.fixture(scope="session")
def qapp():
    """Create a QApplication for widget tests."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

    from PySide6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def signer():
    return SignatureRecord(
        signer_name="Ada Lovelace",
        signer_email="ada@example.com",
        signature_image=PNG_DATA_URI,
        signed_at=datetime(2025, 1, 5, 14, 30, tzinfo=timezone.utc),
    )


@pytest.fixture
def broken_signer():
    return SignatureRecord(
        signer_name="Charles Babbage",
        signer_email="charles@example.com",
        signature_image=NOT_AN_IMAGE_URI,
        signed_at=datetime(2025, 2, 1, tzinfo=timezone.utc),
    )
