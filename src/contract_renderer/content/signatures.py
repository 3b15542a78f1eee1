"""Signature record helpers shared by every renderer."""

from __future__ import annotations

import base64
import binascii
import logging
from datetime import datetime
from typing import Optional

from contract_renderer.domain.models.document import SignatureRecord
from contract_renderer.rules.constants import (
    RASTER_MAGIC,
    SIGNATURE_IMAGE_MAX_HEIGHT_PX,
    SIGNATURE_IMAGE_MAX_WIDTH_PX,
)

logger = logging.getLogger(__name__)

_MONTHS = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)  # fmt: skip


def split_data_uri(data: str) -> tuple[Optional[str], str]:
    """Split ``data:image/png;base64,XXXX`` into (mime, payload)."""
    if data.startswith("data:") and "," in data:
        header, payload = data.split(",", 1)
        mime = header[5:].split(";", 1)[0] or None
        return mime, payload
    return None, data


def sniff_raster_format(raw: bytes) -> Optional[str]:
    """Return ``png``, ``jpeg``, ``gif`` or ``bmp`` when *raw* starts with a known header."""
    for name, magic in RASTER_MAGIC.items():
        if raw.startswith(magic):
            return name
    return None


def decode_signature_image(data: Optional[str]) -> Optional[bytes]:
    """Decode a base64 signature image, or return ``None`` if unusable.

    Invalid images never abort an export; they are logged and skipped.
    """
    if not data:
        return None

    _, payload = split_data_uri(data.strip())
    try:
        raw = base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError):
        logger.warning("Signature image is not valid base64; skipping")
        return None

    if sniff_raster_format(raw) is None:
        logger.warning("Signature image has no recognised raster header; skipping")
        return None
    return raw


def format_signed_at(value: datetime) -> str:
    """Long US date, e.g. ``January 5, 2025``."""
    return f"{_MONTHS[value.month - 1]} {value.day}, {value.year}"


def signature_lines(signature: SignatureRecord) -> tuple[str, str, str]:
    """("Signed by: …", email, "Date: …") for one signer."""
    return (
        f"Signed by: {signature.signer_name}",
        signature.signer_email,
        f"Date: {format_signed_at(signature.signed_at)}",
    )


def fit_image_box(
    width: float,
    height: float,
    max_width: float = SIGNATURE_IMAGE_MAX_WIDTH_PX,
    max_height: float = SIGNATURE_IMAGE_MAX_HEIGHT_PX,
) -> tuple[float, float]:
    """Scale (width, height) down to fit the signature box, keeping aspect ratio."""
    if width <= 0 or height <= 0:
        return float(max_width), float(max_height)
    ratio = min(max_width / width, max_height / height, 1.0)
    return width * ratio, height * ratio
