"""Document-level models: content, signatures, export requests and results.

This module belongs to the Domain layer. It only depends on:
- Python stdlib (datetime, typing)
- Pydantic (pragmatic exception for validation)
- Domain enums and the style model
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from contract_renderer.domain.models.enums import ContentKind, ExportFormat, PageFormat
from contract_renderer.domain.models.style import DocumentStyle


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


class Content(BaseModel):
    """Tagged content blob: lightweight markup text or serialized markup."""

    model_config = ConfigDict(frozen=True)

    kind: ContentKind
    text: str = ""


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------


class SignatureRecord(BaseModel):
    """One signature produced by the external signing collaborator."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    signer_name: str = Field("", validation_alias=AliasChoices("signer_name", "signerName"))
    signer_email: str = Field("", validation_alias=AliasChoices("signer_email", "signerEmail"))
    signature_image: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("signature_image", "signatureImage", "signatureData"),
        description="Base64 raster, optionally as a data URI",
    )
    signed_at: datetime = Field(
        ..., validation_alias=AliasChoices("signed_at", "signedAt", "createdAt")
    )


# ---------------------------------------------------------------------------
# Export request / result
# ---------------------------------------------------------------------------


class ExportRequest(BaseModel):
    """Everything a renderer needs: content, style and signatures."""

    model_config = ConfigDict(frozen=True)

    content: str = ""
    style: DocumentStyle = Field(default_factory=DocumentStyle)
    signatures: list[SignatureRecord] = Field(default_factory=list)
    title: Optional[str] = None


class PageMargin(BaseModel):
    """PDF page margins as CSS lengths."""

    model_config = ConfigDict(frozen=True)

    top: str = "0.5in"
    right: str = "0.5in"
    bottom: str = "0.5in"
    left: str = "0.5in"


class PdfOptions(BaseModel):
    """Options for the browser-driven PDF export."""

    model_config = ConfigDict(frozen=True)

    format: PageFormat = PageFormat.LETTER
    margin: PageMargin = Field(default_factory=PageMargin)
    user_id: Optional[str] = Field(
        None, description="Identity passed to the print route as ?userId="
    )


class PdfJob(BaseModel):
    """Locates a stored document on the print route."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    credential: Optional[str] = None
    options: PdfOptions = Field(default_factory=PdfOptions)


class ExportResult(BaseModel):
    """Bytes of a finished export plus their content type."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    content_type: str
    format: ExportFormat
    engine: str = Field(..., description="Implementation that produced the bytes")

    @property
    def size(self) -> int:
        return len(self.data)
