"""In-memory document store behind the print route."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from contract_renderer.domain.errors import ConfigurationError
from contract_renderer.domain.models.document import ExportRequest, SignatureRecord
from contract_renderer.domain.models.style import DocumentStyle
from contract_renderer.domain.ports.document_source import DocumentSourcePort

logger = logging.getLogger(__name__)


class InMemoryDocumentSource(DocumentSourcePort):
    """Documents keyed by id, each owned by one user."""

    def __init__(self) -> None:
        self._documents: dict[str, tuple[str, ExportRequest]] = {}

    def __len__(self) -> int:
        return len(self._documents)

    def add(self, document_id: str, owner_id: str, request: ExportRequest) -> None:
        self._documents[document_id] = (owner_id, request)

    def get(self, document_id: str, user_id: str) -> Optional[ExportRequest]:
        entry = self._documents.get(document_id)
        if entry is None:
            return None
        owner_id, request = entry
        if owner_id != user_id:
            return None
        return request

    @classmethod
    def from_directory(cls, directory: Path) -> "InMemoryDocumentSource":
        """Load every ``*.json`` file in *directory*.

        Each file holds ``id``, ``ownerId``, ``content`` and optionally
        ``style``, ``signatures`` and ``title``.  The file stem is used when
        ``id`` is missing.
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise ConfigurationError(f"Document directory not found: {directory}")

        source = cls()
        for path in sorted(directory.glob("*.json")):
            data = json.loads(path.read_text(encoding="utf-8"))
            owner_id = data.get("ownerId") or data.get("owner_id")
            if not owner_id:
                raise ConfigurationError(f"{path.name}: missing ownerId")
            request = ExportRequest(
                content=data.get("content") or "",
                style=DocumentStyle.model_validate(data.get("style") or {}),
                signatures=[SignatureRecord.model_validate(s) for s in data.get("signatures", [])],
                title=data.get("title"),
            )
            source.add(str(data.get("id") or path.stem), owner_id, request)
        logger.info("Loaded %d document(s) from %s", len(source), directory)
        return source
