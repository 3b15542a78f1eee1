"""Port: Document source — looks up stored documents for the print route."""

from abc import ABC, abstractmethod
from typing import Optional

from contract_renderer.domain.models.document import ExportRequest


class DocumentSourcePort(ABC):
    """Contract for loading a document owned by a given user."""

    @abstractmethod
    def get(self, document_id: str, user_id: str) -> Optional[ExportRequest]:
        """Return the document, or ``None`` if it does not exist or is not owned by *user_id*."""
        ...
