"""Print route — the chrome-free page the PDF exporter prints."""

from contract_renderer.infrastructure.print_route.app import create_print_app
from contract_renderer.infrastructure.print_route.memory_source import InMemoryDocumentSource

__all__ = ["InMemoryDocumentSource", "create_print_app"]
