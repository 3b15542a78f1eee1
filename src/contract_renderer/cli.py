"""CLI interface for the contract renderer."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from contract_renderer.config import get_settings, load_settings
from contract_renderer.config.models import ExportSettings
from contract_renderer.domain.errors import ContractRendererError
from contract_renderer.domain.models.document import (
    ExportRequest,
    ExportResult,
    PdfJob,
    PdfOptions,
    SignatureRecord,
)
from contract_renderer.domain.models.enums import ExportFormat, PageFormat
from contract_renderer.domain.models.style import PRESETS, DocumentStyle, get_preset
from contract_renderer.styling.resolver import resolve_typography

app = typer.Typer(
    name="contract-render",
    help="📄 Render contracts to PDF, Word (.docx) and standalone HTML",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug logging")
    ] = False,
) -> None:
    """Document rendering and multi-format export."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=verbose)],
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(message: str) -> None:
    console.print(Panel(f"[bold red]❌ {message}[/]", title="Export failed", border_style="red"))
    raise typer.Exit(code=1)


def _read_text(path: Path) -> str:
    if not path.exists():
        _fail(f"File not found: {path}")
    return path.read_text(encoding="utf-8")


def _load_style(style: Optional[Path], preset: Optional[str]) -> DocumentStyle:
    if style and preset:
        _fail("Use either --style or --preset, not both")
    if preset:
        try:
            return get_preset(preset)
        except KeyError as exc:
            _fail(f"{exc.args[0]} (available: {', '.join(PRESETS)})")
    if style:
        try:
            return DocumentStyle.model_validate(json.loads(_read_text(style)))
        except (ValueError, ValidationError) as exc:
            _fail(f"Invalid style file {style}: {exc}")
    return DocumentStyle()


def _load_signatures(path: Optional[Path]) -> list[SignatureRecord]:
    if path is None:
        return []
    try:
        raw = json.loads(_read_text(path))
        return [SignatureRecord.model_validate(item) for item in raw]
    except (ValueError, TypeError, ValidationError) as exc:
        _fail(f"Invalid signatures file {path}: {exc}")
    return []


def _settings(settings_path: Optional[Path], base_url: Optional[str]) -> ExportSettings:
    settings = load_settings(settings_path) if settings_path else get_settings()
    if base_url:
        settings = settings.model_copy(update={"base_url": base_url})
    return settings


# ---------------------------------------------------------------------------
# contract-render export
# ---------------------------------------------------------------------------


@app.command()
def export(
    source: Annotated[Path, typer.Argument(help="Markdown or HTML content file")],
    fmt: Annotated[
        ExportFormat, typer.Option("--format", "-f", help="Output format")
    ] = ExportFormat.DOCX,
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Output file")
    ] = None,
    style: Annotated[
        Optional[Path], typer.Option("--style", "-s", help="Style JSON file")
    ] = None,
    preset: Annotated[
        Optional[str], typer.Option("--preset", "-p", help="Named style preset")
    ] = None,
    signatures: Annotated[
        Optional[Path], typer.Option("--signatures", help="Signatures JSON file (list)")
    ] = None,
    title: Annotated[Optional[str], typer.Option("--title", "-t", help="Document title")] = None,
    document_id: Annotated[
        Optional[str],
        typer.Option("--document-id", help="Print this stored document with the browser engine"),
    ] = None,
    base_url: Annotated[
        Optional[str], typer.Option("--base-url", help="Print server base URL")
    ] = None,
    credential: Annotated[
        Optional[str], typer.Option("--credential", help="Session token for the print route")
    ] = None,
    user_id: Annotated[
        Optional[str], typer.Option("--user-id", help="Identity sent as ?userId=")
    ] = None,
    page_format: Annotated[
        Optional[PageFormat], typer.Option("--page-format", help="PDF page size")
    ] = None,
    settings_path: Annotated[
        Optional[Path], typer.Option("--settings", help="Settings JSON file")
    ] = None,
) -> None:
    """Export a document to .docx or PDF."""
    from contract_renderer.bootstrap import Container

    request = ExportRequest(
        content=_read_text(source),
        style=_load_style(style, preset),
        signatures=_load_signatures(signatures),
        title=title or source.stem,
    )
    settings = _settings(settings_path, base_url)
    if page_format is not None:
        settings = settings.model_copy(update={"page_format": page_format})
    container = Container(settings=settings)
    out_path = output or source.with_suffix(f".{fmt.value}")

    async def _run() -> ExportResult:
        job = None
        if document_id:
            job = PdfJob(
                document_id=document_id,
                credential=credential,
                options=PdfOptions(
                    format=settings.page_format,
                    margin=settings.default_margin,
                    user_id=user_id,
                ),
            )
        try:
            return await container.export_service.export(fmt, request, job)
        finally:
            await container.shutdown()

    try:
        result = asyncio.run(_run())
    except ContractRendererError as exc:
        _fail(str(exc))

    out_path.write_bytes(result.data)
    console.print(
        Panel(
            f"✅ Exported: [bold green]{out_path}[/]\n"
            f"   engine: [cyan]{result.engine}[/]  size: {result.size:,} bytes",
            title="Contract Renderer",
            border_style="green",
        )
    )


# ---------------------------------------------------------------------------
# contract-render html
# ---------------------------------------------------------------------------


@app.command()
def html(
    source: Annotated[Path, typer.Argument(help="Markdown or HTML content file")],
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Output .html file")
    ] = None,
    style: Annotated[Optional[Path], typer.Option("--style", "-s", help="Style JSON file")] = None,
    preset: Annotated[Optional[str], typer.Option("--preset", "-p", help="Named preset")] = None,
    signatures: Annotated[
        Optional[Path], typer.Option("--signatures", help="Signatures JSON file (list)")
    ] = None,
) -> None:
    """Write the standalone print page for a document."""
    from contract_renderer.markup.generator import render_standalone_markup

    request = ExportRequest(
        content=_read_text(source),
        style=_load_style(style, preset),
        signatures=_load_signatures(signatures),
        title=source.stem,
    )
    try:
        markup = render_standalone_markup(request)
    except ContractRendererError as exc:
        _fail(str(exc))

    out_path = output or source.with_suffix(".html")
    out_path.write_text(markup, encoding="utf-8")
    console.print(f"[green]✅ Standalone page written:[/] {out_path}")


# ---------------------------------------------------------------------------
# contract-render presets
# ---------------------------------------------------------------------------


@app.command()
def presets() -> None:
    """List the built-in style presets and their resolved typography."""
    table = Table(title="🎨 Style presets", show_header=True, border_style="blue")
    table.add_column("Preset", style="cyan", no_wrap=True)
    table.add_column("Font")
    table.add_column("Size", justify="right")
    table.add_column("Line height", justify="right")
    table.add_column("Spacing (rem)", justify="right")
    table.add_column("Headings")
    table.add_column("Margin (mm)", justify="right")

    for name, style in PRESETS.items():
        typo = resolve_typography(style)
        headings = ("bold" if typo.heading_bold else "normal") + (
            ", uppercase" if typo.heading_uppercase else ""
        )
        table.add_row(
            name,
            typo.font_word_processor_name,
            f"{typo.point_size} pt",
            f"{typo.line_height_multiplier:g}",
            f"{typo.paragraph_spacing_rem:g}",
            headings,
            f"{typo.page_margin_mm:g}",
        )

    console.print(table)


# ---------------------------------------------------------------------------
# contract-render serve
# ---------------------------------------------------------------------------


@app.command()
def serve(
    documents: Annotated[
        Path, typer.Argument(help="Directory of document JSON files")
    ],
    host: Annotated[str, typer.Option("--host", help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", help="Bind port")] = 3000,
    settings_path: Annotated[
        Optional[Path], typer.Option("--settings", help="Settings JSON file")
    ] = None,
) -> None:
    """Serve the print route over a directory of documents."""
    import uvicorn

    from contract_renderer.bootstrap import Container
    from contract_renderer.infrastructure.print_route.memory_source import (
        InMemoryDocumentSource,
    )

    try:
        source = InMemoryDocumentSource.from_directory(documents)
    except (ContractRendererError, ValueError, ValidationError) as exc:
        _fail(str(exc))

    settings = _settings(settings_path, None)
    console.print(
        f"[bold]Print route[/] on http://{host}:{port}"
        f"{settings.print_route_template} ([cyan]{len(source)}[/] document(s))"
    )
    container = Container(settings=settings)
    uvicorn.run(container.print_app(source), host=host, port=port)


# ---------------------------------------------------------------------------
# contract-render preview
# ---------------------------------------------------------------------------


@app.command()
def preview(
    source: Annotated[Path, typer.Argument(help="Markdown or HTML content file")],
    style: Annotated[Optional[Path], typer.Option("--style", "-s", help="Style JSON file")] = None,
    preset: Annotated[Optional[str], typer.Option("--preset", "-p", help="Named preset")] = None,
    signatures: Annotated[
        Optional[Path], typer.Option("--signatures", help="Signatures JSON file (list)")
    ] = None,
    page_format: Annotated[
        PageFormat, typer.Option("--page-format", help="Page size of the paged preview")
    ] = PageFormat.LETTER,
) -> None:
    """Open the document in the preview window."""
    from contract_renderer.gui.app import run_preview

    request = ExportRequest(
        content=_read_text(source),
        style=_load_style(style, preset),
        signatures=_load_signatures(signatures),
        title=source.stem,
    )
    raise typer.Exit(code=run_preview(request, page_format))


if __name__ == "__main__":
    app()
