"""Print route: serves the standalone page the PDF exporter prints.

``GET /documents/{document_id}/print`` identifies the caller from the
session cookie first and the ``userId`` query parameter second.  Unknown
callers and documents they do not own both get a plain 404.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse

from contract_renderer.config.models import ExportSettings
from contract_renderer.domain.ports.document_source import DocumentSourcePort
from contract_renderer.markup.generator import render_empty_document_page, render_standalone_markup

logger = logging.getLogger(__name__)

# Maps a session token to a user id, or None when the token is not valid
SessionResolver = Callable[[str], Optional[str]]


def create_print_app(
    source: DocumentSourcePort,
    session_resolver: Optional[SessionResolver] = None,
    settings: Optional[ExportSettings] = None,
) -> FastAPI:
    settings = settings or ExportSettings()
    cookie_name = settings.session_cookie_name

    app = FastAPI(title="Contract Renderer print route", docs_url=None, redoc_url=None)
    app.state.source = source

    def _identify(request: Request) -> Optional[str]:
        token = request.cookies.get(cookie_name)
        if token and session_resolver is not None:
            user_id = session_resolver(token)
            if user_id:
                return user_id
            logger.debug("Session cookie did not resolve to a user")
        return request.query_params.get("userId") or None

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    # The template's {document_id} doubles as the FastAPI path parameter
    @app.get(settings.print_route_template, response_class=HTMLResponse)
    def print_document(document_id: str, request: Request):
        user_id = _identify(request)
        if not user_id:
            raise HTTPException(status_code=404, detail="Not found")

        document = source.get(document_id, user_id)
        if document is None:
            raise HTTPException(status_code=404, detail="Not found")

        if not document.content.strip():
            logger.info("Document %s has no content; serving placeholder", document_id)
            return HTMLResponse(render_empty_document_page(document_id, document.style))

        return HTMLResponse(render_standalone_markup(document))

    return app
