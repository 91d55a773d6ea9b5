"""Export service FastAPI entry point.

Start with:
    PYTHONPATH=src uvicorn catalog_export.service_app:app --host 0.0.0.0 --port 8053

Endpoints:
- GET  /health                       - liveness
- GET  /communities                  - community listing (``?roots_only=true``)
- POST /exports/communities/{name}   - export a community (and subcommunities)
- POST /exports/domains/{name}       - export a single domain

Export endpoints accept an optional JSON body of export option overrides
(``{"method": "rest", "include_responsibilities": true}``) and return the
export document. With ``?persist=true`` the document is also written to
the configured output directory and the file path is returned alongside.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from fastapi import Body, FastAPI, HTTPException, Request

from . import _bootstrap as bs
from .catalog.types import ExportDocument, NodeKind
from .client.base import CatalogClient
from .errors import NotFoundError, TransportError
from .exporter import ExportAssembler, ExportOptions
from .writer import ExportWriter

logger = logging.getLogger(__name__)


@dataclass
class ServiceState:
    client: CatalogClient
    assembler: ExportAssembler
    options: ExportOptions
    writer: ExportWriter


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the export stack once per process."""
    logger.info("Starting export service...")

    config, _config_path = bs.load_config()
    client = bs.build_client(config)
    app.state.export = ServiceState(
        client=client,
        assembler=bs.build_assembler(config, client),
        options=bs.build_options(config),
        writer=bs.build_writer(config),
    )

    logger.info("Export service started")
    yield

    await client.close()
    logger.info("Export service stopped")


def create_app(state: ServiceState | None = None) -> FastAPI:
    """
    Create the app.

    With an explicit *state* the lifespan is skipped, so tests can inject a
    stub catalog client.
    """
    app = FastAPI(
        title="Catalog Export",
        description="Exports catalog communities and domains as JSON documents.",
        version="0.1.0",
        lifespan=None if state is not None else lifespan,
        openapi_tags=[
            {"name": "Exports", "description": "Community and domain exports"},
            {"name": "Catalog", "description": "Catalog browsing"},
            {"name": "Health", "description": "Liveness"},
        ],
    )
    if state is not None:
        app.state.export = state

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/communities", tags=["Catalog"])
    async def communities(request: Request, roots_only: bool = False) -> dict[str, Any]:
        s: ServiceState = request.app.state.export
        try:
            nodes = await s.client.all_nodes(NodeKind.COMMUNITY)
        except TransportError as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        if roots_only:
            nodes = [n for n in nodes if n.is_root]
        return {
            "communities": [
                {
                    "id": n.id,
                    "name": n.name,
                    "description": n.description,
                    "parent": n.parent.to_dict() if n.parent else None,
                }
                for n in nodes
            ],
            "count": len(nodes),
        }

    @app.post("/exports/communities/{name}", tags=["Exports"])
    async def export_community(
        request: Request,
        name: str,
        persist: bool = False,
        overrides: dict[str, Any] | None = Body(default=None),
    ) -> dict[str, Any]:
        s: ServiceState = request.app.state.export
        options = _options(s, overrides)
        try:
            document = await s.assembler.export_community(name, options)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except TransportError as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        return await _respond(s, document, persist)

    @app.post("/exports/domains/{name}", tags=["Exports"])
    async def export_domain(
        request: Request,
        name: str,
        persist: bool = False,
        overrides: dict[str, Any] | None = Body(default=None),
    ) -> dict[str, Any]:
        s: ServiceState = request.app.state.export
        options = _options(s, overrides)
        try:
            document = await s.assembler.export_domain(name, options)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except TransportError as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
        return await _respond(s, document, persist)

    return app


def _options(state: ServiceState, overrides: dict[str, Any] | None) -> ExportOptions:
    if not overrides:
        return state.options
    try:
        return state.options.updated(overrides)
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


async def _respond(state: ServiceState, document: ExportDocument, persist: bool) -> dict[str, Any]:
    response: dict[str, Any] = {"document": document.to_dict()}
    if persist:
        path = await asyncio.to_thread(state.writer.write, document)
        response["path"] = str(path)
    return response


app = create_app()
