"""FastAPI application for the mentionkit local JSON API."""

import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .. import __version__
from ..compose.insert import insert_reference
from ..compose.matcher import match_candidates
from ..compose.trigger import detect_trigger
from ..core.extract import extract
from ..core.grammar import GrammarError
from ..core.positions import display_to_storage, storage_to_display
from ..format.convert import to_display, to_storage
from ..format.render import split_spans


class StorageBody(BaseModel):
    storage: str


class InjectBody(BaseModel):
    old_storage: str
    old_display: str | None = None
    new_display: str


class PositionBody(BaseModel):
    storage: str
    pos: int
    space: str = "storage"  # space `pos` is expressed in


class TriggerBody(BaseModel):
    storage: str
    caret: int


class InsertBody(BaseModel):
    storage: str
    caret: int
    id: str


def _candidate_dict(c: Any) -> dict[str, Any]:
    return {"id": c.id, "label": c.label, "avatar_url": c.avatar_url, "role": c.role}


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with config and roster
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="mentionkit API",
        description="Local JSON API for mention-aware note text",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    options = runtime.options

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "candidates": len(runtime.roster.candidates())}

    @app.get("/candidates")
    async def candidates(
        q: str = Query("", description="Partial label"),
        limit: int = Query(options.max_suggestions, description="Maximum results", ge=0, le=100),
        auth: None = Depends(verify_token),
    ) -> list[dict[str, Any]]:
        """Roster entries whose label contains q."""
        return [_candidate_dict(c) for c in match_candidates(runtime.roster.candidates(), q, limit)]

    @app.post("/display")
    async def display(body: StorageBody, auth: None = Depends(verify_token)) -> dict[str, Any]:
        return {"display": to_display(body.storage)}

    @app.post("/storage")
    async def storage(body: InjectBody, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Rebuild storage text from an edited display text."""
        old_display = body.old_display if body.old_display is not None else to_display(body.old_storage)
        new_storage = to_storage(body.old_storage, old_display, body.new_display)
        return {"storage": new_storage, "ids": [o.id for o in extract(new_storage)]}

    @app.post("/extract")
    async def extract_refs(body: StorageBody, auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        return [
            {"label": o.label, "id": o.id, "start": o.storage_start, "end": o.storage_end}
            for o in extract(body.storage)
        ]

    @app.post("/position")
    async def position(body: PositionBody, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Translate an offset between storage and display space."""
        if body.space == "storage":
            return {"display": storage_to_display(body.storage, body.pos)}
        if body.space == "display":
            return {"storage": display_to_storage(body.storage, body.pos)}
        raise HTTPException(status_code=422, detail=f"Unknown space {body.space}")

    @app.post("/trigger")
    async def trigger(body: TriggerBody, auth: None = Depends(verify_token)) -> dict[str, Any]:
        state = detect_trigger(
            to_display(body.storage),
            body.caret,
            body.storage,
            unicode_words=options.unicode_words,
        )
        suggestions = []
        if state.active:
            suggestions = match_candidates(
                runtime.roster.candidates(), state.partial_label, options.max_suggestions
            )
        return {
            "active": state.active,
            "partial_label": state.partial_label,
            "trigger_storage_start": state.trigger_storage_start,
            "trigger_display_start": state.trigger_display_start,
            "suggestions": [_candidate_dict(c) for c in suggestions],
        }

    @app.post("/insert")
    async def insert(body: InsertBody, auth: None = Depends(verify_token)) -> dict[str, Any]:
        candidate = runtime.roster.get(body.id)
        if candidate is None:
            raise HTTPException(status_code=404, detail=f"Candidate {body.id} not found")
        try:
            result = insert_reference(
                body.storage, body.caret, candidate, unicode_words=options.unicode_words
            )
        except GrammarError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        return {
            "storage": result.storage_text,
            "caret": result.display_caret,
            "ids": [o.id for o in extract(result.storage_text)],
        }

    @app.post("/render")
    async def render(body: StorageBody, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Spans and HTML for read-only display."""
        spans = [
            {"kind": s.kind, "text": s.text, "label": s.label, "id": s.id}
            for s in split_spans(body.storage)
        ]
        return {"spans": spans, "html": runtime.renderer.render(body.storage)}

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
