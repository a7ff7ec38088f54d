"""FastAPI application exposing desahogo moderation over HTTP.

Provides REST API endpoints wrapping the desahogo package for:
- Content moderation verdicts and per-user history
- Runtime moderation configuration
- Standalone crisis analysis, alert records, and support lines

The moderator is built once per application and kept on ``app.state``.
``DESAHOGO_CONFIG`` and ``DESAHOGO_LEXICON`` may point at YAML files.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

# Ensure the desahogo package is importable by adding the project root to sys.path.
_project_root = str(Path(__file__).resolve().parents[3])
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from desahogo import __version__
from desahogo.moderation.config import load_config
from desahogo.moderation.lexicon import load_lexicon
from desahogo.moderation.moderator import ContentModerator
from web.backend.app.routers import crisis, moderation


def build_moderator() -> ContentModerator:
    """Create a moderator from the optional config and lexicon files."""
    config_path = os.environ.get("DESAHOGO_CONFIG")
    lexicon_path = os.environ.get("DESAHOGO_LEXICON")
    return ContentModerator(
        config=load_config(config_path) if config_path else None,
        lexicon=load_lexicon(lexicon_path) if lexicon_path else None,
    )


def create_app(moderator: ContentModerator | None = None) -> FastAPI:
    app = FastAPI(
        title="desahogo API",
        description=(
            "Moderation and crisis detection for an anonymous mental-health "
            "community."
        ),
        version=__version__,
    )

    app.state.moderator = moderator or build_moderator()

    # -----------------------------------------------------------------------
    # CORS middleware (allow all origins for development)
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(moderation.router)
    app.include_router(crisis.router)

    @app.get("/", tags=["meta"])
    async def root():
        """Return basic API information."""
        return {
            "name": "desahogo API",
            "version": __version__,
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    @app.get("/health", tags=["meta"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
