#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
MacroTpl — FastAPI Application
==============================
Entry point.  Start with:
    uvicorn macrotpl.main:app --reload
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from macrotpl.core.config import get_settings
from macrotpl.routes import render


# -----------------------------------------------------------------------------

def create_app() -> FastAPI:
    settings = get_settings()

    if settings.debug:
        logging.basicConfig(level=logging.DEBUG)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Text templates with cross-template macro imports",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # ── CORS ──────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ───────────────────────────────────────────────────────────
    API = "/api/v1"
    app.include_router(render.router, prefix=API)

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/api/docs",
        }

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()


# -----------------------------------------------------------------------------
