# -*- coding: utf-8 -*-
"""
Nutrition coaching API

Assessment intake, AI-drafted review cards, client delivery and retargeting.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .app_db import init_app_db
from .assessments.api import functions as assessment_functions
from .assessments.api import router as assessments_router
from .cards.api import functions as card_functions
from .cards.api import router as review_router
from .clients.api import router as clients_router
from .config import configure_logging, settings
from .envelope import install_error_handlers
from .grocery.api import functions as grocery_functions
from .messaging.api import functions as messaging_functions
from .messaging.api import router as messaging_router
from .push.api import functions as push_functions
from .push.api import router as push_router
from .workflow.api import functions as workflow_functions
from .workflow.api import router as workflow_router

configure_logging()

app = FastAPI(
    title="Nutricoach",
    description="Assessment intake, card review and client messaging for nutrition coaching",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)


@app.on_event("startup")
def _startup_init_db() -> None:
    init_app_db(settings.app_db_path)


# Ensure the app DB exists even when lifespan events are not triggered (e.g. some test clients).
init_app_db(settings.app_db_path)


# Resources
app.include_router(clients_router)
app.include_router(assessments_router)
app.include_router(review_router)
app.include_router(messaging_router)
app.include_router(push_router)
app.include_router(workflow_router)

# Function-style endpoints (/api/functions/*)
app.include_router(assessment_functions)
app.include_router(card_functions)
app.include_router(messaging_functions)
app.include_router(grocery_functions)
app.include_router(push_functions)
app.include_router(workflow_functions)


@app.get("/api/health")
def health_check():
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    host = os.environ.get("NUTRICOACH_HOST") or os.environ.get("HOST") or "127.0.0.1"
    port_raw = os.environ.get("NUTRICOACH_PORT") or os.environ.get("PORT") or "8000"
    try:
        port = int(port_raw)
    except ValueError:
        port = 8000
    uvicorn.run("nutricoach.api:app", host=host, port=port, reload=False)
