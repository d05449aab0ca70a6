"""
FastAPI app entry point aggregating per-domain routers under parnaso/routes.
Keep as `uvicorn parnaso.api:app`.
"""
from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .db import ensure_schema
from .logs import ensure_log_schema, LogContext
from .services.config_svc import ensure_default_config

logging.basicConfig(
    level=os.environ.get("PARNASO_LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="parnaso-api", version="0.1.0")

_origins = os.environ.get("PARNASO_CORS_ORIGINS")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _origins.split(",") if o.strip()] if _origins else [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def on_validation_error(request: Request, exc: RequestValidationError):
    # body and query validation share the 400 of service-level ValueError
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.on_event("startup")
def on_startup():
    ensure_log_schema()
    try:
        ensure_schema()
    except Exception as e:
        LogContext("STARTUP", "system").write("ERROR", f"ensure_schema_failed: {e}")
    ensure_default_config()


# Include routers (split by business domain)
from .routes import base as base_routes
from .routes import auth as auth_routes
from .routes import sessions as sessions_routes
from .routes import projects as projects_routes
from .routes import settings as settings_routes
from .routes import admin as admin_routes
from .routes import maintenance as maintenance_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(auth_routes.router)
app.include_router(sessions_routes.router)
app.include_router(projects_routes.router)
app.include_router(settings_routes.router)
app.include_router(admin_routes.router)
app.include_router(maintenance_routes.router)
app.include_router(logs_routes.router)
