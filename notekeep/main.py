import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.openapi.utils import get_openapi

from notekeep.shared.db import Base, engine
from notekeep.shared.logs import configure_logging
from notekeep.notes.palette import NOTE_COLORS, DEFAULT_COLOR

# import models so they register with Base.metadata
from notekeep.auth import models as auth_models  # noqa: F401
from notekeep.notes import models as notes_models  # noqa: F401

# Routers Import
from notekeep.auth.api import router as auth_router
from notekeep.notes.api import router as notes_router
from notekeep.assist.api import router as assist_router

configure_logging()
logger = logging.getLogger(__name__)

TAGS_METADATA = [
    {"name": "Auth", "description": "Sign up, sign in, current identity"},
    {"name": "Notes", "description": "Create, edit, color and delete notes; live snapshot stream"},
    {"name": "Assist", "description": "AI-assisted note content"},
    {"name": "Health", "description": "Service health"},
]

app = FastAPI(
    title="notekeep",
    version="0.1.0",
    description="Personal notes with live snapshots and AI-assisted writing.",
    openapi_tags=TAGS_METADATA,
)

# ---- DEV-ONLY error handler (surfaces real errors in Swagger) ----
if os.getenv("ENV", "dev") == "dev":
    @app.exception_handler(Exception)
    async def _dev_ex_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

# ------------------------------------------------------------------


@app.on_event("startup")
def _init_db():
    Base.metadata.create_all(bind=engine)
    logger.info("database ready")

@app.get("/healthz", tags=["Health"])
def healthz():
    return {"ok": True}

@app.get("/palette", tags=["Notes"])
def palette():
    return {"colors": NOTE_COLORS, "default": DEFAULT_COLOR}

# --- Custom OpenAPI: bearerAuth as the default for everything but the public routes ---
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    schema.setdefault("components", {}).setdefault("securitySchemes", {})
    schema["components"]["securitySchemes"]["bearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
    }
    for path, ops in schema.get("paths", {}).items():
        if path in ["/auth/token", "/auth/register", "/healthz", "/palette"]:
            continue
        for op in ops.values():
            op.setdefault("security", [{"bearerAuth": []}])
    app.openapi_schema = schema
    return app.openapi_schema

# Routers
app.include_router(auth_router)
app.include_router(notes_router)
app.include_router(assist_router)

app.openapi = custom_openapi
