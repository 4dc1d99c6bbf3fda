from __future__ import annotations  # FastAPI server for the mock interview assistant

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from starlette.types import Scope

from api.routes import router
from config.settings import settings


logger = logging.getLogger(__name__)

app = FastAPI(title="AI Interview Assistant API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(router)


def _error(status_code: int, message: str) -> JSONResponse:  # Uniform failure payload
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


def _validation_message(exc: RequestValidationError) -> str:  # First validation problem, human readable
    errors = exc.errors()
    if not errors:
        return "invalid payload"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    detail = first.get("msg", "invalid value")
    return f"invalid payload: {location} {detail}".strip() if location else f"invalid payload: {detail}"


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(400, _validation_message(exc))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")


class SpaStaticFiles(StaticFiles):  # Unknown paths fall back to index.html for client-side routes
    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            response = await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404:
                raise
            return await super().get_response("index.html", scope)
        if response.status_code == 404:
            return await super().get_response("index.html", scope)
        return response


def mount_frontend(target: FastAPI, public_dir: Path) -> bool:  # Serve the built SPA when present
    if not (public_dir / "index.html").is_file():
        logger.info("No static frontend found in %s; API endpoints still available.", public_dir)
        return False
    target.mount("/", SpaStaticFiles(directory=str(public_dir), html=True), name="frontend")
    logger.info("Static frontend detected at %s; SPA will be served.", public_dir)
    return True


mount_frontend(app, Path(settings.PUBLIC_DIR))
if settings.ai_enabled:
    logger.info("AI service key is set (model=%s)", settings.ai_model)
else:
    logger.info("AI service key not set; question generation and evaluation use fallbacks")
