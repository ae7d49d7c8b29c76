# ─────────────────────────────────────────────────────────────────
# main.py - Application Entry Point
#
# Builds the FastAPI app, wires the shared DeviceStore into it,
# registers the error translations and loads the device CSV at
# startup.
#
# Run with:
#   uvicorn main:app --port 8080
# or
#   python main.py
# ─────────────────────────────────────────────────────────────────

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from config import Settings, get_settings
from database import DeviceStore
from exceptions import BadInputError, DeviceNotFoundError
from loader import load_devices_from_csv
from logs import configure_logging
from routes.devices import router as devices_router

logger = logging.getLogger("app")


def create_app(settings: Optional[Settings] = None, store: Optional[DeviceStore] = None) -> FastAPI:
    """
    Builds a fresh app. Each app owns exactly one DeviceStore,
    reachable by routes through request.app.state.store.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    if store is None:
        store = DeviceStore(auto_register=settings.AUTO_REGISTER_DEVICES)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # A missing or unreadable CSV raises here and aborts startup
        load_devices_from_csv(settings.DEVICES_CSV, app.state.store)
        logger.info(
            f"🚀 {settings.APP_TITLE} v{settings.APP_VERSION} ready | "
            f"{len(app.state.store)} devices | "
            f"auto-register: {app.state.store.auto_register} | "
            f"timestamp window: {settings.ENFORCE_TIMESTAMP_WINDOW}"
        )
        yield

    app = FastAPI(
        title=settings.APP_TITLE,
        description="Heartbeat and upload-latency telemetry for remote devices",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store

    # ── error translation: core errors → HTTP ─────────────────────

    @app.exception_handler(DeviceNotFoundError)
    async def device_not_found(request: Request, exc: DeviceNotFoundError):
        logger.warning(f"Unknown device '{exc.device_id}' on {request.method} {request.url.path}")
        return JSONResponse(status_code=404, content={"msg": "device not found"})

    @app.exception_handler(BadInputError)
    async def bad_input(request: Request, exc: BadInputError):
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content={"msg": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        logger.warning(f"Invalid body on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"msg": "invalid JSON body"})

    # ── routes ───────────────────────────────────────────────────

    @app.get("/")
    def root():
        return {
            "message": f"{settings.APP_TITLE} is running",
            "version": settings.APP_VERSION,
            "docs": "/docs",
        }

    @app.get("/health", response_class=PlainTextResponse)
    def health():
        return "OK"

    app.include_router(devices_router)

    return app


app = create_app()


if __name__ == "__main__":
    settings = app.state.settings
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
