from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from habitstopper_api.db import build_engine, build_sessionmaker
from habitstopper_api.db_init import init_db
from habitstopper_api.errors import HabitStopperError
from habitstopper_api.repositories import LogStore, UserStore
from habitstopper_api.routes import logs, oauth, users
from habitstopper_api.services.log_service import LogService
from habitstopper_api.settings import Settings, get_settings


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    logger = logging.getLogger("habitstopper_api")
    app = FastAPI(title="HabitStopper API", version="0.1.0")

    engine = build_engine(settings)
    session_factory = build_sessionmaker(engine)
    app.state.settings = settings
    app.state.engine = engine
    app.state.user_store = UserStore(session_factory)
    app.state.log_service = LogService(LogStore(session_factory))
    app.state.google_transport = None

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.backend_session_secret,
        session_cookie="habitstopper_session",
        max_age=settings.session_max_age_seconds,
        same_site="lax",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_origin],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(logs.router)
    app.include_router(users.router)
    app.include_router(oauth.router)

    @app.on_event("startup")
    async def _startup():
        await init_db(engine)

    @app.on_event("shutdown")
    async def _shutdown():
        await engine.dispose()

    @app.exception_handler(HabitStopperError)
    async def _domain_error_handler(request: Request, exc: HabitStopperError):
        if exc.status_code < 500:
            logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning("%s %s rejected: malformed body", request.method, request.url.path)
        return JSONResponse(status_code=400, content={"error": "Malformed request body"})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(status_code=500, content={"error": "Internal error"})

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app
