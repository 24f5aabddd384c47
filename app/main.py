import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import ProviderProfile, Settings, settings
from app.core.exceptions import AppError
from app.core.log import RequestIdMiddleware, configure_logging
from app.llm.dispatcher import ProviderDispatcher
from app.llm.router import router as llm_router
from app.providers.base import ProviderKind
from app.providers.registry import build_providers, close_providers

logger = logging.getLogger(__name__)


def create_app(config: Settings = settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(config.log_level, json_output=config.log_json)
        profile = ProviderProfile.from_settings(config)
        providers = build_providers(profile)
        app.state.dispatcher = ProviderDispatcher(profile, providers)
        logger.info(
            "DevOps LLM gateway started",
            extra={"provider": ",".join(k.value for k in profile.enabled_kinds()) or None},
        )
        if not providers:
            logger.warning("No LLM provider configured; /llm endpoints will fail")
        yield
        await close_providers(providers)
        logger.info("DevOps LLM gateway stopped")

    app = FastAPI(
        title="DevOps LLM Gateway",
        version=config.version,
        description="DevOps automation gateway dispatching code review, build, security and intent tasks to LLM providers.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "detail": exc.message},
        )

    app.include_router(llm_router)

    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        dispatcher: ProviderDispatcher | None = getattr(request.app.state, "dispatcher", None)
        profile = dispatcher.profile if dispatcher else ProviderProfile.from_settings(config)
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": config.version,
            "services": {
                kind.value: "operational" if profile.is_enabled(kind) else "not_configured"
                for kind in ProviderKind
            },
        }

    return app


app = create_app()
