"""FastAPI app factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import Settings, SettingsProvider, settings
from app.engine.errors import ParameterNotFound
from app.engine.orchestrator import Completer
from app.engine.session import PlaygroundSession
from app.llm.client import CompletionClient

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.playground_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Stop pending rewrites on shutdown."""
    yield
    await app.state.session.orchestrator.close()
    logger.info("Playground shut down")


def create_app(
    config: Settings | None = None,
    completion_client: Completer | None = None,
) -> FastAPI:
    config = config or settings

    app = FastAPI(
        title="Parameter Playground",
        description="Explore how sampling parameters change LLM text rewrites",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    client = completion_client or CompletionClient(timeout_s=config.request_timeout_s)
    provider = SettingsProvider(config)
    app.state.settings_provider = provider
    app.state.completion_client = client
    app.state.session = PlaygroundSession(
        client,
        provider,
        debounce_s=config.debounce_ms / 1000,
        min_text_length=config.min_text_length,
        out_of_range=config.slider_out_of_range,
    )

    _register_error_handlers(app)

    from app.api.router import api_router

    app.include_router(api_router)

    return app


def _register_error_handlers(app: FastAPI) -> None:
    """Map engine errors onto HTTP statuses."""

    @app.exception_handler(ParameterNotFound)
    async def _not_found(request: Request, exc: ParameterNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def _invalid(request: Request, exc: ValueError) -> JSONResponse:
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=422, content={"detail": str(exc)})


app = create_app()
