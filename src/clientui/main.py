# clientui/main.py
"""
Application factory.

    uvicorn clientui.main:create_app --factory

`create_app()` installs logging, the request id and session middleware, the exception handlers
that drive page recovery, and the page routes. Tests pass their own settings and a
gateway client built on `httpx.MockTransport`.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from clientui.api.v1.error_handlers import register_exception_handlers
from clientui.clients.gateway import GatewayClient
from clientui.config import Settings, get_settings
from clientui.core.logging import RequestIDMiddleware, setup_logging
from clientui.recovery.orchestrator import RecoveryOrchestrator
from clientui.utils.project_info import get_project_name, get_project_version
from clientui.web.pages import router as pages_router
from clientui.web.render import TemplateRenderSink

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, gateway: GatewayClient | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    owns_gateway = gateway is None
    gateway = gateway or GatewayClient.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s", get_project_name(), extra={"gateway_url": settings.GATEWAY_URL})
        yield
        if owns_gateway:
            gateway.close()

    app = FastAPI(title=get_project_name(), version=get_project_version(), lifespan=lifespan)

    app.state.settings = settings
    app.state.gateway = gateway
    app.state.orchestrator = RecoveryOrchestrator(home_path=settings.HOME_PATH, list_path=settings.LIST_PATH)
    app.state.render_sink = TemplateRenderSink(Jinja2Templates(directory=str(settings.TEMPLATES_DIR)))

    app.add_middleware(SessionMiddleware, secret_key=settings.SESSION_SECRET, same_site="lax")
    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    app.include_router(pages_router)

    return app

