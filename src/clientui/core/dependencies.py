from fastapi import Request

from clientui.clients.gateway import GatewayClient
from clientui.recovery.orchestrator import RecoveryOrchestrator
from clientui.web.render import RenderSink


def get_gateway(request: Request) -> GatewayClient:
    # Returns the gateway client created by the app factory
    return request.app.state.gateway


def get_orchestrator(request: Request) -> RecoveryOrchestrator:
    return request.app.state.orchestrator


def get_render_sink(request: Request) -> RenderSink:
    return request.app.state.render_sink
