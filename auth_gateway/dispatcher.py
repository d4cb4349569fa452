"""
Auth request dispatcher: waits for the readiness gate, then hands the request to the
authentication handler. Fails closed: nothing reaches the handler until clients are seeded.
"""
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from auth_gateway.errors import GateConcurrencyViolation, SeedError
from auth_gateway.readiness import ReadinessGate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthRequest:
    """An inbound auth request as forwarded to the handler (method, path, query, headers, body)."""

    method: str
    path: str
    query: str
    headers: tuple[tuple[str, str], ...]
    body: bytes
    base_url: str

    @classmethod
    async def from_request(cls, request: Request) -> "AuthRequest":
        return cls(
            method=request.method,
            path=request.url.path,
            query=request.url.query,
            headers=tuple(request.headers.items()),
            body=await request.body(),
            base_url=str(request.base_url).rstrip("/"),
        )

    def with_path(self, path: str, method: str | None = None) -> "AuthRequest":
        """Same request aimed at another path (root-level aliases of provider endpoints)."""
        return replace(self, path=path, method=method or self.method)

    def header(self, name: str) -> str | None:
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None


AuthHandler = Callable[[AuthRequest], Awaitable[Response]]


def gate_failure_response() -> JSONResponse:
    # Generic on purpose: no client ids or configuration details in the body
    return JSONResponse(
        status_code=500,
        content={
            "error": "server_error",
            "error_description": "Authentication service is not ready",
        },
    )


class RequestDispatcher:
    def __init__(self, gate: ReadinessGate, auth_handler: AuthHandler):
        self.gate = gate
        self.auth_handler = auth_handler

    async def handle(self, request: AuthRequest) -> Response:
        """Ensure the client registry is seeded, then return the handler's response verbatim."""
        try:
            await self.gate.ensure_ready()
        except SeedError as e:
            logger.warning("Refusing %s %s: client registry not ready (%s)", request.method, request.path, type(e).__name__)
            return gate_failure_response()
        except GateConcurrencyViolation:
            logger.exception("Refusing %s %s: readiness gate contract violated", request.method, request.path)
            return gate_failure_response()
        return await self.auth_handler(request)


def get_dispatcher(request: Request) -> RequestDispatcher:
    """Dependency: the app's dispatcher (one per application, built in create_app)."""
    return request.app.state.dispatcher
