"""
Auth endpoint: GET/POST /api/auth/* gated on the client registry, and the health check.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from auth_gateway.dispatcher import AuthRequest, RequestDispatcher, get_dispatcher

router = APIRouter()


@router.api_route("/api/auth/{path:path}", methods=["GET", "POST"])
async def auth_endpoint(request: Request, dispatcher: RequestDispatcher = Depends(get_dispatcher)):
    """Gate, then forward to the authentication handler. GET and POST are handled identically."""
    return await dispatcher.handle(await AuthRequest.from_request(request))


@router.get("/api/health")
def health(request: Request):
    """Health check endpoint. Reports the client registry state without triggering seeding."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "oidc": request.app.state.gate.state.value,
    }
