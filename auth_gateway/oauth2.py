"""
Root-level OAuth2 endpoints: /oauth2/* is an alias for the provider's /api/auth/oauth2/*
(authorize, token, userinfo, consent, register, client/{id}, endsession).
Goes through the same readiness gate as /api/auth/*.
"""
import json
from urllib.parse import urljoin

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse, Response

from auth_gateway.dispatcher import AuthRequest, RequestDispatcher, get_dispatcher

router = APIRouter()


def redirect_instruction(response: Response, origin: str) -> str | None:
    """
    The provider answers some browser flows with JSON {"redirect": true, "url": ...} meant for a
    client-side router. Return the absolute target URL if this response is one of those.
    """
    if not 200 <= response.status_code < 300:
        return None
    if "application/json" not in (response.headers.get("content-type") or ""):
        return None
    try:
        data = json.loads(response.body)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict) or data.get("redirect") is not True or not isinstance(data.get("url"), str):
        return None
    url = data["url"]
    return url if url.startswith("http") else urljoin(origin + "/", url)


@router.api_route("/oauth2/{path:path}", methods=["GET", "POST"])
async def oauth2_alias(
    path: str,
    request: Request,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
):
    """Proxy /oauth2/{path} to /api/auth/oauth2/{path}, turning JSON redirect instructions into 302s."""
    auth_request = (await AuthRequest.from_request(request)).with_path(f"/api/auth/oauth2/{path}")
    response = await dispatcher.handle(auth_request)
    location = redirect_instruction(response, auth_request.base_url)
    if location is not None:
        return RedirectResponse(url=location, status_code=302)
    return response
