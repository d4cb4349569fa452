"""
Well-known endpoints at the root domain: OpenID Connect discovery and JWKS.
Both proxy the provider under /api/auth, so the issuer can live at the root (issuer = origin).
"""
import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from auth_gateway.config import ISSUER, WELL_KNOWN_CACHE_SECONDS
from auth_gateway.dispatcher import AuthRequest, RequestDispatcher, get_dispatcher

router = APIRouter()

_DISCOVERY_PATH = "/api/auth/.well-known/openid-configuration"
_JWKS_PATH = "/api/auth/jwks"


def rewrite_discovery(document: dict, root_url: str) -> dict:
    """Point discovery endpoints at the root-level /oauth2/* aliases."""
    rewritten = {
        **document,
        "issuer": root_url,
        "authorization_endpoint": f"{root_url}/oauth2/authorize",
        "token_endpoint": f"{root_url}/oauth2/token",
        "userinfo_endpoint": f"{root_url}/oauth2/userinfo",
        "jwks_uri": f"{root_url}/.well-known/jwks.json",
        "end_session_endpoint": f"{root_url}/oauth2/endsession",
    }
    # Optional endpoints are only advertised if the provider has them
    if document.get("revocation_endpoint"):
        rewritten["revocation_endpoint"] = f"{root_url}/oauth2/revoke"
    if document.get("introspection_endpoint"):
        rewritten["introspection_endpoint"] = f"{root_url}/oauth2/introspect"
    return rewritten


def _is_ok(response: Response) -> bool:
    return 200 <= response.status_code < 300


def _json_document(response: Response) -> dict | None:
    body = getattr(response, "body", None)
    if body is None:
        return None
    try:
        document = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    return document if isinstance(document, dict) else None


@router.get("/.well-known/openid-configuration")
async def openid_configuration(request: Request, dispatcher: RequestDispatcher = Depends(get_dispatcher)):
    """OpenID Connect discovery document with root-level endpoints."""
    auth_request = (await AuthRequest.from_request(request)).with_path(_DISCOVERY_PATH, method="GET")
    response = await dispatcher.handle(auth_request)
    if not _is_ok(response):
        return response
    document = _json_document(response)
    if document is None:
        # Not a JSON object (or a streamed body): hand it back untouched
        return response
    return JSONResponse(
        rewrite_discovery(document, ISSUER or auth_request.base_url),
        headers={"Cache-Control": f"public, max-age={WELL_KNOWN_CACHE_SECONDS}"},
    )


def _jwks_headers(response: Response) -> dict[str, str]:
    headers = {k: v for k, v in response.headers.items() if k.lower() != "content-length"}
    headers["cache-control"] = f"public, max-age={WELL_KNOWN_CACHE_SECONDS}, must-revalidate"
    return headers


@router.get("/.well-known/jwks.json")
async def jwks_json(request: Request, dispatcher: RequestDispatcher = Depends(get_dispatcher)):
    """JSON Web Key Set for token signature verification, with caching headers."""
    auth_request = (await AuthRequest.from_request(request)).with_path(_JWKS_PATH, method="GET")
    response = await dispatcher.handle(auth_request)
    if not _is_ok(response) or getattr(response, "body", None) is None:
        return response
    return Response(content=response.body, status_code=200, headers=_jwks_headers(response))


@router.head("/.well-known/jwks.json")
async def jwks_json_head(request: Request, dispatcher: RequestDispatcher = Depends(get_dispatcher)):
    """HEAD for cache checks; the provider may not support HEAD, so issue a GET and drop the body."""
    auth_request = (await AuthRequest.from_request(request)).with_path(_JWKS_PATH, method="GET")
    response = await dispatcher.handle(auth_request)
    if not _is_ok(response):
        return Response(status_code=response.status_code)
    return Response(status_code=200, headers=_jwks_headers(response))
