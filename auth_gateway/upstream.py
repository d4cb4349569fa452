"""
Default authentication handler: forwards auth requests to the OIDC provider at AUTH_UPSTREAM_URL.
"""
import logging

import httpx
from fastapi.responses import JSONResponse, Response

from auth_gateway.dispatcher import AuthRequest

logger = logging.getLogger(__name__)

# RFC 7230 §6.1 hop-by-hop headers, plus values httpx recomputes
_HOP_BY_HOP = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
    "host",
    "content-length",
}
# httpx decodes the body, so the upstream encoding no longer applies
_DROP_RESPONSE = _HOP_BY_HOP | {"content-encoding"}


class UpstreamAuthHandler:
    def __init__(self, base_url: str, timeout: float = 30.0, client: httpx.AsyncClient | None = None):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=False)

    async def __call__(self, request: AuthRequest) -> Response:
        url = f"{self.base_url}{request.path}"
        if request.query:
            url = f"{url}?{request.query}"
        headers = [(k, v) for k, v in request.headers if k.lower() not in _HOP_BY_HOP]
        try:
            upstream = await self._client.request(
                request.method,
                url,
                headers=headers,
                content=request.body or None,
            )
        except httpx.HTTPError as e:
            logger.error("Auth upstream request failed: %s %s (%s)", request.method, request.path, type(e).__name__)
            return JSONResponse(
                status_code=502,
                content={"error": "server_error", "error_description": "Authentication service unavailable"},
            )
        response = Response(content=upstream.content, status_code=upstream.status_code)
        for key, value in upstream.headers.multi_items():
            if key.lower() not in _DROP_RESPONSE:
                response.headers.append(key, value)
        return response

    async def aclose(self) -> None:
        await self._client.aclose()
