"""
Auth gateway. Serves /api/auth/* (plus root-level /oauth2/* and /.well-known/* aliases)
once the configured OIDC clients are seeded into the client registry.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from auth_gateway.auth_endpoint import router as auth_router
from auth_gateway.client_config import ClientConfigSource, EnvClientConfigSource
from auth_gateway.config import (
    AUTH_UPSTREAM_TIMEOUT_SECONDS,
    AUTH_UPSTREAM_URL,
    ENABLE_OIDC_PROVIDER,
    OIDC_CLIENTS,
    OIDC_CLIENTS_FILE,
)
from auth_gateway.database import SessionLocal, init_db
from auth_gateway.dispatcher import AuthHandler, RequestDispatcher
from auth_gateway.oauth2 import router as oauth2_router
from auth_gateway.readiness import ReadinessGate
from auth_gateway.store import ClientRegistryStore, SqlClientRegistryStore
from auth_gateway.upstream import UpstreamAuthHandler
from auth_gateway.well_known import router as well_known_router


def create_app(
    *,
    source: ClientConfigSource | None = None,
    store: ClientRegistryStore | None = None,
    auth_handler: AuthHandler | None = None,
    enabled: bool | None = None,
) -> FastAPI:
    """Build the app with its own readiness gate. Defaults come from the environment."""
    if enabled is None:
        enabled = ENABLE_OIDC_PROVIDER
    if source is None:
        source = EnvClientConfigSource(OIDC_CLIENTS, OIDC_CLIENTS_FILE)
    if store is None:
        store = SqlClientRegistryStore(SessionLocal)
    owned_handler = None
    if auth_handler is None:
        owned_handler = auth_handler = UpstreamAuthHandler(AUTH_UPSTREAM_URL, timeout=AUTH_UPSTREAM_TIMEOUT_SECONDS)

    gate = ReadinessGate(source, store, enabled=enabled)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create tables on startup; seeding waits for the first auth request."""
        init_db()
        yield
        if owned_handler is not None:
            await owned_handler.aclose()

    app = FastAPI(title="Auth Gateway", version="0.1.0", lifespan=lifespan)
    app.state.gate = gate
    app.state.dispatcher = RequestDispatcher(gate, auth_handler)
    app.include_router(auth_router, tags=["auth"])
    app.include_router(oauth2_router, tags=["oauth2"])
    app.include_router(well_known_router, tags=["well-known"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "auth_gateway.main:app",
        host="127.0.0.1",
        port=3000,
        reload=True,
    )
