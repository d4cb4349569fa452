"""
Auth gateway configuration. All values come from the environment.
No secrets in this file; client secrets arrive via OIDC_CLIENTS / OIDC_CLIENTS_FILE.
"""
import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() == "true"


# Identity-provider integration switch. When off, no client registry is required and seeding is skipped.
ENABLE_OIDC_PROVIDER = _env_flag("ENABLE_OIDC_PROVIDER")

# JSON array of client descriptors (camelCase keys: clientId, clientSecret, redirectURLs, ...)
OIDC_CLIENTS = os.environ.get("OIDC_CLIENTS", "").strip() or None

# Optional mounted JSON file with more client descriptors; merged with OIDC_CLIENTS
OIDC_CLIENTS_FILE = os.environ.get("OIDC_CLIENTS_FILE", "").strip() or None

# Database holding the client registry (oauth_applications table)
DATABASE_URL = os.environ.get("GATEWAY_DATABASE_URL", "sqlite:///./auth_gateway.db")

# Store-side timeout (seconds) for acquiring a connection; surfaces as StoreError
DATABASE_CONNECT_TIMEOUT_SECONDS = int(os.environ.get("DATABASE_CONNECT_TIMEOUT_SECONDS", "10"))

# Authentication handler the gateway forwards to once the client registry is seeded
AUTH_UPSTREAM_URL = os.environ.get("AUTH_UPSTREAM_URL", "http://127.0.0.1:9000").rstrip("/")
AUTH_UPSTREAM_TIMEOUT_SECONDS = float(os.environ.get("AUTH_UPSTREAM_TIMEOUT_SECONDS", "30"))

# Public issuer used when rewriting discovery documents; empty = use the request origin
ISSUER = os.environ.get("OAUTH_ISSUER", "").rstrip("/") or None

# Cache lifetime for the root-level well-known aliases
WELL_KNOWN_CACHE_SECONDS = int(os.environ.get("WELL_KNOWN_CACHE_SECONDS", "3600"))
