"""
Pytest configuration for auth_gateway. Use in-memory SQLite so tests don't touch the filesystem.
"""
import os

# In-memory SQLite; database.py uses StaticPool so all connections share the same DB
os.environ["GATEWAY_DATABASE_URL"] = "sqlite:///:memory:"
# Tests build their own apps and sources; never pick up a developer's client config
for _name in ("ENABLE_OIDC_PROVIDER", "OIDC_CLIENTS", "OIDC_CLIENTS_FILE", "OAUTH_ISSUER"):
    if _name in os.environ:
        del os.environ[_name]
