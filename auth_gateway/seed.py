"""
Seed OIDC clients from configuration into the client registry.
The provider validates trusted clients in memory but token issuance needs the rows
to exist (FK on the client id), so this must complete before auth requests are served.
"""
import logging

from auth_gateway.client_config import ClientConfigSource
from auth_gateway.errors import ConfigurationError, SeedError, StoreError
from auth_gateway.store import ClientRegistryStore

logger = logging.getLogger(__name__)


async def seed_clients(source: ClientConfigSource, store: ClientRegistryStore) -> int:
    """Load descriptors and upsert them. Returns the number of clients seeded."""
    try:
        clients = source.load()
    except SeedError:
        raise
    except Exception as e:
        # A source that fails in an unexpected way is still a configuration problem
        raise ConfigurationError(f"Client configuration could not be loaded: {type(e).__name__}") from e

    if not clients:
        logger.info("No OIDC clients configured, skipping client registry seeding")
        return 0

    # Log client IDs but never secrets
    logger.info(
        "Seeding %d OIDC client(s): %s",
        len(clients),
        ", ".join(c.client_id for c in clients),
    )
    try:
        await store.upsert_all(clients)
    except SeedError:
        raise
    except (OSError, TimeoutError) as e:
        raise StoreError(f"Client registry unreachable: {type(e).__name__}") from e
    except Exception as e:
        raise StoreError(f"Client registry write failed: {type(e).__name__}") from e
    logger.info("Seeded %d OIDC client(s)", len(clients))
    return len(clients)
