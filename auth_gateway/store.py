"""
Client registry store. Upserts OIDC client descriptors into oauth_applications in one transaction:
create if absent, update changed fields if present, never delete clients missing from the input.
"""
import json
import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any, Protocol

import bcrypt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from auth_gateway.errors import StoreError
from auth_gateway.models import OAuthApplication
from auth_gateway.schemas import ClientDescriptor

logger = logging.getLogger(__name__)


def hash_secret(secret: str) -> str:
    # Bcrypt has a 72-byte limit
    raw = secret.encode("utf-8")
    if len(raw) > 72:
        raw = raw[:72]
    return bcrypt.hashpw(raw, bcrypt.gensalt()).decode("utf-8")


def verify_secret(plain: str, hashed: str) -> bool:
    raw = plain.encode("utf-8")
    if len(raw) > 72:
        raw = raw[:72]
    return bcrypt.checkpw(raw, hashed.encode("utf-8"))


class ClientRegistryStore(Protocol):
    async def upsert_all(self, descriptors: Sequence[ClientDescriptor]) -> None: ...


def _desired_columns(descriptor: ClientDescriptor) -> dict[str, Any]:
    """Column values for a descriptor, excluding the secret (compared via bcrypt)."""
    return {
        "name": descriptor.name,
        "icon": descriptor.icon,
        "redirect_urls": json.dumps(list(descriptor.redirect_urls)),
        "metadata_json": json.dumps(descriptor.metadata, sort_keys=True) if descriptor.metadata else None,
        "type": descriptor.type,
        "skip_consent": descriptor.skip_consent,
        "disabled": descriptor.disabled,
        "user_id": descriptor.user_id,
    }


def _secret_changed(row: OAuthApplication, secret: str | None) -> bool:
    if secret is None:
        return row.client_secret_hash is not None
    if not row.client_secret_hash:
        return True
    try:
        return not verify_secret(secret, row.client_secret_hash)
    except ValueError:
        # Stored value is not a bcrypt hash (e.g. written by another tool); replace it
        logger.warning("Client %s has an unreadable secret hash; rewriting it", row.client_id)
        return True


def upsert_clients(db: Session, descriptors: Sequence[ClientDescriptor]) -> tuple[int, int]:
    """
    Upsert descriptors in the session's transaction and commit.
    Returns (created, updated). Unchanged rows are left untouched, so repeated calls are no-ops.
    """
    created = updated = 0
    for descriptor in descriptors:
        columns = _desired_columns(descriptor)
        row = db.query(OAuthApplication).filter(OAuthApplication.client_id == descriptor.client_id).first()
        if row is None:
            secret_hash = hash_secret(descriptor.client_secret) if descriptor.client_secret else None
            db.add(OAuthApplication(client_id=descriptor.client_id, client_secret_hash=secret_hash, **columns))
            created += 1
            continue

        changed = False
        for column, value in columns.items():
            if getattr(row, column) != value:
                setattr(row, column, value)
                changed = True
        if _secret_changed(row, descriptor.client_secret):
            row.client_secret_hash = hash_secret(descriptor.client_secret) if descriptor.client_secret else None
            changed = True
        if changed:
            row.updated_at = datetime.now(timezone.utc)
            updated += 1
    db.commit()
    return created, updated


class SqlClientRegistryStore:
    """ClientRegistryStore backed by SQLAlchemy. Sync ORM work runs in the threadpool."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def _upsert_all_sync(self, descriptors: Sequence[ClientDescriptor]) -> None:
        db = self._session_factory()
        try:
            created, updated = upsert_clients(db, descriptors)
        except SQLAlchemyError as e:
            db.rollback()
            # Driver errors can embed bound parameters; keep only the exception class
            raise StoreError(f"Client registry write failed: {type(e).__name__}") from e
        finally:
            db.close()
        logger.info(
            "Client registry upsert: %d created, %d updated, %d unchanged",
            created,
            updated,
            len(descriptors) - created - updated,
        )

    async def upsert_all(self, descriptors: Sequence[ClientDescriptor]) -> None:
        await run_in_threadpool(self._upsert_all_sync, descriptors)
