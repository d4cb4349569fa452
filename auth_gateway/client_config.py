"""
Client descriptor source. Reads OIDC clients from the OIDC_CLIENTS env value (JSON array)
and/or OIDC_CLIENTS_FILE (mounted JSON file), validates them, and rejects duplicates.
Any problem is a ConfigurationError: the gateway will not seed a partial client set.
"""
import json
import logging
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from auth_gateway.errors import ConfigurationError
from auth_gateway.schemas import ClientDescriptor

logger = logging.getLogger(__name__)

_JSON_EXAMPLE = (
    '[{"clientId":"app","clientSecret":"secret","name":"App","type":"web",'
    '"redirectURLs":["https://app.example.com/callback"]}]'
)


class ClientConfigSource(Protocol):
    def load(self) -> list[ClientDescriptor]: ...


def _describe_validation_error(source: str, index: int, raw: Any, exc: ValidationError) -> str:
    client_id = raw.get("clientId") if isinstance(raw, dict) else None
    fields = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "client"
        # err["msg"] never echoes the input value
        fields.append(f"{loc}: {err['msg']}")
    who = f'"{client_id}"' if client_id else f"at index {index}"
    return f"{source} client {who}: {'; '.join(fields)}"


def parse_clients_json(value: str, source: str) -> list[ClientDescriptor]:
    """Parse and validate a JSON array of client descriptors. All problems are reported together."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{source} is not valid JSON (line {e.lineno}, column {e.colno})") from None
    if isinstance(parsed, dict) and "oidcClients" in parsed:
        parsed = parsed["oidcClients"]
    if not isinstance(parsed, list):
        raise ConfigurationError(f"{source} must be a JSON array")

    clients: list[ClientDescriptor] = []
    problems: list[str] = []
    for index, raw in enumerate(parsed):
        try:
            clients.append(ClientDescriptor.model_validate(raw))
        except ValidationError as e:
            problems.append(_describe_validation_error(source, index, raw, e))
    if problems:
        raise ConfigurationError("Client validation failed: " + " | ".join(problems))
    return clients


def load_clients_file(path: str) -> list[ClientDescriptor]:
    """Load client descriptors from a mounted JSON file."""
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigurationError(f"OIDC_CLIENTS_FILE does not exist: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to read OIDC_CLIENTS_FILE: {path} ({e.strerror})") from None

    trimmed = content.strip()
    if not trimmed.startswith(("[", "{")):
        logger.error("OIDC_CLIENTS_FILE looks like YAML; use JSON, e.g. %s", _JSON_EXAMPLE)
        raise ConfigurationError("OIDC_CLIENTS_FILE: YAML format not supported, use JSON")
    return parse_clients_json(trimmed, "OIDC_CLIENTS_FILE")


def merge_clients(*groups: list[ClientDescriptor]) -> list[ClientDescriptor]:
    """Concatenate client groups in order; duplicate client ids are a configuration error."""
    merged: list[ClientDescriptor] = []
    seen: set[str] = set()
    duplicates: list[str] = []
    for group in groups:
        for client in group:
            if client.client_id in seen and client.client_id not in duplicates:
                duplicates.append(client.client_id)
            seen.add(client.client_id)
            merged.append(client)
    if duplicates:
        raise ConfigurationError(f"Duplicate client IDs in configuration: {', '.join(duplicates)}")
    return merged


class EnvClientConfigSource:
    """Client descriptors from OIDC_CLIENTS (env JSON) followed by OIDC_CLIENTS_FILE."""

    def __init__(self, clients_json: str | None = None, clients_file: str | None = None):
        self.clients_json = clients_json
        self.clients_file = clients_file

    def load(self) -> list[ClientDescriptor]:
        env_clients = parse_clients_json(self.clients_json, "OIDC_CLIENTS") if self.clients_json else []
        file_clients = load_clients_file(self.clients_file) if self.clients_file else []
        return merge_clients(env_clients, file_clients)


class StaticClientConfigSource:
    """Fixed in-memory list of descriptors (embedding apps, tests)."""

    def __init__(self, clients: list[ClientDescriptor]):
        self._clients = list(clients)

    def load(self) -> list[ClientDescriptor]:
        return merge_clients(self._clients)
