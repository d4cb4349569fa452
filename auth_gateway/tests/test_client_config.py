"""Tests for client descriptor loading and validation (OIDC_CLIENTS / OIDC_CLIENTS_FILE)."""
import json

import pytest

from auth_gateway.client_config import (
    EnvClientConfigSource,
    StaticClientConfigSource,
    load_clients_file,
    merge_clients,
    parse_clients_json,
)
from auth_gateway.errors import ConfigurationError
from auth_gateway.tests.fakes import make_client

WEB_CLIENT = {
    "clientId": "test-web-client",
    "name": "Test Web Application",
    "clientSecret": "super-secret-key-at-least-16-chars",
    "type": "web",
    "redirectURLs": ["https://app.example.com/callback"],
}

PUBLIC_CLIENT = {
    "clientId": "test-public-client",
    "name": "Test Public Application",
    "type": "public",
    "redirectURLs": ["https://spa.example.com/callback"],
    "skipConsent": True,
}


def test_parse_web_client():
    clients = parse_clients_json(json.dumps([WEB_CLIENT]), "OIDC_CLIENTS")
    assert len(clients) == 1
    c = clients[0]
    assert c.client_id == "test-web-client"
    assert c.client_secret == "super-secret-key-at-least-16-chars"
    assert c.redirect_urls == ["https://app.example.com/callback"]
    assert c.type == "web"
    assert c.skip_consent is False
    assert c.disabled is False
    assert c.is_confidential is True


def test_parse_public_client_without_secret():
    clients = parse_clients_json(json.dumps([PUBLIC_CLIENT]), "OIDC_CLIENTS")
    assert clients[0].client_secret is None
    assert clients[0].skip_consent is True
    assert clients[0].is_confidential is False


def test_type_defaults_to_web():
    raw = {k: v for k, v in WEB_CLIENT.items() if k != "type"}
    assert parse_clients_json(json.dumps([raw]), "OIDC_CLIENTS")[0].type == "web"


def test_native_client_custom_scheme_redirect():
    raw = {**WEB_CLIENT, "clientId": "native", "type": "native", "redirectURLs": ["com.example.app://callback"]}
    assert parse_clients_json(json.dumps([raw]), "OIDC_CLIENTS")[0].redirect_urls == ["com.example.app://callback"]


def test_missing_secret_for_web_client_rejected():
    raw = {k: v for k, v in WEB_CLIENT.items() if k != "clientSecret"}
    with pytest.raises(ConfigurationError) as exc:
        parse_clients_json(json.dumps([raw]), "OIDC_CLIENTS")
    assert "clientSecret is required" in str(exc.value)
    assert "test-web-client" in str(exc.value)


@pytest.mark.parametrize(
    "override",
    [
        {"redirectURLs": []},
        {"redirectURLs": ["not a url"]},
        {"clientId": ""},
        {"name": "   "},
        {"type": "desktop"},
    ],
)
def test_invalid_client_rejected(override):
    with pytest.raises(ConfigurationError):
        parse_clients_json(json.dumps([{**WEB_CLIENT, **override}]), "OIDC_CLIENTS")


def test_all_invalid_clients_reported_together():
    bad_one = {**WEB_CLIENT, "clientId": "bad-one", "redirectURLs": []}
    bad_two = {**WEB_CLIENT, "clientId": "bad-two", "clientSecret": None}
    with pytest.raises(ConfigurationError) as exc:
        parse_clients_json(json.dumps([bad_one, WEB_CLIENT, bad_two]), "OIDC_CLIENTS")
    assert "bad-one" in str(exc.value)
    assert "bad-two" in str(exc.value)


def test_error_message_never_contains_secret():
    raw = {**WEB_CLIENT, "redirectURLs": ["nope"]}
    with pytest.raises(ConfigurationError) as exc:
        parse_clients_json(json.dumps([raw]), "OIDC_CLIENTS")
    assert WEB_CLIENT["clientSecret"] not in str(exc.value)


def test_malformed_json_rejected():
    with pytest.raises(ConfigurationError) as exc:
        parse_clients_json("[{not json", "OIDC_CLIENTS")
    assert "not valid JSON" in str(exc.value)


def test_non_array_rejected():
    with pytest.raises(ConfigurationError) as exc:
        parse_clients_json(json.dumps(WEB_CLIENT), "OIDC_CLIENTS")
    assert "must be a JSON array" in str(exc.value)


def test_duplicate_client_ids_rejected():
    with pytest.raises(ConfigurationError) as exc:
        merge_clients([make_client("dup"), make_client("other")], [make_client("dup")])
    assert "dup" in str(exc.value)


def test_load_file(tmp_path):
    path = tmp_path / "clients.json"
    path.write_text(json.dumps([PUBLIC_CLIENT]))
    clients = load_clients_file(str(path))
    assert [c.client_id for c in clients] == ["test-public-client"]


def test_load_file_with_oidc_clients_key(tmp_path):
    path = tmp_path / "clients.json"
    path.write_text(json.dumps({"oidcClients": [WEB_CLIENT]}))
    assert load_clients_file(str(path))[0].client_id == "test-web-client"


def test_load_missing_file_rejected(tmp_path):
    with pytest.raises(ConfigurationError) as exc:
        load_clients_file(str(tmp_path / "missing.json"))
    assert "does not exist" in str(exc.value)


def test_load_yaml_file_rejected(tmp_path):
    path = tmp_path / "clients.yaml"
    path.write_text("oidcClients:\n  - clientId: app\n")
    with pytest.raises(ConfigurationError) as exc:
        load_clients_file(str(path))
    assert "YAML" in str(exc.value)


def test_env_source_merges_env_then_file(tmp_path):
    path = tmp_path / "clients.json"
    path.write_text(json.dumps([PUBLIC_CLIENT]))
    source = EnvClientConfigSource(json.dumps([WEB_CLIENT]), str(path))
    assert [c.client_id for c in source.load()] == ["test-web-client", "test-public-client"]


def test_env_source_duplicate_across_env_and_file(tmp_path):
    path = tmp_path / "clients.json"
    path.write_text(json.dumps([WEB_CLIENT]))
    source = EnvClientConfigSource(json.dumps([WEB_CLIENT]), str(path))
    with pytest.raises(ConfigurationError):
        source.load()


def test_env_source_without_configuration_is_empty():
    assert EnvClientConfigSource(None, None).load() == []


def test_static_source_returns_copy():
    clients = [make_client("a")]
    source = StaticClientConfigSource(clients)
    loaded = source.load()
    loaded.append(make_client("b"))
    assert [c.client_id for c in source.load()] == ["a"]
