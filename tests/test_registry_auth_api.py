"""Unit tests for the registry authentication adapter."""

import json

import pytest

from conftest import KEY_PATH, TOKEN_PATH
from registry_client.adapters.registry.auth_api import RegistryAuthApi
from registry_client.core.errors import ApiError


def test_request_signing_material_parses_key_response(fake_transport) -> None:
    api = RegistryAuthApi(fake_transport)

    material = api.request_signing_material()

    assert material.identifier == "123"
    assert material.challenge == "testData"
    assert fake_transport.calls[0]["method"] == "GET"
    assert fake_transport.calls[0]["path"] == KEY_PATH


def test_request_signing_material_rejects_non_200(fake_transport) -> None:
    fake_transport.respond(KEY_PATH, 503, "maintenance")
    api = RegistryAuthApi(fake_transport)

    with pytest.raises(ApiError) as exc_info:
        api.request_signing_material()

    assert exc_info.value.code == "registry_key_request_failed"
    assert exc_info.value.status_code == 503
    assert exc_info.value.body == "maintenance"


def test_request_signing_material_rejects_unparsable_body(fake_transport) -> None:
    fake_transport.respond(KEY_PATH, 200, "<html>")
    api = RegistryAuthApi(fake_transport)

    with pytest.raises(ApiError) as exc_info:
        api.request_signing_material()

    assert exc_info.value.code == "registry_invalid_response"


def test_missing_challenge_is_passed_through(fake_transport) -> None:
    fake_transport.respond(KEY_PATH, 200, '{"uuid":"abc"}')
    api = RegistryAuthApi(fake_transport)

    material = api.request_signing_material()

    assert material.identifier == "abc"
    assert material.challenge is None


def test_exchange_for_token_posts_identifier_and_signature(fake_transport) -> None:
    api = RegistryAuthApi(fake_transport)

    result = api.exchange_for_token("123", "c2lnbmVk")

    request = fake_transport.calls[0]
    assert request["method"] == "POST"
    assert request["path"] == TOKEN_PATH
    assert request["headers"]["Content-Type"] == "application/json; charset=UTF-8"
    assert json.loads(request["body"]) == {"uuid": "123", "data": "c2lnbmVk"}
    assert result.status_code == 200
    assert result.token == "testToken"


def test_exchange_for_token_returns_failures_verbatim(fake_transport) -> None:
    body = '{"code":"401","error_message":"Invalid signature","description":"x"}'
    fake_transport.respond(TOKEN_PATH, 401, body)
    api = RegistryAuthApi(fake_transport)

    result = api.exchange_for_token("123", "c2lnbmVk")

    assert result.status_code == 401
    assert result.body == body
    assert result.token is None
