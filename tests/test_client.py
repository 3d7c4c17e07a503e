import base64
import logging

import httpx
import pytest
import respx
from httpx import Response
from teamcity_rest.client import TeamCityClient
from teamcity_rest.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ParseError,
    TeamCityHTTPError,
    TransportError,
    ValidationError,
)
from teamcity_rest.models import Project

BASE = "https://tc.example.com"
REST = f"{BASE}/app/rest"


@pytest.mark.asyncio
async def test_get_request_success():
    async with respx.mock:
        route = respx.get(f"{REST}/projects").mock(
            return_value=Response(200, json={"count": 1, "project": []})
        )

        client = TeamCityClient(BASE, username="admin", password="secret")
        async with client:
            data = await client.get("/projects")
            assert data["count"] == 1

        assert route.called


@pytest.mark.asyncio
async def test_basic_auth_header():
    async with respx.mock:
        route = respx.get(f"{REST}/server").mock(
            return_value=Response(200, json={"version": "2023.11"})
        )

        client = TeamCityClient(BASE, username="admin", password="secret")
        async with client:
            await client.get("/server")

        sent = route.calls[0].request.headers
        expected = "Basic " + base64.b64encode(b"admin:secret").decode()
        assert sent.get("Authorization") == expected
        assert sent.get("Accept") == "application/json"


@pytest.mark.asyncio
async def test_token_auth_header():
    async with respx.mock:
        route = respx.get(f"{REST}/server").mock(
            return_value=Response(200, json={"version": "2023.11"})
        )

        client = TeamCityClient(BASE + "/", token="tok-123")
        async with client:
            await client.get("/server")

        assert route.calls[0].request.headers.get("Authorization") == "Bearer tok-123"


def test_missing_base_url_or_credentials_raises():
    with pytest.raises(ValueError):
        TeamCityClient("", token="tok")
    with pytest.raises(ValueError):
        TeamCityClient(BASE)
    with pytest.raises(ValueError):
        TeamCityClient(BASE, username="admin")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,error_cls",
    [
        (400, ValidationError),
        (401, AuthenticationError),
        (403, AuthenticationError),
        (404, NotFoundError),
        (409, ConflictError),
        (422, ValidationError),
        (500, TeamCityHTTPError),
    ],
)
async def test_status_maps_to_typed_error(status, error_cls):
    async with respx.mock:
        respx.get(f"{REST}/projects/id:Missing").mock(
            return_value=Response(status, text="boom")
        )

        client = TeamCityClient(BASE, token="tok")
        async with client:
            with pytest.raises(error_cls) as exc:
                await client.get("/projects/id:Missing")

    assert exc.value.status_code == status
    assert exc.value.method == "GET"
    assert isinstance(exc.value, TeamCityHTTPError)


@pytest.mark.asyncio
async def test_plain_text_error_uses_details_line():
    body = (
        "Responding with error, status code: 404 (Not Found).\n"
        "Details: jetbrains.buildServer.server.rest.errors.NotFoundException: "
        "No project found by locator 'id:Nope'.\n"
        "Could not find the entity requested."
    )
    async with respx.mock:
        respx.get(f"{REST}/projects/id:Nope").mock(
            return_value=Response(404, text=body)
        )

        client = TeamCityClient(BASE, token="tok")
        async with client:
            with pytest.raises(NotFoundError) as exc:
                await client.get("/projects/id:Nope")

    assert exc.value.message.startswith("jetbrains.buildServer")
    assert "id:Nope" in str(exc.value)
    assert exc.value.response_text == body
    assert exc.value.response_json is None


@pytest.mark.asyncio
async def test_json_error_uses_message_field():
    async with respx.mock:
        respx.post(f"{REST}/projects").mock(
            return_value=Response(409, json={"message": "Duplicate project id"})
        )

        client = TeamCityClient(BASE, token="tok")
        async with client:
            with pytest.raises(ConflictError) as exc:
                await client.post("/projects", json={"name": "Dup"})

    assert exc.value.message == "Duplicate project id"
    assert exc.value.response_json == {"message": "Duplicate project id"}


@pytest.mark.asyncio
async def test_connect_error_raises_transport_error_without_retry():
    async with respx.mock:
        route = respx.get(f"{REST}/projects").mock(
            side_effect=httpx.ConnectTimeout("boom")
        )

        client = TeamCityClient(BASE, token="tok", timeout_seconds=0.1)
        async with client:
            with pytest.raises(TransportError):
                await client.get("/projects")

        assert route.call_count == 1


@pytest.mark.asyncio
async def test_server_error_is_not_retried():
    async with respx.mock:
        route = respx.get(f"{REST}/projects").mock(
            return_value=Response(503, text="Service Unavailable")
        )

        client = TeamCityClient(BASE, token="tok")
        async with client:
            with pytest.raises(TeamCityHTTPError) as exc:
                await client.get("/projects")

        assert exc.value.status_code == 503
        assert route.call_count == 1


@pytest.mark.asyncio
async def test_empty_response_returns_empty_dict():
    async with respx.mock:
        respx.get(f"{REST}/some-endpoint").mock(return_value=Response(204))

        client = TeamCityClient(BASE, token="tok")
        async with client:
            assert await client.get("/some-endpoint") == {}


@pytest.mark.asyncio
async def test_non_json_response_raises_parse_error():
    async with respx.mock:
        respx.get(f"{REST}/projects").mock(
            return_value=Response(200, text="<html>Not JSON</html>")
        )

        client = TeamCityClient(BASE, token="tok")
        async with client:
            with pytest.raises(ParseError) as exc:
                await client.get("/projects")

        assert "Expected JSON" in str(exc.value)


@pytest.mark.asyncio
async def test_put_text_sends_plain_body():
    async with respx.mock:
        route = respx.put(f"{REST}/buildTypes/id:Bt/settings/artifactRules").mock(
            return_value=Response(200, text="**/*.zip")
        )

        client = TeamCityClient(BASE, token="tok")
        async with client:
            result = await client.put_text(
                "/buildTypes/id:Bt/settings/artifactRules", "**/*.zip"
            )

        request = route.calls[0].request
        assert result == "**/*.zip"
        assert request.content == b"**/*.zip"
        assert request.headers["Content-Type"] == "text/plain"
        assert request.headers["Accept"] == "text/plain"


@pytest.mark.asyncio
async def test_request_model_rejects_mismatched_payload():
    from teamcity_rest.errors import ModelValidationError

    async with respx.mock:
        respx.get(f"{REST}/projects/id:P").mock(
            return_value=Response(200, json={"id": "P"})
        )

        client = TeamCityClient(BASE, token="tok")
        async with client:
            with pytest.raises(ModelValidationError):
                await client.request_model(Project, "GET", "/projects/id:P")


@pytest.mark.asyncio
async def test_request_is_logged_without_credentials(caplog):
    async with respx.mock:
        respx.get(f"{REST}/server").mock(
            return_value=Response(200, json={"version": "2023.11"})
        )

        client = TeamCityClient(BASE, username="admin", password="hunter2")
        with caplog.at_level(logging.DEBUG, logger="teamcity_rest.client"):
            async with client:
                await client.get("/server", resource="server")

    record = next(r for r in caplog.records if r.getMessage() == "tc.request")
    assert record.method == "GET"
    assert record.status == 200
    assert record.resource == "server"
    assert record.url == f"{REST}/server"
    assert record.duration_ms >= 0
    assert "hunter2" not in caplog.text


@pytest.mark.asyncio
async def test_external_http_client_is_not_closed():
    http = httpx.AsyncClient(base_url=REST)
    client = TeamCityClient(BASE, token="tok", http=http)
    async with client:
        pass
    assert not http.is_closed
    await http.aclose()


def test_from_env(monkeypatch):
    monkeypatch.setattr("teamcity_rest.config.load_dotenv", lambda: None)
    monkeypatch.setenv("TEAMCITY_ADDR", BASE)
    monkeypatch.setenv("TEAMCITY_TOKEN", "tok")
    monkeypatch.delenv("TEAMCITY_USER", raising=False)
    monkeypatch.delenv("TEAMCITY_PASSWORD", raising=False)

    client = TeamCityClient.from_env()
    assert client.rest_url == REST
    assert client.http.headers["Authorization"] == "Bearer tok"


def test_from_env_explicit_credentials_override_environment(monkeypatch):
    monkeypatch.setattr("teamcity_rest.config.load_dotenv", lambda: None)
    monkeypatch.setenv("TEAMCITY_ADDR", BASE)
    monkeypatch.setenv("TEAMCITY_USER", "admin")
    monkeypatch.setenv("TEAMCITY_PASSWORD", "secret")
    monkeypatch.delenv("TEAMCITY_TOKEN", raising=False)

    client = TeamCityClient.from_env(token="tok-override", timeout_seconds=5.0)

    assert client.http.headers["Authorization"] == "Bearer tok-override"
    assert client.http.timeout.connect == 5.0


def test_from_env_missing_raises(monkeypatch):
    monkeypatch.setattr("teamcity_rest.config.load_dotenv", lambda: None)
    for name in (
        "TEAMCITY_ADDR",
        "TEAMCITY_TOKEN",
        "TEAMCITY_USER",
        "TEAMCITY_PASSWORD",
    ):
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(ValueError) as exc:
        TeamCityClient.from_env()
    assert "TEAMCITY_ADDR" in str(exc.value)
