"""End-to-end tests for the oauthbridge CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
import yaml
from typer.testing import CliRunner

from oauthbridge import __version__
from oauthbridge.app import app
from oauthbridge.exit_codes import (
    EXIT_ACCESS_DENIED,
    EXIT_CONFIG_ERROR,
    EXIT_PROVIDER_ERROR,
    EXIT_TRANSPORT_ERROR,
)

runner = CliRunner()

TOKEN_URL = "https://id.acme.test/oauth/token"
USER_URL = "https://api.acme.test/me"
CALLBACK = "https://app.example.com/callback/acme"


@pytest.fixture
def settings_file(tmp_path: Path, descriptor_data: dict[str, Any]) -> Path:
    provider = {key: value for key, value in descriptor_data.items() if key != "id"}
    data = {
        "providers": {
            "acme": provider,
            "github": {"redirect_uri": "https://app.example.com/callback/github"},
        },
        "clients": {
            "acme": {"client_id": "client-123", "client_secret": "s3cret"},
            "github": {"client_id": "gh", "client_secret": "gh-secret"},
        },
    }
    path = tmp_path / "oauthbridge.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


@pytest.fixture
def mocked_httpx(monkeypatch: pytest.MonkeyPatch, provider: Any) -> Any:
    """Route every client the flow opens through the mock provider."""
    real_client = httpx.Client

    def _factory(**kwargs: Any) -> httpx.Client:
        return real_client(transport=httpx.MockTransport(provider.handler), **kwargs)

    monkeypatch.setattr("oauthbridge.flow.httpx.Client", _factory)
    return provider


class TestGlobalOptions:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_no_args_shows_help(self) -> None:
        result = runner.invoke(app, [])
        assert "authorize" in result.output
        assert "callback" in result.output

    def test_missing_settings_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--config", str(tmp_path / "absent.yaml"), "providers"])
        assert result.exit_code == EXIT_CONFIG_ERROR


class TestListing:
    def test_providers(self, settings_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(settings_file), "--json", "providers"])
        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        assert [row["ID"] for row in rows] == ["acme", "github"]
        assert rows[0]["Token auth"] == "client_secret_basic"
        assert rows[0]["User auth"] == "header Authorization: Bearer"

    def test_providers_from_env(
        self, settings_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("OAUTHBRIDGE_CONFIG", str(settings_file))
        result = runner.invoke(app, ["--format", "plain", "providers"])
        assert result.exit_code == 0
        assert result.stdout.splitlines()[0].startswith("ID\tName")

    def test_catalog(self) -> None:
        result = runner.invoke(app, ["--json", "catalog"])
        assert result.exit_code == 0
        ids = [row["ID"] for row in json.loads(result.stdout)]
        assert ids == sorted(ids)
        assert "google" in ids


class TestAuthorize:
    def test_prints_authorization_url(self, settings_file: Path) -> None:
        result = runner.invoke(
            app,
            ["--config", str(settings_file), "authorize", "acme", "--state", "xyz", "--prompt", "login"],
        )
        assert result.exit_code == 0
        url = result.stdout.strip()
        assert url.startswith("https://id.acme.test/oauth/authorize?")
        query = parse_qs(urlsplit(url).query)
        assert query["client_id"] == ["client-123"]
        assert query["state"] == ["xyz"]
        assert query["prompt"] == ["login"]

    def test_unknown_provider(self, settings_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(settings_file), "authorize", "nope"])
        assert result.exit_code == EXIT_CONFIG_ERROR


class TestCallback:
    def test_success_prints_profile_without_token(
        self, settings_file: Path, mocked_httpx: Any
    ) -> None:
        mocked_httpx.routes[TOKEN_URL] = httpx.Response(
            200, json={"access_token": "secret-token", "token_type": "Bearer", "scope": "openid"}
        )
        mocked_httpx.routes[USER_URL] = httpx.Response(200, json={"sub": "u9", "name": "Ann"})

        result = runner.invoke(
            app,
            ["--config", str(settings_file), "--quiet", "--json", "callback", "acme", f"{CALLBACK}?code=abc"],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["profile"] == {"provider": "acme", "sub": "u9", "name": "Ann", "id": "u9"}
        assert data["token"] == {"token_type": "Bearer", "scope": "openid"}
        assert "secret-token" not in result.output

    def test_denied(self, settings_file: Path, mocked_httpx: Any) -> None:
        result = runner.invoke(
            app,
            ["--config", str(settings_file), "callback", "acme", f"{CALLBACK}?error=access_denied"],
        )
        assert result.exit_code == EXIT_ACCESS_DENIED
        assert mocked_httpx.requests == []

    def test_provider_error(self, settings_file: Path, mocked_httpx: Any) -> None:
        mocked_httpx.routes[TOKEN_URL] = httpx.Response(400, json={"error": "invalid_grant"})

        result = runner.invoke(
            app,
            ["--config", str(settings_file), "callback", "acme", f"{CALLBACK}?code=stale"],
        )

        assert result.exit_code == EXIT_PROVIDER_ERROR

    def test_transport_error(self, settings_file: Path, mocked_httpx: Any) -> None:
        mocked_httpx.routes[TOKEN_URL] = httpx.ConnectError

        result = runner.invoke(
            app,
            ["--config", str(settings_file), "callback", "acme", f"{CALLBACK}?code=abc"],
        )

        assert result.exit_code == EXIT_TRANSPORT_ERROR

    def test_profile_without_id_is_rejected(
        self, settings_file: Path, mocked_httpx: Any
    ) -> None:
        mocked_httpx.routes[TOKEN_URL] = httpx.Response(200, json={"access_token": "t"})
        mocked_httpx.routes[USER_URL] = httpx.Response(200, json={"name": "Nobody"})

        result = runner.invoke(
            app,
            ["--config", str(settings_file), "callback", "acme", f"{CALLBACK}?code=abc"],
        )

        assert result.exit_code == EXIT_ACCESS_DENIED

    def test_no_code_prints_authorization_url(
        self, settings_file: Path, mocked_httpx: Any
    ) -> None:
        result = runner.invoke(
            app, ["--config", str(settings_file), "callback", "acme", CALLBACK]
        )
        assert result.exit_code == 0
        assert "https://id.acme.test/oauth/authorize?" in result.stdout
