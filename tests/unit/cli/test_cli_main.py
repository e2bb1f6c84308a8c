"""Tests for CLI entrypoint."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from neckar_cli.main import _parse_vars, app
from neckar_core.exceptions import AuthenticationError
from neckar_core.models.upload import UploadedFile

runner = CliRunner()


def _mock_client() -> MagicMock:
    """Create a NeckarClient mock usable as an async context manager."""
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    client.token = AsyncMock(return_value="tok-1")
    client.fetch_userinfo = AsyncMock(return_value={"sub": "user-1"})
    client.graphql = AsyncMock(return_value={"cluster": {"id": "c1"}})
    client.upload_file = AsyncMock(return_value=UploadedFile(id="file-1", name="a.txt"))
    client.login_into.return_value = client
    return client


@pytest.fixture
def client() -> MagicMock:
    """Patch NeckarClient and logging setup for the duration of a test."""
    mock_client = _mock_client()
    with (
        patch("neckar_cli.main.NeckarClient", return_value=mock_client),
        patch("neckar_cli.main.configure_logging"),
    ):
        yield mock_client  # type: ignore[misc]


@pytest.mark.unit
class TestTokenCommand:
    """The 'token' command."""

    def test_prints_token(self, client: MagicMock) -> None:
        """The current token is printed."""
        result = runner.invoke(app, ["token"])
        assert result.exit_code == 0
        assert "tok-1" in result.output

    def test_no_credentials(self, client: MagicMock) -> None:
        """No strategy configured exits with code 1."""
        client.token.return_value = None
        result = runner.invoke(app, ["token"])
        assert result.exit_code == 1
        assert "No credentials configured" in result.output

    def test_client_error_exits_1(self, client: MagicMock) -> None:
        """Client errors are reported and exit with code 1."""
        client.token.side_effect = AuthenticationError("token request rejected with status 401")
        result = runner.invoke(app, ["token"])
        assert result.exit_code == 1
        assert "rejected" in result.output


@pytest.mark.unit
class TestQueryCommand:
    """The 'query' command."""

    def test_query_with_vars_and_cluster(self, client: MagicMock) -> None:
        """Variables are parsed and the client logs into the cluster."""
        result = runner.invoke(
            app,
            ["query", "{ q }", "--var", "slug=suprematic", "--var", "limit=5", "--cluster", "acme"],
        )
        assert result.exit_code == 0, result.output
        client.login_into.assert_called_once_with("acme", None)
        client.graphql.assert_awaited_once_with("{ q }", {"slug": "suprematic", "limit": 5})
        assert json.loads(result.output) == {"cluster": {"id": "c1"}}

    def test_query_from_file(self, client: MagicMock, tmp_path: Path) -> None:
        """@path reads the document from a file."""
        doc = tmp_path / "q.graphql"
        doc.write_text("query { me }")
        result = runner.invoke(app, ["query", f"@{doc}"])
        assert result.exit_code == 0, result.output
        client.graphql.assert_awaited_once_with("query { me }", None)
        client.login_into.assert_not_called()

    def test_bad_var(self, client: MagicMock) -> None:
        """A variable without '=' is rejected."""
        result = runner.invoke(app, ["query", "{ q }", "--var", "oops"])
        assert result.exit_code != 0

    def test_subject_requires_cluster(self, client: MagicMock) -> None:
        """--subject alone is rejected instead of being dropped."""
        result = runner.invoke(app, ["query", "{ q }", "--subject", "user-7"])
        assert result.exit_code == 2
        client.graphql.assert_not_awaited()


@pytest.mark.unit
class TestOtherCommands:
    """userinfo, upload and version."""

    def test_userinfo(self, client: MagicMock) -> None:
        """Userinfo JSON is printed."""
        result = runner.invoke(app, ["userinfo"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {"sub": "user-1"}

    def test_upload(self, client: MagicMock, tmp_path: Path) -> None:
        """The file is uploaded and its id printed."""
        path = tmp_path / "a.txt"
        path.write_text("abc")
        result = runner.invoke(app, ["upload", str(path), "--cluster", "acme"])
        assert result.exit_code == 0, result.output
        assert "file-1" in result.output
        client.upload_file.assert_awaited_once_with(path, content_type=None)
        client.login_into.assert_called_once_with("acme")

    def test_version(self) -> None:
        """Version prints the package version."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "neckar-client" in result.output


@pytest.mark.unit
class TestParseVars:
    """Variable parsing."""

    def test_json_and_string_values(self) -> None:
        """JSON values are decoded; everything else stays a string."""
        assert _parse_vars(["a=1", "b=true", "c=hello", 'd={"x": 1}', "e="]) == {
            "a": 1,
            "b": True,
            "c": "hello",
            "d": {"x": 1},
            "e": "",
        }


@pytest.mark.unit
class TestSettingsErrors:
    """Invalid configuration is reported like any other client error."""

    def test_both_credential_blocks(self, tmp_path: Path) -> None:
        """A file naming both strategies exits 1 with a red error line."""
        path = tmp_path / "both.json"
        path.write_text(
            json.dumps(
                {
                    "auth": {"realm": "r", "client_id": "c", "username": "u", "password": "p"},
                    "vault": {"url": "v", "role_id": "r", "secret_id": "s", "role_name": "n"},
                }
            )
        )
        with patch("neckar_cli.main.NeckarClient") as client_cls:
            result = runner.invoke(app, ["token", "--config", str(path)])
        output = " ".join(result.output.split())
        assert result.exit_code == 1
        assert "Error:" in output
        assert "not both" in output
        client_cls.assert_not_called()

    def test_unreadable_settings_file(self, tmp_path: Path) -> None:
        """A settings file that is not JSON exits 1."""
        path = tmp_path / "broken.json"
        path.write_text("{auth: ")
        result = runner.invoke(app, ["userinfo", "--config", str(path)])
        assert result.exit_code == 1
        assert "Error:" in result.output
