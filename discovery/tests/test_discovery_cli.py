import json

import pytest
from typer.testing import CliRunner

from discovery import crawler
from discovery.cli import app

runner = CliRunner()

LISTINGS = {
    "": ["Maths/Chapter-1/", "Notes/todo.md"],
    "Maths/Chapter-1": [],
}


@pytest.fixture
def cli_args(tmp_path):
    return ["--log-file", str(tmp_path / "log.txt")]


@pytest.fixture
def vault(fake_vault, monkeypatch):
    vault = fake_vault(dict(LISTINGS))
    monkeypatch.setattr(crawler, "get_session", lambda *args, **kwargs: vault.session())
    return vault


def test_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Usage" in result.output
    assert "list" in result.output


def test_list_plain(cli_args, vault):
    result = runner.invoke(app, cli_args + ["list", "--enabled", "--api-key", "secret-key"])
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["Maths", "Maths/Chapter-1", "Notes"]


def test_list_json(cli_args, vault):
    result = runner.invoke(app, cli_args + ["list", "--enabled", "--api-key", "secret-key", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data[0] == {"path": "Maths", "name": "Maths"}
    assert [d["path"] for d in data] == ["Maths", "Maths/Chapter-1", "Notes"]


def test_list_tree(cli_args, vault):
    result = runner.invoke(app, cli_args + ["list", "--enabled", "--api-key", "secret-key", "--tree"])
    assert result.exit_code == 0, result.output
    assert "Chapter-1" in result.output
    assert "Notes" in result.output


def test_list_disabled_prints_nothing(cli_args, vault):
    result = runner.invoke(app, cli_args + ["list", "--api-key", "secret-key"])
    assert result.exit_code == 0
    assert result.output == ""
    assert vault.requests == []


def test_list_reads_config_file_and_env(cli_args, vault, tmp_path, monkeypatch):
    config = tmp_path / "vault.yaml"
    config.write_text("enabled: true\nhost: http://localhost\nport: 27123\n")
    monkeypatch.setenv("VAULT_API_KEY", "secret-key")
    result = runner.invoke(app, cli_args + ["list", "--config", str(config)])
    assert result.exit_code == 0, result.output
    assert "Maths/Chapter-1" in result.output.splitlines()


def test_list_root_failure_exits_1(cli_args, fake_vault, monkeypatch):
    vault = fake_vault({"": 500})
    monkeypatch.setattr(crawler, "get_session", lambda *args, **kwargs: vault.session())
    result = runner.invoke(app, cli_args + ["list", "--enabled", "--api-key", "secret-key"])
    assert result.exit_code == 1


def test_list_invalid_config_exits_2(cli_args, tmp_path):
    config = tmp_path / "bad.yaml"
    config.write_text("port: not-a-number\n")
    result = runner.invoke(app, cli_args + ["list", "--config", str(config)])
    assert result.exit_code == 2


def test_info_hides_key(cli_args):
    result = runner.invoke(app, cli_args + ["info", "--host", "http://localhost", "--port", "27123", "--api-key", "hidden-value"])
    assert result.exit_code == 0, result.output
    assert "http://localhost:27123/vault/" in result.output
    assert "hidden-value" not in result.output
    assert "API key: set" in result.output


@pytest.fixture
def registry_vault(fake_vault, monkeypatch):
    """Serve LISTINGS through the real session registry, recording created sessions."""
    from connectors import connections_manager

    vault = fake_vault(dict(LISTINGS))
    vault.created = []

    def make_session(base_url, api_key, verify=True):
        session = vault.session()
        session.verify = verify
        vault.created.append(session)
        return session

    monkeypatch.setattr(connections_manager, "RestVaultSession", make_session)
    return vault


def test_list_closes_sessions(cli_args, registry_vault):
    from connectors import connections_manager

    result = runner.invoke(app, cli_args + ["list", "--enabled", "--api-key", "secret-key"])
    assert result.exit_code == 0, result.output
    assert len(registry_vault.created) == 1
    assert registry_vault.created[0]._client.is_closed
    assert connections_manager._active_sessions == {}


def test_list_closes_sessions_on_root_failure(cli_args, registry_vault):
    registry_vault.listings[""] = 500
    result = runner.invoke(app, cli_args + ["list", "--enabled", "--api-key", "secret-key"])
    assert result.exit_code == 1
    assert registry_vault.created[0]._client.is_closed


def test_list_verifies_tls_by_default(cli_args, registry_vault):
    runner.invoke(app, cli_args + ["list", "--enabled", "--api-key", "secret-key"])
    assert registry_vault.created[0].verify is True


def test_list_insecure_and_ca_cert(cli_args, registry_vault, tmp_path):
    runner.invoke(app, cli_args + ["list", "--enabled", "--api-key", "secret-key", "--insecure"])
    ca = tmp_path / "api.crt"
    runner.invoke(app, cli_args + ["list", "--enabled", "--api-key", "secret-key", "--ca-cert", str(ca)])
    assert [s.verify for s in registry_vault.created] == [False, str(ca)]


def test_list_missing_ca_cert_exits_2(cli_args):
    result = runner.invoke(app, cli_args + ["list", "--enabled", "--api-key", "secret-key", "--ca-cert", "/nonexistent/ca.pem"])
    assert result.exit_code == 2


def test_info_prints_session_info(cli_args):
    result = runner.invoke(app, cli_args + ["info", "--api-key", "hidden-value", "--insecure"])
    assert result.exit_code == 0, result.output
    assert "type: rest_vault" in result.output
    assert "verify: False" in result.output
    assert "hidden-value" not in result.output
