from __future__ import annotations

from typer.testing import CliRunner

import macfleet.cli.common as common
from macfleet.cli.app import app
from macfleet.config import load_credentials
from macfleet.core.auth import INVALIDATE_PATH, TOKEN_PATH
from macfleet.core.dispatcher import PLANS_PATH

from fakes import SEARCH_113, FakeHttp, FakeResponse

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "macfleet version" in result.stdout


def test_config_show_defaults():
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert "# source: built-in defaults" in result.stdout
    assert "ttl_seconds = 300.0" in result.stdout


def test_config_init_writes_file(tmp_path, monkeypatch):
    path = tmp_path / "new.toml"
    monkeypatch.setenv("MACFLEET_CONFIG", str(path))

    result = runner.invoke(app, ["config", "init"])

    assert result.exit_code == 0
    assert "[dispatch]" in path.read_text()

    again = runner.invoke(app, ["config", "init"])
    assert again.exit_code == 1


def test_config_path(configured):
    result = runner.invoke(app, ["config", "path"])

    assert result.exit_code == 0, result.output
    assert str(configured / "credentials") in result.stdout
    assert "(missing)" not in result.stdout


def test_devices_lists_search_and_ends_session(configured, jamf):
    result = runner.invoke(app, ["devices"])

    assert result.exit_code == 0, result.output
    assert "SERIALA1111" in result.stdout
    assert "Total Devices: 2" in result.stdout
    assert len(jamf.calls_to("POST", INVALIDATE_PATH)) == 1
    assert (configured / "cache" / "search_113.cache").exists()


def test_devices_redacted(configured, jamf):
    result = runner.invoke(app, ["devices", "--redact"])

    assert result.exit_code == 0, result.output
    assert "SERIALA1111" not in result.stdout
    assert "user01@example.com" in result.stdout


def test_second_run_uses_cache(configured, jamf):
    runner.invoke(app, ["devices"])
    runner.invoke(app, ["inactive"])

    assert len(jamf.calls_to("GET", SEARCH_113)) == 1


def test_devices_without_credentials_fails(configured, jamf):
    (configured / "credentials").unlink()

    result = runner.invoke(app, ["devices"])

    assert result.exit_code == 1
    assert "macfleet login" in result.output


def test_bad_credentials_fail_after_one_retry(configured, monkeypatch):
    http = FakeHttp()
    http.add("POST", TOKEN_PATH, FakeResponse(401))
    monkeypatch.setattr(common, "http_factory", lambda: http)

    result = runner.invoke(app, ["devices"])

    assert result.exit_code == 1
    assert len(http.calls_to("POST", TOKEN_PATH)) == 2


def test_distribution(configured, jamf):
    result = runner.invoke(app, ["distribution"])

    assert result.exit_code == 0, result.output
    assert "macOS 15.3.1" in result.stdout
    assert "macOS 14.7.2" in result.stdout


def test_find(configured, jamf):
    result = runner.invoke(app, ["find", "JOHN"])

    assert result.exit_code == 0, result.output
    assert "john@example.com" in result.stdout
    assert "jane@example.com" not in result.stdout


def test_export(configured, jamf):
    out = configured / "export.csv"

    result = runner.invoke(app, ["export", "--out", str(out)])

    assert result.exit_code == 0, result.output
    assert len(out.read_text().splitlines()) == 3


def test_outdated_without_update(configured, jamf):
    result = runner.invoke(app, ["outdated", "--latest", "15.3.1"])

    assert result.exit_code == 0, result.output
    assert "SERIALB2222" in result.stdout
    assert "Outdated: 1" in result.stdout
    assert "Pass --update" in result.stdout
    assert jamf.calls_to("POST", PLANS_PATH) == []


def test_outdated_sends_update_plans(configured, jamf):
    jamf.add("POST", PLANS_PATH, FakeResponse(201))

    result = runner.invoke(
        app,
        [
            "outdated",
            "--latest",
            "15.3.1",
            "--update",
            "--schedule",
            "2099-01-01 03:00",
        ],
    )

    assert result.exit_code == 0, result.output
    (call,) = jamf.calls_to("POST", PLANS_PATH)
    assert call.kwargs["json"]["devices"][0]["deviceId"] == "2"
    assert call.kwargs["json"]["config"]["forceInstallLocalDateTime"] == (
        "2099-01-01T03:00:00"
    )
    assert "Successfully sent: 1" in result.stdout


def test_outdated_prompts_again_for_bad_schedule(configured, jamf):
    jamf.add("POST", PLANS_PATH, FakeResponse(201))

    result = runner.invoke(
        app,
        ["outdated", "--latest", "15.3.1", "--update", "--schedule", "soon"],
        input="2099-01-01 03:00\n",
    )

    assert result.exit_code == 0, result.output
    assert "Invalid date format" in result.stdout
    assert len(jamf.calls_to("POST", PLANS_PATH)) == 1


def test_outdated_rejects_invalid_latest(configured, jamf):
    result = runner.invoke(app, ["outdated", "--latest", "fifteen"])
    assert result.exit_code == 1


def test_default_search(configured):
    result = runner.invoke(app, ["default-search", "200"])

    assert result.exit_code == 0, result.output
    assert load_credentials(configured / "credentials").default_search_id == "200"


def test_default_search_rejects_non_numeric(configured):
    result = runner.invoke(app, ["default-search", "abc"])

    assert result.exit_code == 1
    assert load_credentials(configured / "credentials").default_search_id == "113"


def test_login_without_verification(tmp_path):
    result = runner.invoke(
        app,
        [
            "login",
            "--url",
            "https://new.jamfcloud.com/",
            "--client-id",
            "abc",
            "--search-id",
            "7",
            "--no-verify",
        ],
        input="topsecret\n",
    )

    assert result.exit_code == 0, result.output
    saved = load_credentials(tmp_path / "credentials")
    assert saved.backend_url == "https://new.jamfcloud.com"
    assert saved.client_secret.get_secret_value() == "topsecret"
    assert saved.default_search_id == "7"


def test_login_verification_failure_keeps_old_file(configured, monkeypatch):
    http = FakeHttp()
    http.add("GET", "/api/v1/auth/current", FakeResponse(401))
    http.add("POST", TOKEN_PATH, FakeResponse(401))
    monkeypatch.setattr(common, "http_factory", lambda: http)

    result = runner.invoke(
        app,
        ["login", "--url", "https://x", "--client-id", "abc", "-i", "7"],
        input="wrong\n",
    )

    assert result.exit_code == 1
    saved = load_credentials(configured / "credentials")
    assert saved.client_id == "client-id"


def test_info_clear_cache(configured, jamf):
    runner.invoke(app, ["devices"])

    result = runner.invoke(app, ["info", "--clear-cache"])

    assert result.exit_code == 0, result.output
    assert "Removed 1 cached search(es)" in result.stdout
    assert not (configured / "cache" / "search_113.cache").exists()
