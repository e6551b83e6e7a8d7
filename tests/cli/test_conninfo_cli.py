import json
import os
import subprocess
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError
from typer.testing import CliRunner

import conninfo_parse.cli.main as cli
from conninfo_parse.cli.main import app, main
from conninfo_parse.config import Settings, settings


runner = CliRunner()
REPO_ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture(autouse=True)
def default_cli_settings(monkeypatch):
    monkeypatch.setattr(settings, "CONNINFO_OUTPUT", "delimited")
    monkeypatch.setattr(settings, "CONNINFO_DELIMITER", "\t")
    monkeypatch.setattr(settings, "CONNINFO_USE_ENVIRONMENT", True)
    monkeypatch.setattr(settings, "CONNINFO_USE_DEFAULTS", True)
    monkeypatch.setattr(settings, "CONNINFO_LOG_TO_CONSOLE", False)
    monkeypatch.setattr(settings, "CONNINFO_LOG_FILE", None)
    monkeypatch.setattr(cli.config_module, "SETTINGS_ERROR", None)


def test_help_mentions_shell_option():
    result = runner.invoke(app, ["-h"])

    assert result.exit_code == 0
    assert "--shell" in result.stdout
    assert "conninfo" in result.stdout.lower()


def test_version():
    result = runner.invoke(app, ["-V"])

    assert result.exit_code == 0
    assert result.stdout.strip() == f"conninfo-parse version {cli.VERSION}"


def test_quiet_valid_input_exits_zero_without_output():
    result = runner.invoke(app, ["-q", "host=foo"])

    assert result.exit_code == 0
    assert result.output == ""


def test_quiet_invalid_input_exits_one_without_output():
    result = runner.invoke(app, ["-q", "fake=foo"])

    assert result.exit_code == 1
    assert result.output == ""


def test_default_output_is_tab_delimited():
    result = runner.invoke(app, ["host=foo"])

    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0] == "host\tfoo"
    assert "port\t5432" in lines


def test_custom_delimiter_without_defaults():
    result = runner.invoke(app, ["-d", ",", "--no-defaults", "host=foo dbname=bar"])

    assert result.exit_code == 0
    assert result.stdout == "host,foo\ndbname,bar\n"


def test_legacy_delimiter_option_name():
    result = runner.invoke(app, ["--delimiter", "|", "--no-defaults", "host=foo"])

    assert result.exit_code == 0
    assert result.stdout == "host|foo\n"


def test_empty_delimiter_is_a_usage_error():
    result = runner.invoke(app, ["-d", "", "host=foo"])

    assert result.exit_code == cli.EX_USAGE
    assert "invalid delimiter spec" in result.output


def test_shell_output():
    result = runner.invoke(app, ["-s", "--no-defaults", "host=foo application_name=O'Brien"])

    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["host='foo'", "application_name='O'\\''Brien'"]


def test_json_output():
    result = runner.invoke(app, ["-j", "--no-defaults", "postgresql://u:p@h:5432/db"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "user": "u",
        "password": "p",
        "host": "h",
        "port": "5432",
        "dbname": "db",
    }


def test_environment_is_used_unless_disabled(monkeypatch):
    monkeypatch.setenv("PGUSER", "alice")

    with_env = runner.invoke(app, ["--no-defaults", "host=foo"])
    without_env = runner.invoke(app, ["--no-defaults", "--no-env", "host=foo"])

    assert with_env.stdout == "host\tfoo\nuser\talice\n"
    assert without_env.stdout == "host\tfoo\n"


def test_settings_can_disable_defaults(monkeypatch):
    monkeypatch.setattr(settings, "CONNINFO_USE_DEFAULTS", False)

    result = runner.invoke(app, ["host=foo"])

    assert result.stdout == "host\tfoo\n"


def test_explain_table_shows_sources(monkeypatch):
    monkeypatch.setenv("PGUSER", "alice")

    result = runner.invoke(app, ["-e", "host=foo"])

    assert result.exit_code == 0
    assert "explicit" in result.stdout
    assert "environment" in result.stdout
    assert "default" in result.stdout
    assert "alice" in result.stdout


def test_parse_error_is_reported():
    result = runner.invoke(app, ["badtoken"])

    assert result.exit_code == 1
    assert "conninfo-parse: parse error:" in result.output
    assert "badtoken" in result.output


def test_unknown_keyword_is_reported():
    result = runner.invoke(app, ["bogus=1"])

    assert result.exit_code == 1
    assert 'invalid connection option "bogus"' in result.output


def test_missing_conninfo_is_a_usage_error():
    result = runner.invoke(app, [])

    assert result.exit_code == cli.EX_USAGE
    assert "expected conninfo string" in result.output
    assert "usage:" in result.output


def test_extra_argument_is_a_usage_error():
    result = runner.invoke(app, ["host=a", "host=b"])

    assert result.exit_code == cli.EX_USAGE
    assert "unexpected argument: host=b" in result.output


def test_conflicting_output_modes_are_a_usage_error():
    result = runner.invoke(app, ["-j", "-s", "host=foo"])

    assert result.exit_code == cli.EX_USAGE
    assert "conflicting output options" in result.output


def test_unavailable_output_mode_is_reported_before_parsing(monkeypatch):
    monkeypatch.setattr(settings, "CONNINFO_OUTPUT", "yaml")
    calls = []
    monkeypatch.setattr(cli, "parse_conninfo", lambda *a, **k: calls.append(a))

    result = runner.invoke(app, ["badtoken"])

    assert result.exit_code == cli.EX_UNAVAILABLE
    assert "yaml output not available" in result.output
    assert calls == []


def test_main_maps_unknown_options_to_usage_exit(capsys):
    assert main(["--bogus", "host=foo"]) == cli.EX_USAGE

    captured = capsys.readouterr()
    assert "usage: conninfo-parse" in captured.err


def test_main_returns_exit_codes(capsys):
    assert main(["-q", "host=foo"]) == cli.EX_OK
    assert main(["-q", "fake=foo"]) == cli.EX_ERR
    assert main(["-s", "--no-defaults", "host=foo"]) == cli.EX_OK

    captured = capsys.readouterr()
    assert captured.out == "host='foo'\n"


def test_main_help_exits_zero(capsys):
    assert main(["--help"]) == cli.EX_OK
    assert "--json" in capsys.readouterr().out


def test_main_maps_missing_option_value_to_usage_exit(capsys):
    assert main(["host=foo", "-d"]) == cli.EX_USAGE

    assert "usage: conninfo-parse" in capsys.readouterr().err


def test_invalid_settings_are_reported_as_config_error(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValidationError) as excinfo:
        Settings(CONNINFO_USE_DEFAULTS="maybe")
    monkeypatch.setattr(cli.config_module, "SETTINGS_ERROR", excinfo.value)
    calls = []
    monkeypatch.setattr(cli, "parse_conninfo", lambda *a, **k: calls.append(a))

    result = runner.invoke(app, ["host=foo"])

    assert result.exit_code == cli.EX_CONFIG
    assert "conninfo-parse: invalid configuration: CONNINFO_USE_DEFAULTS" in result.output
    assert calls == []


def _run_installed_cli(tmp_path, args, **extra_env):
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
    env.update(extra_env)
    return subprocess.run(
        [sys.executable, "-m", "conninfo_parse.cli.main", *args],
        cwd=tmp_path,
        env=env,
        capture_output=True,
        text=True,
        check=False,
    )


def test_process_exit_status_for_unknown_option(tmp_path):
    completed = _run_installed_cli(tmp_path, ["--bogus", "host=x"])

    assert completed.returncode == cli.EX_USAGE
    assert "Traceback" not in completed.stderr
    assert "usage: conninfo-parse" in completed.stderr


def test_process_exit_status_for_malformed_setting(tmp_path):
    completed = _run_installed_cli(tmp_path, ["host=x"], CONNINFO_USE_DEFAULTS="maybe")

    assert completed.returncode == cli.EX_CONFIG
    assert "Traceback" not in completed.stderr
    assert "invalid configuration" in completed.stderr


def test_process_survives_unknown_log_level(tmp_path):
    completed = _run_installed_cli(
        tmp_path, ["--no-defaults", "host=x"], CONNINFO_LOG_LEVEL="chatty"
    )

    assert completed.returncode == cli.EX_OK
    assert completed.stdout == "host\tx\n"
    assert "unknown log level 'CHATTY'" in completed.stderr
