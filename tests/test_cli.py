"""Tests for the command line entry point."""

import json
from unittest.mock import patch

import pytest
import yaml

import modinstall
from args import parse_args
from constants import Constants, ExitCodes
from errors import InvalidName, TransportError, UnpackError
from installer.orchestrator import InstallResult, InstallStatus
from versioning.constraints import parse_version
from versioning.models import ModuleName, ResolutionNode


def make_tree():
    stdlib = ResolutionNode(ModuleName("pmtacceptance", "stdlib"), parse_version("1.0.0"), "/stdlib.tar.gz", ())
    java = ResolutionNode(ModuleName("pmtacceptance", "java"), parse_version("1.7.1"), "/java.tar.gz", ())
    return ResolutionNode(ModuleName("pmtacceptance", "apollo"), parse_version("0.0.2"), "/apollo.tar.gz",
                          (java, stdlib))


def success():
    tree = make_tree()
    return InstallResult(result=InstallStatus.SUCCESS, installed_modules=[tree.to_dict()], tree=tree)


@pytest.fixture(autouse=True)
def cli_env(monkeypatch):
    """Stop main() from touching global logging or reading real config files."""
    monkeypatch.setenv(Constants.ENV_LOG_LEVEL, "INFO")
    monkeypatch.setattr(Constants, "FORGE_URL", Constants.FORGE_URL)
    with patch("modinstall.configure_logging"), patch("modinstall.load_yaml_config") as mock_config:
        yield mock_config


def test_parse_install_arguments():
    args = parse_args(["--loglevel", "debug", "install", "pmtacceptance-apollo",
                       "-v", ">= 0.0.1", "--target-dir", "/tmp/mods", "--force", "--json"])
    assert args.LOG_LEVEL == "DEBUG"
    assert args.COMMAND == "install"
    assert args.MODULE == "pmtacceptance-apollo"
    assert args.VERSION == ">= 0.0.1"
    assert args.DIR == "/tmp/mods"
    assert args.FORCE and args.JSON
    assert not args.IGNORE_DEPENDENCIES


def test_missing_command_exits():
    with pytest.raises(SystemExit):
        parse_args([])


@patch("modinstall.install")
def test_install_success_prints_tree(mock_install, capsys, tmp_path):
    mock_install.return_value = success()

    code = modinstall.main(["install", "pmtacceptance-apollo", "-i", str(tmp_path)])

    assert code == ExitCodes.SUCCESS.value
    out = capsys.readouterr().out.splitlines()
    assert out[0] == str(tmp_path)
    assert out[1] == "└─┬ pmtacceptance-apollo (v0.0.2)"
    assert out[2] == "  ├── pmtacceptance-java (v1.7.1)"
    assert out[3] == "  └── pmtacceptance-stdlib (v1.0.0)"
    raw_name, options = mock_install.call_args[0]
    assert raw_name == "pmtacceptance-apollo"
    assert options.dir == str(tmp_path)
    assert options.force is False


@patch("modinstall.install")
def test_install_json_output(mock_install, capsys, tmp_path):
    mock_install.return_value = success()
    assert modinstall.main(["install", "pmtacceptance-apollo", "-i", str(tmp_path), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["result"] == "success"
    assert data["installed_modules"][0]["module"] == "pmtacceptance-apollo"


@patch("modinstall.install")
def test_resolution_failure_exit_code(mock_install, capsys, tmp_path):
    error = {"oneline": "'pmtacceptance-apollo' (v0.0.1) requested; Invalid dependency cycle",
             "multiline": "Could not install module 'pmtacceptance-apollo' (v0.0.1)"}
    mock_install.return_value = InstallResult(result=InstallStatus.FAILURE, error=error)

    code = modinstall.main(["install", "pmtacceptance-apollo", "-v", "0.0.1", "-i", str(tmp_path)])

    assert code == ExitCodes.RESOLUTION_FAILED.value
    assert "Could not install module" in capsys.readouterr().err


@pytest.mark.parametrize("exc, expected", [
    (InvalidName("puppet"), ExitCodes.USAGE_ERROR),
    (TransportError("connection reset"), ExitCodes.CONNECTION_ERROR),
    (UnpackError("/a.tar.gz", "truncated"), ExitCodes.FILE_ERROR),
])
@patch("modinstall.install")
def test_errors_map_to_exit_codes(mock_install, exc, expected, tmp_path):
    mock_install.side_effect = exc
    assert modinstall.main(["install", "puppet", "-i", str(tmp_path)]) == expected.value


@patch("modinstall.install")
def test_forge_option_overrides_url(mock_install, tmp_path):
    mock_install.return_value = success()
    modinstall.main(["install", "pmtacceptance-apollo", "-i", str(tmp_path), "--forge", "https://mirror.example.com"])
    assert Constants.FORGE_URL == "https://mirror.example.com"


@patch("modinstall.install")
def test_bad_config_is_a_file_error(mock_install, cli_env, tmp_path):
    cli_env.side_effect = yaml.YAMLError("bad")
    assert modinstall.main(["install", "pmtacceptance-apollo", "-i", str(tmp_path)]) == ExitCodes.FILE_ERROR.value
    mock_install.assert_not_called()
