"""Tests for the command-line entry point."""

from pathlib import Path

import pytest

from tfridge import cli
from tfridge.resolvers import RegistryStatusError


class FakeRegistryClient:
    instances = []

    def __init__(self, base_url, timeout=None) -> None:
        self.base_url = base_url
        self.timeout = timeout
        FakeRegistryClient.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def resolve_latest_module_version(self, source):
        if source == "org/gone/aws":
            raise RegistryStatusError("failed to fetch latest version, status code: 404", 404)
        return "3.0.0"

    def resolve_latest_provider_version(self, source):
        return None


@pytest.fixture
def fake_registry(monkeypatch):
    FakeRegistryClient.instances = []
    monkeypatch.setattr(cli, "TerraformRegistryClient", FakeRegistryClient)
    return FakeRegistryClient


def test_parse_args_builds_config():
    config = cli.parse_args(
        ["infra", "--registry-url", "http://localhost/v1", "--timeout", "3", "--csv", "out.csv", "-v"]
    )

    assert config.root == Path("infra")
    assert config.registry_url == "http://localhost/v1"
    assert config.timeout == 3.0
    assert config.csv_path == Path("out.csv")
    assert config.json_path is None
    assert config.verbose is True
    assert config.extension == ".tf"


def test_missing_path_argument(capsys):
    assert cli.main([]) == 1
    assert "Please specify a path" in capsys.readouterr().err


def test_nonexistent_path(tmp_path: Path, capsys):
    missing = tmp_path / "nope"

    assert cli.main([str(missing)]) == 1
    assert f"Path '{missing}' does not exist." in capsys.readouterr().err


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])

    assert excinfo.value.code == 0
    assert "tfridge 0.0.1" in capsys.readouterr().out


def test_scan_prints_report_and_continues_after_errors(tmp_path: Path, capsys, fake_registry):
    (tmp_path / "main.tf").write_text(
        'module "a" {\n  source = "org/gone/aws"\n  version = "1.0.0"\n}\n'
        'module "b" {\n  source = "org/vpc/aws"\n  version = "2.0.0"\n}\n'
        'provider "aws"\n',
        encoding="utf-8",
    )

    status = cli.main([str(tmp_path), "--timeout", "4"])

    out = capsys.readouterr().out
    assert status == 0
    assert out.startswith(f"Scanning directory: {tmp_path}\n\n")
    assert "Error fetching latest version for org/gone/aws: " in out
    assert "Module source: org/vpc/aws\nCurrent version: 2.0.0\nLatest version: 3.0.0\n" in out
    assert "Provider source: aws\nCurrent version: \nLatest version: Not found\n" in out
    assert fake_registry.instances[0].timeout == 4.0


def test_scan_writes_exports(tmp_path: Path, fake_registry):
    tf_dir = tmp_path / "tf"
    tf_dir.mkdir()
    (tf_dir / "main.tf").write_text('provider "aws"\n', encoding="utf-8")
    csv_path = tmp_path / "out" / "report.csv"
    json_path = tmp_path / "out" / "report.json"

    status = cli.main([str(tf_dir), "--csv", str(csv_path), "--json", str(json_path)])

    assert status == 0
    assert csv_path.exists()
    assert json_path.exists()


def test_walk_failure_aborts_without_report(tmp_path: Path, monkeypatch, capsys, fake_registry):
    def failing_scan(root, extension):
        raise cli.ScanError("Permission denied")

    monkeypatch.setattr(cli, "scan_tree", failing_scan)

    assert cli.main([str(tmp_path)]) == 1
    captured = capsys.readouterr()
    assert "Error: Permission denied" in captured.err
    assert "source:" not in captured.out
    assert fake_registry.instances == []


def test_export_failure_is_reported_after_report(tmp_path: Path, monkeypatch, capsys, fake_registry):
    (tmp_path / "main.tf").write_text('provider "aws"\n', encoding="utf-8")

    def failing_export(entries, path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(cli, "export_report_csv", failing_export)

    status = cli.main([str(tmp_path), "--csv", str(tmp_path / "report.csv")])

    captured = capsys.readouterr()
    assert status == 1
    assert "Provider source: aws" in captured.out
    assert "Error: " in captured.err
    assert "Permission denied" in captured.err
