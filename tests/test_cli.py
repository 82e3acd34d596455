"""Command line entry point and exit codes."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from eventcatalog_openapi import cli
from eventcatalog_openapi.errors import CatalogWriteError


def _options_file(tmp_path: Path, data) -> str:
    path = tmp_path / "generator.yml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return str(path)


def test_run_writes_catalog(tmp_path: Path, catalog_dir: Path, openapi_files: Path) -> None:
    config = _options_file(tmp_path, {"services": [{"path": str(openapi_files / "sends-and-receives.yml")}]})

    code = cli.main(["run", "--config", config, "--project-dir", str(catalog_dir)])

    assert code == cli.EXIT_OK
    assert (catalog_dir / "services" / "orders-api" / "index.md").is_file()
    assert (catalog_dir / "services" / "orders-api" / "sends-and-receives.yml").is_file()


def test_save_parsed_spec_flag(tmp_path: Path, catalog_dir: Path, openapi_files: Path) -> None:
    config = _options_file(tmp_path, {"services": [{"path": str(openapi_files / "petstore.yml")}]})

    code = cli.main(["run", "-c", config, "--project-dir", str(catalog_dir), "--save-parsed-spec-file"])

    assert code == cli.EXIT_OK
    stored = (catalog_dir / "services" / "swagger-petstore" / "petstore.yml").read_text(encoding="utf-8")
    assert "$ref" not in stored


def test_invalid_spec_still_exits_ok(tmp_path: Path, catalog_dir: Path, openapi_files: Path) -> None:
    config = _options_file(tmp_path, {"services": [{"path": str(openapi_files / "invalid.yml")}]})

    assert cli.main(["run", "-c", config, "--project-dir", str(catalog_dir)]) == cli.EXIT_OK


def test_missing_options_file(tmp_path: Path, catalog_dir: Path) -> None:
    code = cli.main(["run", "-c", str(tmp_path / "missing.yml"), "--project-dir", str(catalog_dir)])

    assert code == cli.EXIT_CONFIG


def test_options_without_services(tmp_path: Path, catalog_dir: Path) -> None:
    config = _options_file(tmp_path, {"services": []})

    assert cli.main(["run", "-c", config, "--project-dir", str(catalog_dir)]) == cli.EXIT_CONFIG


def test_options_file_must_be_a_mapping(tmp_path: Path, catalog_dir: Path) -> None:
    config = _options_file(tmp_path, ["not", "a", "mapping"])

    assert cli.main(["run", "-c", config, "--project-dir", str(catalog_dir)]) == cli.EXIT_CONFIG


def test_project_dir_pointing_at_a_file(tmp_path: Path, openapi_files: Path) -> None:
    config = _options_file(tmp_path, {"services": [{"path": str(openapi_files / "petstore.yml")}]})

    assert cli.main(["run", "-c", config, "--project-dir", config]) == cli.EXIT_CONFIG


def test_generator_failure_exit_code(
    tmp_path: Path, catalog_dir: Path, openapi_files: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def failing_run(*args, **kwargs):
        raise CatalogWriteError(kind="services", resource_id="orders-api", version="1.0.0", reason="disk full")

    monkeypatch.setattr(cli, "run_generator", failing_run)
    config = _options_file(tmp_path, {"services": [{"path": str(openapi_files / "petstore.yml")}]})

    assert cli.main(["run", "-c", config, "--project-dir", str(catalog_dir)]) == cli.EXIT_FAILED


def test_subcommand_is_required() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main([])

    assert exc.value.code == 2
