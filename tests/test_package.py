"""
Tests for the package use case — the full unzip → trim → install → rezip run.
"""

import json
import os
import zipfile
from pathlib import Path
from unittest.mock import patch

from slimpack.adapters.base import ExecutionContext
from slimpack.adapters.mock import MockAdapter
from slimpack.core.use_cases.package import run_packaging

from conftest import ARCHIVE_FILES, make_zip


def _names(archive: Path) -> set[str]:
    with zipfile.ZipFile(archive) as zf:
        return set(zf.namelist())


def _read(archive: Path, name: str) -> str:
    with zipfile.ZipFile(archive) as zf:
        return zf.read(name).decode()


class TestRunPackaging:
    def test_trims_all_packages(self, project: Path, config_path: Path, npm: MockAdapter):
        result = run_packaging(config_path=config_path, adapter=npm)

        assert result.ok, result.error
        assert [r.name for r in result.reports] == ["authorizer", "sampleapi"]
        assert npm.call_count == 2

        authorizer = project / ".serverless" / "authorizer.zip"
        names = _names(authorizer)
        assert "js/host/handler.js" in names
        assert not any(n.startswith(("js/logic/", "data/")) for n in names)
        assert "package.json" not in names
        assert "package-lock.json" not in names
        assert not any(n.startswith("src/") for n in names)
        assert "node_modules/middy/index.js" in names
        assert "app" not in json.loads(_read(authorizer, "api.config.json"))

        sampleapi = project / ".serverless" / "sampleapi.zip"
        names = _names(sampleapi)
        assert not any(n.startswith("js/framework-api-oauth/") for n in names)
        config = json.loads(_read(sampleapi, "api.config.json"))
        assert "oauth" not in config
        assert "app" in config

        assert not (project / ".serverless" / "authorizer").exists()
        assert not (project / ".serverless" / "sampleapi").exists()

    def test_reports(self, config_path: Path, npm: MockAdapter):
        result = run_packaging(config_path=config_path, adapter=npm)
        authorizer, sampleapi = result.reports

        assert authorizer.status == "ok"
        assert authorizer.step == "rezip"
        assert authorizer.removed_folders == ["js/logic", "data"]
        assert authorizer.removed_sections == ["app"]
        assert authorizer.removed_dependencies == []
        assert set(authorizer.removed_links) == {
            "node_modules/framework-api-base",
            "node_modules/framework-api-oauth",
        }
        assert authorizer.size_before and authorizer.size_after

        assert sampleapi.removed_dependencies == ["framework-api-oauth"]
        assert sampleapi.removed_links == ["node_modules/framework-api-base"]

    def test_only_filter(self, config_path: Path, npm: MockAdapter):
        result = run_packaging(config_path=config_path, only=["sampleapi"], adapter=npm)
        assert result.ok
        assert [r.name for r in result.reports] == ["sampleapi"]

    def test_only_unknown_package(self, config_path: Path, npm: MockAdapter):
        result = run_packaging(config_path=config_path, only=["nope"], adapter=npm)
        assert not result.ok
        assert "Unknown package" in result.error
        assert npm.call_count == 0

    def test_stops_at_first_failure(self, project: Path, config_path: Path, npm: MockAdapter):
        npm.set_failure("install:authorizer", stderr="ERESOLVE")
        original = (project / ".serverless" / "authorizer.zip").read_bytes()

        result = run_packaging(config_path=config_path, adapter=npm)

        assert not result.ok
        assert len(result.reports) == 1
        report = result.reports[0]
        assert report.status == "failed"
        assert report.step == "install"
        assert "Error installing npm packages for authorizer" in report.error
        # original archive untouched, working folder cleaned up
        assert (project / ".serverless" / "authorizer.zip").read_bytes() == original
        assert not (project / ".serverless" / "authorizer").exists()

    def test_keep_workdir_on_failure(self, project: Path, config_path: Path, npm: MockAdapter):
        npm.set_failure("install:authorizer")
        run_packaging(config_path=config_path, keep_workdir=True, adapter=npm)
        assert (project / ".serverless" / "authorizer").is_dir()

    def test_missing_archive(self, project: Path, config_path: Path, npm: MockAdapter):
        (project / ".serverless" / "authorizer.zip").unlink()
        result = run_packaging(config_path=config_path, adapter=npm)
        assert not result.ok
        assert result.reports[0].step == "unzip"
        assert "Archive not found" in result.error

    def test_missing_config(self, tmp_path: Path):
        result = run_packaging(config_path=tmp_path / "slimpack.yml")
        assert not result.ok
        assert "not found" in result.error

    def test_no_packages(self, tmp_path: Path):
        path = tmp_path / "slimpack.yml"
        path.write_text("package_manager: npm\n")
        result = run_packaging(config_path=path)
        assert result.error == "No packages configured."

    def test_to_dict(self, config_path: Path, npm: MockAdapter):
        data = run_packaging(config_path=config_path, adapter=npm).to_dict()
        assert data["ok"] is True
        assert data["packages"][0]["name"] == "authorizer"
        assert "saved_bytes" in data["packages"][0]

    def test_rezip_failure_keeps_archive_and_workdir(self, project: Path, config_path: Path, npm: MockAdapter):
        archive = project / ".serverless" / "authorizer.zip"
        original = archive.read_bytes()

        with patch("zipfile.ZipFile.write", side_effect=OSError(28, "No space left on device")):
            result = run_packaging(config_path=config_path, only=["authorizer"], adapter=npm)

        assert not result.ok
        report = result.reports[0]
        assert report.step == "rezip"
        assert "Cannot write archive for authorizer" in report.error
        assert archive.read_bytes() == original
        assert not (project / ".serverless" / "authorizer.zip.tmp").exists()
        assert (project / ".serverless" / "authorizer" / "js" / "host" / "handler.js").is_file()

    def test_non_utf8_config_fails_package(self, project: Path, config_path: Path, npm: MockAdapter):
        files = dict(ARCHIVE_FILES, **{"api.config.json": b"\xff\xfe{}"})
        make_zip(project / ".serverless" / "authorizer.zip", files)

        result = run_packaging(config_path=config_path, adapter=npm)

        assert not result.ok
        assert result.reports[0].step == "exclude-config"
        assert "Cannot decode" in result.error
        assert not (project / ".serverless" / "authorizer").exists()


def _fake_pnpm_install(ctx: ExecutionContext) -> None:
    """Lay out node_modules the way pnpm does: links into .pnpm."""
    cwd = Path(ctx.cwd)
    node_modules = cwd / "node_modules"
    node_modules.mkdir(exist_ok=True)
    manifest = json.loads((cwd / "package.json").read_text())
    for name in manifest.get("dependencies", {}):
        if name.startswith("framework-"):
            os.symlink(f"../src/{name}", node_modules / name)
            continue
        store = node_modules / ".pnpm" / f"{name}@1.0.0" / "node_modules" / name
        store.mkdir(parents=True)
        (store / "index.js").write_text("// dep")
        os.symlink(f".pnpm/{name}@1.0.0/node_modules/{name}", node_modules / name)


class TestPnpmLayout:
    def test_store_links_survive(self, project: Path, config_path: Path):
        config_path.write_text(config_path.read_text().replace("package_manager: npm", "package_manager: pnpm"))
        pnpm = MockAdapter(adapter_name="node", on_execute=_fake_pnpm_install)

        result = run_packaging(config_path=config_path, adapter=pnpm)

        assert result.ok, result.error
        authorizer = result.reports[0]
        assert "node_modules/middy" not in authorizer.removed_links
        assert set(authorizer.removed_links) == {
            "node_modules/framework-api-base",
            "node_modules/framework-api-oauth",
        }

        names = _names(project / ".serverless" / "authorizer.zip")
        assert "node_modules/middy/index.js" in names
        assert "node_modules/.pnpm/middy@1.0.0/node_modules/middy/index.js" in names
        assert not any(n.startswith("node_modules/framework-") for n in names)
