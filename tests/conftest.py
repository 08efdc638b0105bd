"""
Shared test fixtures — a throwaway serverless project on disk.
"""

import json
import os
import textwrap
import zipfile
from pathlib import Path

import pytest

from slimpack.adapters.base import ExecutionContext
from slimpack.adapters.mock import MockAdapter

CONFIG_YML = textwrap.dedent("""\
    serverless_dir: .serverless
    config_file: api.config.json
    package_manager: npm
    local_packages:
      - src/framework-api-base
      - src/framework-api-oauth
    packages:
      - name: authorizer
        exclude_folders: [js/logic, data]
        exclude_config_sections: [app]
      - name: sampleapi
        exclude_folders: [js/framework-api-oauth]
        exclude_config_sections: [oauth]
        remove_dependencies: [framework-api-oauth]
""")

PACKAGE_JSON = {
    "name": "sample",
    "version": "1.0.0",
    "scripts": {"build": "tsc"},
    "dependencies": {
        "framework-api-base": "file:src/framework-api-base",
        "framework-api-oauth": "file:src/framework-api-oauth",
        "middy": "^1.0.0",
    },
    "devDependencies": {"typescript": "^5.0.0"},
}

API_CONFIG = {"app": {"port": 80}, "oauth": {"issuer": "https://login"}, "logging": {"level": "info"}}

ARCHIVE_FILES = {
    "js/host/handler.js": "exports.handler = () => {};",
    "js/logic/service.js": "module.exports = {};",
    "js/framework-api-oauth/index.js": "module.exports = {};",
    "data/rows.json": "[]",
    "api.config.json": json.dumps(API_CONFIG),
    "node_modules/typescript/index.js": "// big",
}


def make_zip(path: Path, files: dict[str, str | bytes]) -> Path:
    """Write a zip with the given {arcname: content} entries."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return path


def fake_npm_install(ctx: ExecutionContext) -> None:
    """Leave behind what `npm install` would for the fixture manifest."""
    cwd = Path(ctx.cwd)
    node_modules = cwd / "node_modules"
    manifest = json.loads((cwd / "package.json").read_text())
    for name in manifest.get("dependencies", {}):
        if name.startswith("framework-"):
            node_modules.mkdir(exist_ok=True)
            os.symlink(f"../src/{name}", node_modules / name)
        else:
            (node_modules / name).mkdir(parents=True, exist_ok=True)
            (node_modules / name / "index.js").write_text("// dep")


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project root with slimpack.yml, manifests and two archives."""
    (tmp_path / "slimpack.yml").write_text(CONFIG_YML)
    (tmp_path / "package.json").write_text(json.dumps(PACKAGE_JSON, indent=2))
    (tmp_path / "package-lock.json").write_text(json.dumps({"lockfileVersion": 3}))
    for local in ("framework-api-base", "framework-api-oauth"):
        pkg_dir = tmp_path / "src" / local
        pkg_dir.mkdir(parents=True)
        (pkg_dir / "package.json").write_text(json.dumps({"name": local, "version": "1.0.0"}))
    for name in ("authorizer", "sampleapi"):
        make_zip(tmp_path / ".serverless" / f"{name}.zip", ARCHIVE_FILES)
    return tmp_path


@pytest.fixture
def config_path(project: Path) -> Path:
    return project / "slimpack.yml"


@pytest.fixture
def npm() -> MockAdapter:
    """Mock package manager that fakes an install on disk."""
    return MockAdapter(adapter_name="node", on_execute=fake_npm_install)
