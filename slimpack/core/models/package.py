"""
Packager configuration models — what to trim from which archive.

Loaded from slimpack.yml. Each PackageSpec names one archive produced
by ``serverless package`` and the pieces of it that the function
behind that archive never touches.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

# Lock file that accompanies the manifest for each package manager
LOCK_FILES: dict[str, str] = {
    "npm": "package-lock.json",
    "yarn": "yarn.lock",
    "pnpm": "pnpm-lock.yaml",
}


class PackageSpec(BaseModel):
    """One deployment archive and what to strip from it."""

    name: str
    description: str = ""
    exclude_folders: list[str] = Field(default_factory=list)
    exclude_config_sections: list[str] = Field(default_factory=list)
    remove_dependencies: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _plain_name(cls, value: str) -> str:
        if not value or "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError(f"package name must be a plain file stem, got {value!r}")
        return value


class PackagerConfig(BaseModel):
    """Root packager configuration.

    Paths are relative to the directory that holds slimpack.yml.
    """

    version: int = 1

    serverless_dir: str = ".serverless"
    config_file: str = "api.config.json"
    manifest: str = "package.json"
    package_manager: Literal["npm", "yarn", "pnpm"] = "npm"
    install_timeout: int = Field(default=600, gt=0)

    local_packages: list[str] = Field(default_factory=list)
    packages: list[PackageSpec] = Field(default_factory=list)

    @property
    def lock_file(self) -> str:
        """Lock file name for the configured package manager."""
        return LOCK_FILES[self.package_manager]

    def get_package(self, name: str) -> PackageSpec | None:
        """Look up a package spec by name."""
        for pkg in self.packages:
            if pkg.name == name:
                return pkg
        return None

    def archive_path(self, root: Path, name: str) -> Path:
        """Path of the zip archive serverless produced for a package."""
        return root / self.serverless_dir / f"{name}.zip"

    def workdir_path(self, root: Path, name: str) -> Path:
        """Temporary folder a package is unpacked into while it is trimmed."""
        return root / self.serverless_dir / name
