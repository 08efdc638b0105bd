"""
Status use case — which configured archives exist and how big they are.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from slimpack.core.config.loader import ConfigError, find_config_file, load_config, project_root
from slimpack.core.models.package import PackagerConfig
from slimpack.core.services.archive import archive_size


@dataclass
class PackageStatus:
    name: str
    archive: str
    size: int | None = None
    workdir_present: bool = False

    @property
    def present(self) -> bool:
        return self.size is not None


@dataclass
class StatusResult:
    """Configured packages and the state of their archives."""

    config: PackagerConfig | None = None
    root: Path | None = None
    packages: list[PackageStatus] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        assert self.config is not None
        return {
            "root": str(self.root),
            "serverless_dir": self.config.serverless_dir,
            "package_manager": self.config.package_manager,
            "packages": [
                {
                    "name": p.name,
                    "archive": p.archive,
                    "present": p.present,
                    "size": p.size,
                    "workdir_present": p.workdir_present,
                }
                for p in self.packages
            ],
        }


def get_status(config_path: Path | None = None) -> StatusResult:
    """Load the config and inspect each package's archive."""
    result = StatusResult()

    try:
        if config_path is None:
            config_path = find_config_file()
        config = load_config(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    assert config_path is not None
    root = project_root(config_path)
    result.config = config
    result.root = root

    for pkg in config.packages:
        archive = config.archive_path(root, pkg.name)
        result.packages.append(PackageStatus(
            name=pkg.name,
            archive=str(archive.relative_to(root)),
            size=archive_size(archive),
            workdir_present=config.workdir_path(root, pkg.name).is_dir(),
        ))

    return result
