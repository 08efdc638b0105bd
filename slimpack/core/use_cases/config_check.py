"""
Config check use case — validate slimpack.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from slimpack.adapters.languages.node import NodeAdapter
from slimpack.core.config.loader import ConfigError, find_config_file, load_config, project_root
from slimpack.core.models.package import PackagerConfig


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: PackagerConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "package_manager": self.config.package_manager if self.config else None,
            "package_count": len(self.config.packages) if self.config else 0,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate packager configuration against the project on disk.

    Args:
        config_path: Optional explicit path to slimpack.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
    if config_path is None:
        result.errors.append("No slimpack.yml found.")
        return result
    result.config_path = config_path

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.config = config
    root = project_root(config_path)

    if not config.packages:
        result.warnings.append("No packages defined. There is nothing to trim.")

    names = [p.name for p in config.packages]
    dupes = {n for n in names if names.count(n) > 1}
    if dupes:
        result.errors.append(f"Duplicate package names: {', '.join(sorted(dupes))}")

    if not (root / config.manifest).is_file():
        result.errors.append(f"Manifest not found: {config.manifest}")

    for local in config.local_packages:
        if not (root / local / "package.json").is_file():
            result.warnings.append(f"Local package has no package.json: {local}")

    for pkg in config.packages:
        if not config.archive_path(root, pkg.name).is_file():
            result.warnings.append(
                f"Archive for '{pkg.name}' not found: {config.serverless_dir}/{pkg.name}.zip "
                "(run 'serverless package' first)"
            )

    if not NodeAdapter(config.package_manager).is_available():
        result.warnings.append(f"{config.package_manager} not found on PATH")

    result.valid = len(result.errors) == 0
    return result
