"""
Package use case — trim every configured serverless archive.

For each package, in configuration order:
    unzip → exclude folders → exclude config sections → install deps → rezip

The run stops at the first package that fails. The original archive is
only replaced in the rezip step, so a failed package keeps its archive.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from slimpack.adapters.base import Adapter
from slimpack.core.config.loader import ConfigError, find_config_file, load_config, project_root
from slimpack.core.models.package import PackagerConfig, PackageSpec
from slimpack.core.models.report import PackageReport
from slimpack.core.services.archive import archive_size, rezip_package, unzip_package
from slimpack.core.services.dependencies import install_dependencies
from slimpack.core.services.packaging_common import PackagingError, remove_path
from slimpack.core.services.prune import exclude_config_sections, exclude_folders

logger = logging.getLogger(__name__)


@dataclass
class PackagingResult:
    """Result of a packaging run."""

    config: PackagerConfig | None = None
    root: Path | None = None
    reports: list[PackageReport] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and all(r.status == "ok" for r in self.reports)

    def to_dict(self) -> dict:
        result: dict = {"ok": self.ok}
        if self.error:
            result["error"] = self.error
        if self.root:
            result["root"] = str(self.root)
        result["packages"] = [r.to_dict() for r in self.reports]
        return result


def package_one(
    config: PackagerConfig,
    root: Path,
    spec: PackageSpec,
    adapter: Adapter | None = None,
    keep_workdir: bool = False,
) -> PackageReport:
    """Run the full pipeline for one package.

    Packaging failures do not raise: the returned report has status
    "failed", the step that broke and the error message.
    """
    report = PackageReport(name=spec.name)
    start = time.monotonic()
    workdir = config.workdir_path(root, spec.name)

    try:
        report.step = "unzip"
        report.size_before = archive_size(config.archive_path(root, spec.name))
        workdir = unzip_package(config, root, spec.name)

        report.step = "exclude-folders"
        report.removed_folders = exclude_folders(workdir, spec.exclude_folders)

        report.step = "exclude-config"
        report.removed_sections = exclude_config_sections(
            workdir, config.config_file, spec.exclude_config_sections,
        )

        report.step = "install"
        outcome = install_dependencies(config, root, spec, workdir, adapter=adapter)
        report.removed_dependencies = outcome.removed_dependencies
        report.removed_links = outcome.removed_links

        report.step = "rezip"
        archive = rezip_package(config, root, spec.name)
        report.size_after = archive_size(archive)
    except (PackagingError, OSError) as e:
        report.status = "failed"
        report.error = str(e)
        report.duration_ms = int((time.monotonic() - start) * 1000)
        if keep_workdir or report.step == "rezip":
            # a failed rezip leaves the original archive; keep the trimmed tree too
            logger.warning("Keeping working folder %s for inspection", workdir)
        else:
            remove_path(workdir)
        return report

    report.status = "ok"
    report.duration_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        "Packaged %s: %s -> %s bytes", spec.name, report.size_before, report.size_after,
    )
    return report


def run_packaging(
    config_path: Path | None = None,
    only: list[str] | None = None,
    keep_workdir: bool = False,
    adapter: Adapter | None = None,
) -> PackagingResult:
    """Trim all configured packages (or just those named in ``only``).

    Args:
        config_path: Optional explicit path to slimpack.yml.
        only: Optional package names to restrict the run to.
        keep_workdir: Leave a failed package's working folder on disk.
        adapter: Optional package manager adapter (tests pass a mock).

    Returns:
        PackagingResult with one report per attempted package.
    """
    result = PackagingResult()

    try:
        if config_path is None:
            config_path = find_config_file()
        config = load_config(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    assert config_path is not None  # load_config raises when nothing is found
    result.config = config
    result.root = project_root(config_path)

    specs = config.packages
    if only:
        unknown = [name for name in only if config.get_package(name) is None]
        if unknown:
            result.error = f"Unknown package(s): {', '.join(unknown)}"
            return result
        specs = [p for p in specs if p.name in only]

    if not specs:
        result.error = "No packages configured."
        return result

    for spec in specs:
        report = package_one(config, result.root, spec, adapter=adapter, keep_workdir=keep_workdir)
        result.reports.append(report)
        if report.status == "failed":
            logger.error("Packaging %s failed at %s: %s", spec.name, report.step, report.error)
            result.error = report.error
            break

    return result
