"""
Dependency operations — reinstall a minimal node_modules per archive.

The archive serverless builds carries node_modules for the whole
project. Here the project manifest is copied into the unpacked archive,
thinned to what this one function needs, and the package manager is run
against it. Afterwards the manifests are taken out again, along with the
symlinks the manager creates for ``file:`` local packages, which would
dangle once the archive is deployed.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from slimpack.adapters.base import Adapter, ExecutionContext
from slimpack.adapters.languages.node import NodeAdapter
from slimpack.core.models.action import Action, Receipt
from slimpack.core.models.package import PackagerConfig, PackageSpec
from slimpack.core.services.packaging_common import (
    PackagingError,
    read_json,
    remove_path,
    resolve_inside,
    write_json,
)

logger = logging.getLogger(__name__)

# Manifest sections that never belong in a deployed function
_STRIPPED_SECTIONS = ("devDependencies", "scripts")


@dataclass
class InstallOutcome:
    """What install_dependencies did to one working folder."""

    removed_dependencies: list[str] = field(default_factory=list)
    removed_links: list[str] = field(default_factory=list)
    receipt: Receipt | None = None


def thin_manifest(manifest_path: Path, remove: list[str]) -> list[str]:
    """Strip dev-only sections and the named runtime dependencies.

    Returns:
        The runtime dependencies that were present and removed.
    """
    pkg = read_json(manifest_path)

    for section in _STRIPPED_SECTIONS:
        pkg.pop(section, None)

    dependencies = pkg.get("dependencies")
    if not isinstance(dependencies, dict):
        dependencies = {}

    removed: list[str] = []
    for name in remove:
        if name in dependencies:
            del dependencies[name]
            removed.append(name)
        else:
            logger.warning("Dependency '%s' not listed in %s", name, manifest_path.name)

    write_json(manifest_path, pkg)
    return removed


def remove_local_links(workdir: Path, names: list[str]) -> list[str]:
    """Remove local packages and any symlinks left in node_modules.

    ``names`` are removed whether or not they are links. After that,
    every symlink at the top of node_modules (or directly inside an
    ``@scope`` folder) that points outside node_modules is removed too.
    Links into node_modules itself, such as pnpm's links into ``.pnpm``,
    are real dependencies and stay.

    Returns:
        Removed entries, relative to ``workdir``.
    """
    node_modules = workdir / "node_modules"
    if not node_modules.is_dir():
        return []

    removed: list[str] = []

    def _drop(path: Path) -> None:
        if remove_path(path):
            rel = path.relative_to(workdir).as_posix()
            logger.info("Removed local package link %s", rel)
            removed.append(rel)

    for name in names:
        _drop(_module_path(node_modules, name))

    inside = node_modules.resolve()
    for entry in sorted(node_modules.iterdir()):
        if entry.is_symlink():
            if _links_outside(entry, inside):
                _drop(entry)
        elif entry.is_dir() and entry.name.startswith("@"):
            for scoped in sorted(entry.iterdir()):
                if scoped.is_symlink() and _links_outside(scoped, inside):
                    _drop(scoped)

    return removed


def install_dependencies(
    config: PackagerConfig,
    root: Path,
    spec: PackageSpec,
    workdir: Path,
    adapter: Adapter | None = None,
) -> InstallOutcome:
    """Install a thinned dependency set into an unpacked archive.

    Args:
        config: Packager configuration.
        root: Project root (holds the manifest and local packages).
        spec: The package being trimmed.
        workdir: Its unpacked working folder.
        adapter: Package manager adapter (default: NodeAdapter).

    Raises:
        PackagingError: If the manifest is missing or the install fails.
    """
    outcome = InstallOutcome()
    if adapter is None:
        adapter = NodeAdapter(config.package_manager)

    copied, local_names = _copy_manifests(config, root, workdir)

    outcome.removed_dependencies = thin_manifest(
        workdir / config.manifest, spec.remove_dependencies,
    )

    action = Action(
        id=f"install:{spec.name}",
        adapter=adapter.name,
        operation="install",
        params={"package_manager": config.package_manager},
        for_package=spec.name,
    )
    context = ExecutionContext(action=action, cwd=str(workdir), timeout=config.install_timeout)
    receipt = adapter.run(context)
    outcome.receipt = receipt

    if receipt.failed:
        detail = f"{receipt.error} : {receipt.stderr}" if receipt.stderr else receipt.error
        raise PackagingError(
            f"Error installing {config.package_manager} packages for {spec.name}: {detail}"
        )

    for path in copied:
        remove_path(path)
        _prune_empty_parents(path.parent, workdir)

    outcome.removed_links = remove_local_links(workdir, local_names)
    return outcome


# ── Helpers ─────────────────────────────────────────────────────


def _copy_manifests(
    config: PackagerConfig, root: Path, workdir: Path,
) -> tuple[list[Path], list[str]]:
    """Copy manifest, lock file and local package manifests into workdir.

    Returns:
        (copied destination paths, node_modules names of local packages)
    """
    copied: list[Path] = []

    manifest = root / config.manifest
    if not manifest.is_file():
        raise PackagingError(f"Manifest not found: {manifest}")
    copied.append(_copy(manifest, resolve_inside(workdir, config.manifest)))

    lock = root / config.lock_file
    if lock.is_file():
        copied.append(_copy(lock, resolve_inside(workdir, config.lock_file)))
    else:
        logger.debug("No %s next to %s, installing without it", config.lock_file, config.manifest)

    names: list[str] = []
    for local in config.local_packages:
        source = root / local / "package.json"
        if not source.is_file():
            logger.warning("Local package %s has no package.json, skipping", local)
            continue
        names.append(str(read_json(source).get("name") or PurePosixPath(local).name))

        dest = resolve_inside(workdir, f"{local}/package.json")
        if dest.exists():
            # shipped in the archive already; leave it in place
            continue
        copied.append(_copy(source, dest))

    return copied, names


def _copy(source: Path, dest: Path) -> Path:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, dest)
    logger.debug("Copied %s -> %s", source, dest)
    return dest


def _module_path(node_modules: Path, name: str) -> Path:
    parts = PurePosixPath(name).parts
    if not parts or PurePosixPath(name).is_absolute() or ".." in parts:
        raise PackagingError(f"Invalid package name: {name!r}")
    return node_modules.joinpath(*parts)


def _links_outside(link: Path, node_modules: Path) -> bool:
    return node_modules not in link.resolve().parents


def _prune_empty_parents(directory: Path, stop: Path) -> None:
    """Remove empty directories from ``directory`` up to (not including) ``stop``."""
    stop = stop.resolve()
    current = directory.resolve()
    while current != stop and stop in current.parents:
        try:
            current.rmdir()
        except OSError:
            break  # not empty
        current = current.parent
