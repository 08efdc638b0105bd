"""
Archive operations — unpack a serverless archive and pack it back up.

``serverless package`` leaves one ``<name>.zip`` per function in the
serverless directory. Each is unpacked into a sibling ``<name>/`` folder,
trimmed in place, and then zipped back over the original.
"""

from __future__ import annotations

import logging
import os
import stat
import zipfile
from pathlib import Path, PurePosixPath

from slimpack.core.models.package import PackagerConfig
from slimpack.core.services.packaging_common import PackagingError, remove_path

logger = logging.getLogger(__name__)


def archive_size(path: Path) -> int | None:
    """Size of an archive in bytes, or None if it does not exist."""
    try:
        return path.stat().st_size
    except FileNotFoundError:
        return None


def unzip_package(config: PackagerConfig, root: Path, name: str) -> Path:
    """Extract ``<serverless_dir>/<name>.zip`` into its working folder.

    A leftover working folder from an earlier run is replaced.

    Returns:
        The working folder.
    """
    archive = config.archive_path(root, name)
    workdir = config.workdir_path(root, name)

    if not archive.is_file():
        raise PackagingError(f"Archive not found for {name}: {archive}")

    if remove_path(workdir):
        logger.debug("Removed stale working folder %s", workdir)
    workdir.mkdir(parents=True)

    logger.info("Unzipping %s", archive)
    try:
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(workdir)
            _restore_modes(zf, workdir)
    except (zipfile.BadZipFile, RuntimeError, NotImplementedError) as e:
        # RuntimeError: encrypted entries; NotImplementedError: unsupported compression
        raise PackagingError(f"Cannot read archive for {name}: {e}") from e

    return workdir


def rezip_package(config: PackagerConfig, root: Path, name: str) -> Path:
    """Replace ``<name>.zip`` with an archive of the trimmed working folder.

    The new archive is written next to the old one and swapped in with
    ``os.replace``; the working folder is deleted only after that, so a
    failed write leaves both the original archive and the trimmed tree.

    Symlinks that resolve inside the working folder are followed and
    stored as regular entries (pnpm links every dependency out of
    ``node_modules/.pnpm``). Links pointing elsewhere are skipped.

    Returns:
        The rewritten archive.
    """
    archive = config.archive_path(root, name)
    workdir = config.workdir_path(root, name)

    if not workdir.is_dir():
        raise PackagingError(f"Working folder not found for {name}: {workdir}")

    partial = archive.with_name(f"{archive.name}.tmp")
    logger.info("Rezipping %s", archive)
    try:
        with zipfile.ZipFile(partial, "w", zipfile.ZIP_DEFLATED) as zf:
            base = workdir.resolve()
            count = _add_tree(zf, workdir, PurePosixPath(), base, frozenset({base}))
        os.replace(partial, archive)
    except OSError as e:
        remove_path(partial)
        raise PackagingError(f"Cannot write archive for {name}: {e}") from e

    remove_path(workdir)
    logger.debug("Wrote %d files to %s", count, archive)
    return archive


def _add_tree(
    zf: zipfile.ZipFile,
    directory: Path,
    arcbase: PurePosixPath,
    base: Path,
    seen: frozenset[Path],
) -> int:
    """Write ``directory`` into the archive under ``arcbase``, following in-tree links."""
    count = 0
    for entry in sorted(directory.iterdir()):
        arcname = arcbase / entry.name
        target = entry
        if entry.is_symlink():
            target = entry.resolve()
            if not target.exists() or (target != base and base not in target.parents):
                logger.debug("Skipping link %s -> %s", entry, target)
                continue

        if target.is_dir():
            real = target.resolve()
            if real in seen:
                logger.debug("Skipping link cycle at %s", entry)
                continue
            count += _add_tree(zf, target, arcname, base, seen | {real})
        elif target.is_file():
            zf.write(target, arcname.as_posix())
            count += 1
    return count


def _restore_modes(zf: zipfile.ZipFile, workdir: Path) -> None:
    """Reapply unix permission bits stored in the archive.

    ``ZipFile.extractall`` drops them, which would strip the executable
    bit from binaries shipped inside node_modules.
    """
    base = workdir.resolve()
    for info in zf.infolist():
        mode = (info.external_attr >> 16) & 0o777
        if not mode or info.is_dir() or stat.S_ISLNK(info.external_attr >> 16):
            continue
        target = (workdir / info.filename).resolve()
        if base not in target.parents:
            continue  # extractall sanitized this name; leave it alone
        if target.is_file():
            target.chmod(mode)
