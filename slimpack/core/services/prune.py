"""
Prune operations — drop folders and config sections a function never uses.
"""

from __future__ import annotations

import logging
from pathlib import Path

from slimpack.core.services.packaging_common import (
    PackagingError,
    read_json,
    remove_path,
    resolve_inside,
    write_json,
)

logger = logging.getLogger(__name__)


def exclude_folders(workdir: Path, folders: list[str]) -> list[str]:
    """Delete the named folders from an unpacked archive.

    Folders that do not exist are skipped silently.

    Returns:
        The folders that were actually removed.
    """
    removed: list[str] = []
    for folder in folders:
        target = resolve_inside(workdir, folder)
        if remove_path(target):
            logger.info("Removed %s", folder)
            removed.append(folder)
        else:
            logger.debug("Nothing to remove at %s", folder)
    return removed


def exclude_config_sections(workdir: Path, config_file: str, sections: list[str]) -> list[str]:
    """Delete top-level sections from the JSON config shipped in the archive.

    Does nothing when ``sections`` is empty, so packages without a config
    file are fine as long as they list no sections.

    Returns:
        The sections that were present and removed.
    """
    if not sections:
        return []

    path = resolve_inside(workdir, config_file)
    if not path.is_file():
        raise PackagingError(f"Config file {config_file} not found in {workdir.name}")

    config = read_json(path)
    removed: list[str] = []
    for section in sections:
        if section in config:
            del config[section]
            removed.append(section)
        else:
            logger.warning("Config section '%s' not present in %s", section, config_file)

    write_json(path, config)
    logger.info("Removed config sections %s from %s", removed, config_file)
    return removed
