from __future__ import annotations

import enum
import logging
import os
import shutil
from pathlib import Path
from typing import Iterable, List

logger = logging.getLogger(__name__)


class LinkState(str, enum.Enum):
    CORRECT = "correct"
    CONFLICT = "conflict"
    MISSING = "missing"


def expand_patterns(src_dir: Path, patterns: Iterable[str]) -> List[Path]:
    """Files under src_dir matching the glob patterns, as relative paths, in pattern order."""

    out: List[Path] = []
    for pattern in patterns:
        for p in sorted(src_dir.glob(pattern)):
            if p.is_dir() and not p.is_symlink():
                continue
            rel = p.relative_to(src_dir)
            if rel not in out:
                out.append(rel)
    return out


def link_state(source: Path, dest: Path) -> LinkState:
    """Classify dest against the symlink we want it to be. Pure read.

    A dangling symlink counts as missing (it gets replaced); anything else
    that exists and is not our link is a conflict.
    """

    if dest.is_symlink() and os.readlink(dest) == str(source):
        return LinkState.CORRECT
    if dest.exists():
        return LinkState.CONFLICT
    return LinkState.MISSING


def ensure_symlink(source: Path, dest: Path, *, dry_run: bool = False) -> LinkState:
    """Create dest -> source unless dest is already correct or in the way.

    Returns the state found before acting; callers warn on CONFLICT.
    """

    state = link_state(source, dest)
    if state is not LinkState.MISSING:
        return state

    if dry_run:
        logger.info("Would symlink %s -> %s", dest, source)
        return state

    dest.parent.mkdir(parents=True, exist_ok=True)
    if dest.is_symlink():
        dest.unlink()
    dest.symlink_to(source)
    logger.info("'%s' -> '%s'", dest, source)
    return state


def default_dest_name(filename: str, suffix: str) -> str:
    """'bashrc.default' -> '.bashrc'."""

    return "." + filename[: -len(suffix)] if filename.endswith(suffix) else "." + filename


def copy_file(src: Path, dest: Path, *, dry_run: bool = False) -> None:
    if dry_run:
        logger.info("Would copy %s -> %s", src, dest)
        return
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dest)
    logger.info("Copied %s -> %s", src, dest)
