from __future__ import annotations

import logging
from pathlib import Path

from .command import CommandRunner

logger = logging.getLogger(__name__)


def write_system_file(cmd: CommandRunner, path: Path, text: str, *, use_sudo: bool) -> None:
    """Replace a (possibly root-owned) file with text and make it world-readable."""

    if use_sudo:
        cmd.run(["sudo", "mkdir", "-p", str(path.parent)])
        cmd.run(["sudo", "tee", str(path)], input_text=text)
        cmd.run(["sudo", "chmod", "a+r", str(path)])
        return

    if cmd.dry_run:
        logger.info("Would write %s", path)
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    path.chmod(path.stat().st_mode | 0o444)
