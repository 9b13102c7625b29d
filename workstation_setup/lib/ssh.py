from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from .command import CommandRunner

logger = logging.getLogger(__name__)

AUTH_OK_MARKER = "Authentication succeeded (publickey)"


def find_private_key(ssh_dir: Path, names: Sequence[str]) -> Optional[Path]:
    for name in names:
        p = ssh_dir / name
        if p.is_file() and p.stat().st_size > 0:
            return p
    return None


def find_public_key(ssh_dir: Path, names: Sequence[str]) -> Optional[Path]:
    for name in names:
        p = ssh_dir / f"{name}.pub"
        if p.is_file():
            return p
    return None


def generate_key(cmd: CommandRunner, key_path: Path) -> None:
    if not cmd.dry_run:
        key_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    cmd.run(["ssh-keygen", "-q", "-N", "", "-t", "rsa", "-f", str(key_path)])


def auth_succeeds(cmd: CommandRunner, host: str) -> bool:
    """`ssh -T` exits non-zero even on success for code hosts; read the verbose log instead."""

    r = cmd.probe(["ssh", "-T", "-v", "-o", "BatchMode=yes", host])
    return AUTH_OK_MARKER in r.stderr


def open_url(cmd: CommandRunner, platform_name: str, url: str) -> None:
    opener = "open" if platform_name == "darwin" else "xdg-open"
    cmd.run([opener, url], check=False)


def copy_to_clipboard(cmd: CommandRunner, platform_name: str, text: str) -> None:
    if platform_name == "darwin":
        argv = ["pbcopy"]
    else:
        argv = ["xclip", "-selection", "clipboard"]
    cmd.run(argv, input_text=text)
