from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from .command import CommandRunner
from .versions import Version, parse_version

logger = logging.getLogger(__name__)


def git_version(cmd: CommandRunner) -> Optional[Version]:
    r = cmd.probe(["git", "--version"])
    if not r.ok:
        return None
    return parse_version(r.stdout)


def config_get(cmd: CommandRunner, key: str, *, scope: str | None = None, repo: Path | None = None) -> str:
    """Value of a git config key, or '' when unset."""

    argv = ["git"]
    if repo is not None:
        argv += ["-C", str(repo)]
    argv.append("config")
    if scope:
        argv.append(f"--{scope}")
    argv.append(key)
    r = cmd.probe(argv)
    return r.stdout.strip() if r.ok else ""


def config_set_global(cmd: CommandRunner, key: str, value: str) -> None:
    cmd.run(["git", "config", "--global", key, value])


def is_cloned(dest_dir: Path, name: str) -> bool:
    return (dest_dir / name).is_dir()


def clone_repo(cmd: CommandRunner, url: str, dest_dir: Path, name: str) -> None:
    """Plain clone plus submodules. Used to bootstrap ka-clone itself."""

    if not cmd.dry_run:
        dest_dir.mkdir(parents=True, exist_ok=True)
    cmd.run(["git", "clone", url, name], cwd=str(dest_dir))
    cmd.run(["git", "submodule", "update", "--init", "--recursive"], cwd=str(dest_dir / name))


def kaclone_repo(
    cmd: CommandRunner,
    kaclone_bin: Path,
    url: str,
    dest_dir: Path,
    name: str,
    *,
    email: str,
    extra_args: Sequence[str] = (),
) -> None:
    """Clone through ka-clone so the checkout gets the organization's hooks and config."""

    if not cmd.dry_run:
        dest_dir.mkdir(parents=True, exist_ok=True)
    argv = [str(kaclone_bin), url, str(dest_dir / name), *extra_args]
    if email:
        argv.append(f"--email={email}")
    cmd.run(argv)
