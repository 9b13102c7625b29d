from __future__ import annotations

import logging
from typing import List, Sequence

from .command import CommandRunner

logger = logging.getLogger(__name__)


# Homebrew


def brew_available(cmd: CommandRunner) -> bool:
    return cmd.probe(["brew", "--help"]).ok


def brew_has_formula(cmd: CommandRunner, formula: str) -> bool:
    return cmd.probe(["brew", "ls", "--versions", formula]).ok


def brew_has_cask(cmd: CommandRunner, cask: str) -> bool:
    return cmd.probe(["brew", "list", "--cask", cask]).ok


def brew_install(cmd: CommandRunner, formula: str, *, link: bool = False) -> None:
    if brew_has_formula(cmd, formula):
        cmd.run(["brew", "upgrade", formula], check=False)
    else:
        cmd.run(["brew", "install", formula])
    if link:
        # Brew doesn't link non-latest versions on install.
        cmd.run(["brew", "link", "--force", "--overwrite", formula])


def brew_install_cask(cmd: CommandRunner, cask: str) -> None:
    cmd.run(["brew", "install", "--cask", cask])


def brew_taps(cmd: CommandRunner) -> List[str]:
    r = cmd.probe(["brew", "tap"])
    return [line.strip() for line in r.stdout.splitlines() if line.strip()] if r.ok else []


def brew_service_started(cmd: CommandRunner, formula: str) -> bool | None:
    """True/False from `brew services list`; None when the listing fails."""

    r = cmd.probe(["brew", "services", "list"])
    if not r.ok:
        return None
    for line in r.stdout.splitlines():
        cols = line.split()
        if cols and cols[0] == formula:
            return len(cols) > 1 and cols[1] == "started"
    return False


def brew_prefix(cmd: CommandRunner, formula: str) -> str | None:
    r = cmd.probe(["brew", "--prefix", formula])
    if not r.ok:
        return None
    return r.stdout.strip() or None


# apt


def apt_is_installed(cmd: CommandRunner, package: str) -> bool:
    r = cmd.probe(["dpkg-query", "-W", "-f=${Status}", package])
    return r.ok and "install ok installed" in r.stdout


def apt_has_package(cmd: CommandRunner, package: str) -> bool:
    """Return True if apt knows about a package name.

    This is useful for optional packages that may only exist in some repos.
    """
    return cmd.probe(["apt-cache", "show", package]).ok


def apt_update(cmd: CommandRunner, *, sudo: bool = True) -> None:
    cmd.run([*(["sudo"] if sudo else []), "apt-get", "update", "-qq"])


def apt_install(cmd: CommandRunner, packages: Sequence[str], *, sudo: bool = True) -> None:
    if not packages:
        return
    cmd.run([*(["sudo"] if sudo else []), "apt-get", "install", "-y", "--no-install-recommends", *packages])
