from __future__ import annotations

import logging
import platform
import sys
from typing import Optional

from .command import CommandRunner
from .versions import Version, parse_version

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS = ("darwin", "linux")


def detect_platform() -> str:
    if sys.platform.startswith("darwin"):
        return "darwin"
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def normalize_arch(machine: str) -> str:
    m = machine.lower()
    return {
        "amd64": "x86_64",
        "x86_64": "x86_64",
        "aarch64": "arm",
        "arm64": "arm",
        "i386": "x86",
        "i686": "x86",
    }.get(m, m)


def cloud_sdk_platform(platform_name: str, machine: Optional[str] = None) -> str:
    """Platform suffix used by Cloud SDK archives, e.g. 'darwin-x86_64'."""

    return f"{platform_name}-{normalize_arch(machine or platform.machine())}"


def macos_version(cmd: CommandRunner) -> Optional[Version]:
    r = cmd.probe(["sw_vers", "-productVersion"])
    if not r.ok:
        return None
    return parse_version(r.stdout)


def shell_name(shell_path: Optional[str]) -> str:
    return (shell_path or "").rstrip("/").rsplit("/", 1)[-1]
