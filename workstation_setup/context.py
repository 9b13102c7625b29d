from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .config import SetupConfig
from .environment import Environment
from .lib.command import CommandRunner
from .prompt import Prompter

logger = logging.getLogger(__name__)


@dataclass
class SetupContext:
    """Everything a step may read or extend.

    root is the destination for dotfiles and clones (the user's home by
    default); dotfiles_dir is the checkout holding the dotfiles to install.
    """

    root: Path
    dotfiles_dir: Path
    platform: str
    config: SetupConfig
    env: Environment
    cmd: CommandRunner
    prompter: Prompter
    dry_run: bool = False
    warnings: List[str] = field(default_factory=list)

    @property
    def repos_dir(self) -> Path:
        return self.root / self.config.namespace

    @property
    def devtools_dir(self) -> Path:
        return self.repos_dir / self.config.devtools_subdir

    @property
    def webapp_dir(self) -> Path:
        return self.repos_dir / str(self.config.webapp_project.get("dir") or "webapp")

    @property
    def ssh_dir(self) -> Path:
        return self.root / ".ssh"

    @property
    def virtualenv_dir(self) -> Path:
        return self.root / ".virtualenv" / str(self.config.python.get("virtualenv") or "venv")

    def warn(self, message: str) -> None:
        """Record a warning for the end-of-run summary (and log it now)."""

        logger.warning(message)
        self.warnings.append(message)
