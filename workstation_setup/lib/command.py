from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Sequence

from ..environment import Environment
from ..errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


class CommandRunner:
    """Run external commands against an explicit Environment.

    - probe() is for precondition checks: it always executes, never raises on
      a non-zero exit, and reports a missing executable as returncode 127.
    - run() is for actions: it logs the command, honors dry_run and raises
      CommandError on failure when check=True.
    - interactive=True leaves stdin/stdout attached to the terminal (installers,
      login flows); nothing is captured.
    """

    def __init__(self, env: Environment, *, dry_run: bool = False) -> None:
        self.env = env
        self.dry_run = dry_run

    def which(self, name: str) -> str | None:
        return shutil.which(name, path=self.env.get("PATH"))

    def probe(self, argv: Sequence[str], *, cwd: str | None = None) -> CmdResult:
        argv_list = list(argv)
        logger.debug("PROBE %s", _fmt_argv(argv_list))
        try:
            p = subprocess.run(
                argv_list,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=cwd,
                env=self.env.as_dict(),
            )
        except (FileNotFoundError, NotADirectoryError, PermissionError) as e:
            return CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))
        return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        cwd: str | None = None,
        input_text: str | None = None,
        interactive: bool = False,
    ) -> CmdResult:
        argv_list = list(argv)
        logger.info("CMD %s", _fmt_argv(argv_list))

        if self.dry_run:
            return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

        try:
            if interactive:
                p = subprocess.run(argv_list, cwd=cwd, env=self.env.as_dict())
                stdout, stderr = "", ""
            else:
                p = subprocess.run(
                    argv_list,
                    input=input_text,
                    text=True,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    cwd=cwd,
                    env=self.env.as_dict(),
                )
                stdout, stderr = p.stdout, p.stderr
        except FileNotFoundError as e:
            if check:
                raise CommandError(argv_list, 127, str(e)) from e
            return CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))

        if stdout:
            logger.debug("STDOUT %s", stdout.strip())
        if stderr:
            logger.debug("STDERR %s", stderr.strip())

        if check and p.returncode != 0:
            raise CommandError(argv_list, p.returncode, stderr)

        return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)
