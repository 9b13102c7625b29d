"""
Shared test fixtures: a fake command runner, scripted prompts, a context factory.
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

from workstation_setup.config import load_config
from workstation_setup.context import SetupContext
from workstation_setup.environment import Environment
from workstation_setup.errors import CommandError
from workstation_setup.lib.command import CmdResult
from workstation_setup.prompt import Prompter


class FakeRunner:
    """Stands in for CommandRunner.

    - which() answers from `commands`.
    - probe() answers from rules registered with on(); unmatched probes fail.
    - run() records the call, applies the rule's effect, and succeeds unless a
      rule says otherwise.
    - `git config` reads/writes go to the in-memory `gitconfig` dict.
    """

    def __init__(self, env: Optional[Environment] = None, *, dry_run: bool = False) -> None:
        self.env = env or Environment({"PATH": "/usr/bin:/bin", "SHELL": "/bin/bash", "USER": "dev"})
        self.dry_run = dry_run
        self.commands: Dict[str, str] = {}
        self.gitconfig: Dict[str, str] = {}
        self.probes: List[List[str]] = []
        self.runs: List[List[str]] = []
        self.run_calls: List[Dict[str, Any]] = []
        self._rules: List[tuple] = []

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        effect: Optional[Callable[..., None]] = None,
    ) -> "FakeRunner":
        # Later rules win.
        self._rules.insert(0, (tuple(prefix), returncode, stdout, stderr, effect))
        return self

    def _match(self, argv: List[str]):
        for rule in self._rules:
            prefix = rule[0]
            if tuple(argv[: len(prefix)]) == prefix:
                return rule
        return None

    def _git_config(self, argv: List[str]) -> Optional[CmdResult]:
        args = list(argv[1:])
        if args[:1] == ["-C"]:
            args = args[2:]
        if args[:1] != ["config"]:
            return None
        args = [a for a in args[1:] if a not in {"--global", "--local"}]
        if len(args) == 1:
            value = self.gitconfig.get(args[0])
            if value is None:
                return CmdResult(list(argv), 1, "", "")
            return CmdResult(list(argv), 0, value + "\n", "")
        if len(args) == 2:
            self.gitconfig[args[0]] = args[1]
            return CmdResult(list(argv), 0, "", "")
        return None

    def which(self, name: str) -> Optional[str]:
        return self.commands.get(name)

    def probe(self, argv, *, cwd=None) -> CmdResult:
        argv = list(argv)
        self.probes.append(argv)
        rule = self._match(argv)
        if rule is not None:
            _, rc, out, err, _ = rule
            return CmdResult(argv, rc, out, err)
        if argv[:1] == ["git"]:
            res = self._git_config(argv)
            if res is not None:
                return res
        return CmdResult(argv, 1, "", "")

    def run(self, argv, *, check=True, cwd=None, input_text=None, interactive=False) -> CmdResult:
        argv = list(argv)
        self.runs.append(argv)
        self.run_calls.append({"argv": argv, "cwd": cwd, "input_text": input_text, "interactive": interactive})
        if self.dry_run:
            return CmdResult(argv, 0, "", "")

        rule = self._match(argv)
        if rule is not None:
            _, rc, out, err, effect = rule
            if effect is not None:
                effect(argv, cwd)
            result = CmdResult(argv, rc, out, err)
        else:
            result = self._git_config(argv) if argv[:1] == ["git"] else None
            result = result or CmdResult(argv, 0, "", "")

        if check and result.returncode != 0:
            raise CommandError(argv, result.returncode, result.stderr)
        return result


def scripted(answers: List[str]) -> Callable[[str], str]:
    """input() replacement that hands out answers in order."""

    remaining = list(answers)

    def _input(prompt: str) -> str:
        assert remaining, f"unexpected prompt: {prompt!r}"
        return remaining.pop(0)

    return _input


def base_overrides(tmp_path: Path) -> Dict[str, Any]:
    return {
        "use_sudo": False,
        "system": {"mime_types_path": str(tmp_path / "etc" / "mime.types")},
    }


@pytest.fixture
def fake() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def dotfiles_dir(tmp_path: Path) -> Path:
    """A small dotfiles checkout."""

    d = tmp_path / "dotfiles"
    (d / ".vim" / "ftplugin").mkdir(parents=True)
    (d / ".bashrc.khan").write_text("export KHAN=1\n")
    (d / ".profile.khan").write_text("export PATH=/usr/local/bin:$PATH\n")
    (d / ".vim" / "ftplugin" / "python.vim").write_text("set sw=4\n")
    (d / "bashrc.default").write_text(
        textwrap.dedent("""\
            # Pull in the shared settings.
            . ~/.bashrc.khan
        """)
    )
    (d / "gitignore.template").write_text("*.pyc\n")
    return d


@pytest.fixture
def root(tmp_path: Path) -> Path:
    r = tmp_path / "home"
    r.mkdir()
    return r


@pytest.fixture
def make_ctx(tmp_path: Path, root: Path, dotfiles_dir: Path, fake: FakeRunner):
    def _make(
        *,
        platform: str = "linux",
        answers: Optional[List[str]] = None,
        assume_defaults: bool = False,
        overrides: Optional[Dict[str, Any]] = None,
        cmd: Optional[FakeRunner] = None,
    ) -> SetupContext:
        cfg_overrides = base_overrides(tmp_path)
        cfg_overrides.update(overrides or {})
        runner = cmd or fake
        return SetupContext(
            root=root,
            dotfiles_dir=dotfiles_dir,
            platform=platform,
            config=load_config(None, overrides=cfg_overrides),
            env=runner.env,
            cmd=runner,
            prompter=Prompter(assume_defaults=assume_defaults, input_fn=scripted(answers or [])),
            dry_run=runner.dry_run,
        )

    return _make
