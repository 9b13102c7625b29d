from __future__ import annotations

import logging
from typing import List, Sequence

from ..config import FormulaSpec
from ..context import SetupContext
from ..lib.pkg import (
    apt_has_package,
    apt_install,
    apt_is_installed,
    apt_update,
    brew_has_cask,
    brew_has_formula,
    brew_install,
    brew_install_cask,
    brew_service_started,
)
from ..lib.versions import at_least, parse_version
from ..pipeline import Check

logger = logging.getLogger(__name__)


class BrewFormulaStep:
    """One Homebrew formula.

    With a command the check looks on PATH (so tools installed some other way
    count); with min_version the command's version must be recent enough.
    Without a command the check asks brew.
    """

    required = False

    def __init__(self, spec: FormulaSpec) -> None:
        self.spec = spec
        self.step_id = f"25_brew_{spec.formula}"

    def check(self, ctx: SetupContext) -> Check:
        spec = self.spec
        if not spec.command:
            return Check.of(brew_has_formula(ctx.cmd, spec.formula), spec.formula)

        path = ctx.cmd.which(spec.command)
        if path is None:
            return Check.unsatisfied(f"{spec.command} not found")
        if not spec.min_version:
            return Check.satisfied(path)

        r = ctx.cmd.probe(list(spec.version_args) or [spec.command, "--version"])
        version = parse_version(r.stdout) if r.ok else None
        if version is None:
            return Check.indeterminate(f"could not read {spec.command} version")
        found = ".".join(str(p) for p in version)
        return Check.of(at_least(version, spec.min_version), f"{spec.command} {found}")

    def apply(self, ctx: SetupContext) -> None:
        brew_install(ctx.cmd, self.spec.formula, link=self.spec.link)


class BrewServiceStep:
    required = False

    def __init__(self, formula: str) -> None:
        self.formula = formula
        self.step_id = f"26_service_{formula}"

    def check(self, ctx: SetupContext) -> Check:
        started = brew_service_started(ctx.cmd, self.formula)
        if started is None:
            return Check.indeterminate("brew services list failed")
        return Check.of(started, f"{self.formula} service")

    def apply(self, ctx: SetupContext) -> None:
        logger.info("Starting %s service", self.formula)
        ctx.cmd.run(["brew", "services", "start", self.formula])


class BrewCaskStep:
    required = False

    def __init__(self, cask: str) -> None:
        self.cask = cask
        self.step_id = f"27_cask_{cask}"

    def check(self, ctx: SetupContext) -> Check:
        return Check.of(brew_has_cask(ctx.cmd, self.cask), self.cask)

    def apply(self, ctx: SetupContext) -> None:
        brew_install_cask(ctx.cmd, self.cask)


class AptPackagesStep:
    """A group of apt packages.

    Required groups fail the run if anything can't be installed. Optional
    groups skip packages apt doesn't know about (repo variance) with a warning.
    """

    def __init__(self, step_id: str, packages: Sequence[str], *, required: bool) -> None:
        self.step_id = step_id
        self.packages = [str(p).strip() for p in packages if str(p).strip()]
        self.required = required

    def _missing(self, ctx: SetupContext) -> List[str]:
        return [p for p in self.packages if not apt_is_installed(ctx.cmd, p)]

    def check(self, ctx: SetupContext) -> Check:
        missing = self._missing(ctx)
        if missing:
            return Check.unsatisfied(f"missing: {' '.join(missing)}")
        return Check.satisfied(f"{len(self.packages)} packages")

    def apply(self, ctx: SetupContext) -> None:
        sudo = ctx.config.use_sudo
        missing = self._missing(ctx)
        apt_update(ctx.cmd, sudo=sudo)

        if self.required:
            apt_install(ctx.cmd, missing, sudo=sudo)
            return

        packages: List[str] = []
        unknown: List[str] = []
        for p in missing:
            (packages if apt_has_package(ctx.cmd, p) else unknown).append(p)
        if unknown:
            ctx.warn(f"apt has no package named: {' '.join(unknown)}")
        apt_install(ctx.cmd, packages, sudo=sudo)
