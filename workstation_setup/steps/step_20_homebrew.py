from __future__ import annotations

import logging

from ..context import SetupContext
from ..errors import FatalError
from ..lib.pkg import brew_available, brew_taps
from ..pipeline import Check

logger = logging.getLogger(__name__)


class HomebrewStep:
    step_id = "20_homebrew"
    required = True

    def check(self, ctx: SetupContext) -> Check:
        return Check.of(brew_available(ctx.cmd), "brew")

    def apply(self, ctx: SetupContext) -> None:
        url = str(ctx.config.darwin.get("homebrew_install_url"))
        script = ctx.cmd.run(["curl", "-fsSL", url]).stdout
        ctx.cmd.run(["/bin/bash", "-c", script], interactive=True)
        self.export(ctx)
        logger.info("Updating (but not upgrading) Homebrew")
        ctx.cmd.run(["brew", "update"])

    def export(self, ctx: SetupContext) -> None:
        # Brew's bin dir must win over /usr/bin to pick up what we install.
        prefix_bin = ctx.config.darwin.get("brew_prefix_bin")
        if prefix_bin:
            ctx.env.add_path(str(prefix_bin), front=True)


class BrewDoctorStep:
    """Warnings from `brew doctor` are usually harmless, so the user decides."""

    step_id = "21_brew_doctor"
    required = False

    def check(self, ctx: SetupContext) -> Check:
        return Check.of(ctx.cmd.probe(["brew", "doctor"]).ok, "brew doctor")

    def apply(self, ctx: SetupContext) -> None:
        ctx.warn("'brew doctor' reported some warnings. They may cause you trouble, but are likely harmless.")
        if not ctx.prompter.confirm("Onward?", default=True):
            raise FatalError("Stopped after 'brew doctor' warnings", remediation="fix what 'brew doctor' reports")


class BrewTapStep:
    required = False

    def __init__(self, tap: str) -> None:
        self.tap = tap
        self.step_id = f"22_brew_tap_{tap}"

    def check(self, ctx: SetupContext) -> Check:
        return Check.of(self.tap in brew_taps(ctx.cmd), self.tap)

    def apply(self, ctx: SetupContext) -> None:
        ctx.cmd.run(["brew", "tap", self.tap])
