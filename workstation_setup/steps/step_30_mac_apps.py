from __future__ import annotations

import logging
from typing import List

from ..context import SetupContext
from ..errors import CommandError
from ..lib.pkg import brew_has_cask, brew_install_cask
from ..pipeline import Check

logger = logging.getLogger(__name__)


class MacAppsStep:
    """Recommended (optional) apps: install all, none or some of them.

    Already installed apps are never offered again. The default answer is
    "none", so unattended runs move straight on.
    """

    step_id = "30_mac_apps"
    required = False

    def _missing(self, ctx: SetupContext) -> List[str]:
        apps = [str(a) for a in ctx.config.darwin.get("mac_apps") or []]
        return [a for a in apps if not brew_has_cask(ctx.cmd, a)]

    def check(self, ctx: SetupContext) -> Check:
        missing = self._missing(ctx)
        if missing:
            return Check.unsatisfied(f"{len(missing)} recommended apps not installed")
        return Check.satisfied("all recommended apps installed")

    def apply(self, ctx: SetupContext) -> None:
        missing = self._missing(ctx)
        logger.info("We recommend installing the following apps: %s", " ".join(missing))

        answer = ctx.prompter.choose(
            "Would you like to install [a]ll, [n]one, or [s]ome of the apps? [a/n/s]:",
            ["all", "none", "some"],
            default="none",
        )
        if answer == "all":
            chosen = missing
        elif answer == "some":
            chosen = [a for a in missing if ctx.prompter.confirm(f"Would you like to install {a}?", default=True)]
        else:
            chosen = []

        for app in chosen:
            logger.info("%s is not installed, installing %s", app, app)
            try:
                brew_install_cask(ctx.cmd, app)
            except CommandError:
                ctx.warn(f"Failed to install {app}, perhaps it is already installed.")
