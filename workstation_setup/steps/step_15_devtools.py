from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..context import SetupContext
from ..errors import FatalError, RestartRequested, StepWarning
from ..lib.hostinfo import macos_version
from ..lib.versions import at_least
from ..pipeline import Check

logger = logging.getLogger(__name__)

CLT_DIR = "/Library/Developer/CommandLineTools"


def _nonempty(p: Path) -> bool:
    return p.is_file() and p.stat().st_size > 0


class XcodeDevToolsStep:
    """Apple command line developer tools (gcc, SDK headers).

    Installing them hands control to a GUI installer we cannot wait on, so
    after triggering it we ask for a restart of the whole run.
    """

    step_id = "15_devtools"
    required = True

    def __init__(self, include_dir: Path = Path("/usr/include")) -> None:
        self.include_dir = include_dir

    def _has_gcc(self, ctx: SetupContext) -> bool:
        return ctx.cmd.probe(["gcc", "--version"]).ok

    def _has_headers(self, ctx: SetupContext) -> bool:
        if _nonempty(self.include_dir / "stdio.h"):
            return True
        r = ctx.cmd.probe(["xcrun", "--show-sdk-path"])
        return r.ok and bool(r.stdout.strip()) and _nonempty(Path(r.stdout.strip()) / "usr/include/stdio.h")

    def check(self, ctx: SetupContext) -> Check:
        if not self._has_gcc(ctx):
            return Check.unsatisfied("gcc not found")
        if not self._has_headers(ctx):
            return Check.unsatisfied("gcc found but stdio.h is missing")
        return Check.satisfied("gcc and SDK headers")

    def _install_and_restart(self, ctx: SetupContext, reason: str) -> None:
        logger.info("Installing command line developer tools")
        ctx.cmd.run(["xcode-select", "--install"], check=False)
        ctx.prompter.pause("Wait until the developer tools install is complete, then press enter...")
        raise RestartRequested(reason)

    def apply(self, ctx: SetupContext) -> None:
        version = macos_version(ctx.cmd)
        darwin = ctx.config.darwin
        minimum = str(darwin.get("min_devtools_version") or "10.9")
        if version is not None and not at_least(version, minimum):
            raise FatalError(
                "Command line tools are *probably available* for your Mac's OS, but not through this script",
                remediation="upgrade macOS, or grab them from developer.apple.com",
            )

        if not self._has_gcc(ctx):
            self._install_and_restart(ctx, "command line developer tools installed")

        headers_release = str(darwin.get("headers_version") or "")
        found: Optional[str] = ".".join(str(p) for p in version[:2]) if version else None
        if headers_release and found == headers_release:
            pkg = Path(str(darwin.get("headers_pkg") or ""))
            if _nonempty(pkg):
                r = ctx.cmd.run(["sudo", "installer", "-pkg", str(pkg), "-target", "/"], check=False)
                if not r.ok:
                    raise StepWarning(
                        "We're not able to determine if stdio.h is usable by compilers on your system; "
                        "run `gcc -v` for details and ask for help if builds fail."
                    )
                logger.info("%s installed", pkg.stem, extra={"badge": "OK"})
                return
            logger.info("Updating your command line tools")
            ctx.cmd.run(["sudo", "rm", "-rf", CLT_DIR])
            self._install_and_restart(ctx, "command line developer tools updated")

        raise StepWarning("gcc found but stdio.h is missing; reinstall the command line developer tools")
