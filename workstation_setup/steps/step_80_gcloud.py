from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from ..context import SetupContext
from ..lib.hostinfo import cloud_sdk_platform
from ..pipeline import Check

logger = logging.getLogger(__name__)


def _sdk_dir(ctx: SetupContext) -> Path:
    return ctx.devtools_dir / "google-cloud-sdk"


class GcloudInstallStep:
    """Cloud SDK from the release tarball, same on both platforms."""

    step_id = "80_gcloud"
    required = False

    def check(self, ctx: SetupContext) -> Check:
        path = ctx.cmd.which("gcloud")
        return Check.of(path is not None, path or "gcloud not on PATH")

    def apply(self, ctx: SetupContext) -> None:
        cfg = ctx.config.gcloud
        version = str(cfg.get("version"))
        url = str(cfg.get("url")).format(version=version, platform=cloud_sdk_platform(ctx.platform))
        archive = Path(tempfile.gettempdir()) / f"gcloud-{version}.tar.gz"

        logger.info("Installing Google Cloud SDK (gcloud) %s", version)
        ctx.cmd.run(["curl", "-fsSL", "-o", str(archive), url])
        if _sdk_dir(ctx).exists() and not ctx.dry_run:
            # A stale partial install would shadow the new one.
            shutil.rmtree(_sdk_dir(ctx))
        if not ctx.dry_run:
            ctx.devtools_dir.mkdir(parents=True, exist_ok=True)
        ctx.cmd.run(["tar", "-xzf", str(archive), "-C", str(ctx.devtools_dir)])

    def export(self, ctx: SetupContext) -> None:
        # The dotfiles put this on PATH too, but they may not be sourced yet.
        sdk_bin = _sdk_dir(ctx) / "bin"
        if sdk_bin.is_dir():
            ctx.env.add_path(str(sdk_bin), front=True)


class GcloudAuthStep:
    step_id = "82_gcloud_auth"
    required = False

    def check(self, ctx: SetupContext) -> Check:
        r = ctx.cmd.probe(["gcloud", "auth", "list", "--format=value(account)"])
        if not r.ok:
            return Check.indeterminate("gcloud auth list failed")
        account = r.stdout.strip()
        return Check.of(bool(account), account.splitlines()[0] if account else "no account")

    def apply(self, ctx: SetupContext) -> None:
        print("You'll now need to log in to gcloud. This will open a browser;")
        print("log in and/or select your work Google account, and click allow.")
        ctx.prompter.pause("We'll need to do this twice. Press enter to start: ")
        ctx.cmd.run(["gcloud", "auth", "login"], interactive=True)
        ctx.cmd.run(["gcloud", "auth", "application-default", "login"], interactive=True)
