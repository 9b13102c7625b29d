from __future__ import annotations

import logging
from pathlib import Path

from ..config import RepoSpec
from ..context import SetupContext
from ..lib.git import clone_repo, config_get, is_cloned, kaclone_repo
from ..pipeline import Check

logger = logging.getLogger(__name__)


def kaclone_bin(ctx: SetupContext) -> Path:
    return ctx.devtools_dir / ctx.config.kaclone_bin


class CloneRepoStep:
    """Clone one repository unless a checkout of that name already exists.

    tool=git is a plain clone (only used to bootstrap ka-clone itself);
    tool=ka-clone goes through ka-clone so the checkout is configured for us.
    """

    required = True

    def __init__(self, repo: RepoSpec) -> None:
        self.repo = repo
        self.step_id = f"60_clone_{repo.name}"

    def _dest_dir(self, ctx: SetupContext) -> Path:
        return ctx.devtools_dir if self.repo.dest == "devtools" else ctx.repos_dir

    def check(self, ctx: SetupContext) -> Check:
        dest = self._dest_dir(ctx) / self.repo.name
        return Check.of(is_cloned(self._dest_dir(ctx), self.repo.name), str(dest))

    def apply(self, ctx: SetupContext) -> None:
        dest_dir = self._dest_dir(ctx)
        logger.info("Cloning %s into %s", self.repo.url, dest_dir)
        if self.repo.tool == "ka-clone":
            email = config_get(ctx.cmd, "kaclone.email")
            kaclone_repo(
                ctx.cmd,
                kaclone_bin(ctx),
                self.repo.url,
                dest_dir,
                self.repo.name,
                email=email,
                extra_args=self.repo.args,
            )
        else:
            clone_repo(ctx.cmd, self.repo.url, dest_dir, self.repo.name)


class RepairSelfStep:
    """The dotfiles checkout is an organization repo too; let ka-clone configure it."""

    step_id = "60_repair_self"
    required = False

    def check(self, ctx: SetupContext) -> Check:
        if not ctx.cmd.probe(["git", "-C", str(ctx.dotfiles_dir), "rev-parse", "--git-dir"]).ok:
            return Check.satisfied("dotfiles dir is not a git checkout")
        managed = config_get(ctx.cmd, "kaclone.managed", scope="local", repo=ctx.dotfiles_dir)
        return Check.of(managed == "true", "kaclone.managed")

    def apply(self, ctx: SetupContext) -> None:
        ctx.cmd.run([str(kaclone_bin(ctx)), "--repair", "--quiet"], cwd=str(ctx.dotfiles_dir))
