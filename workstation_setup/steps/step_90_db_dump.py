from __future__ import annotations

import logging

from ..context import SetupContext
from ..pipeline import Check

logger = logging.getLogger(__name__)


class DbDumpStep:
    """A recent datastore dump for local development. Needs gcloud auth and webapp deps."""

    step_id = "90_db_dump"
    required = False

    def check(self, ctx: SetupContext) -> Check:
        dump = ctx.webapp_dir / str(ctx.config.webapp_project.get("db_dump") or "datastore/current.sqlite")
        return Check.of(dump.is_file(), str(dump))

    def apply(self, ctx: SetupContext) -> None:
        logger.info("Downloading a recent datastore dump")
        dump = str(ctx.config.webapp_project.get("db_dump") or "datastore/current.sqlite")
        ctx.cmd.run(["make", dump.rsplit("/", 1)[-1]], cwd=str(ctx.webapp_dir), interactive=True)
