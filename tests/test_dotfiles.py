"""
Tests for dotfile installation: symlink policy, default and template copies.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from workstation_setup.errors import FatalError
from workstation_setup.lib.dotfiles import LinkState, default_dest_name, ensure_symlink, expand_patterns, link_state
from workstation_setup.pipeline import Outcome, run_pipeline, run_step
from workstation_setup.steps import (
    DotfileDefaultsStep,
    DotfileSymlinksStep,
    DotfileTemplatesStep,
    LegacyLinkCleanupStep,
)


class TestSymlinkPolicy:
    def test_missing_dest_is_linked(self, tmp_path: Path):
        src = tmp_path / "src"
        src.write_text("x")
        dest = tmp_path / "out" / "nested" / "dest"
        assert ensure_symlink(src, dest) is LinkState.MISSING
        assert dest.is_symlink()
        assert os.readlink(dest) == str(src)

    def test_correct_link_is_untouched(self, tmp_path: Path):
        src = tmp_path / "src"
        src.write_text("x")
        dest = tmp_path / "dest"
        dest.symlink_to(src)
        before = os.lstat(dest)

        assert ensure_symlink(src, dest) is LinkState.CORRECT
        after = os.lstat(dest)
        assert (before.st_ino, before.st_mtime_ns) == (after.st_ino, after.st_mtime_ns)

    def test_existing_file_is_a_conflict_and_kept(self, tmp_path: Path):
        src = tmp_path / "src"
        src.write_text("ours")
        dest = tmp_path / "dest"
        dest.write_text("theirs")

        assert ensure_symlink(src, dest) is LinkState.CONFLICT
        assert not dest.is_symlink()
        assert dest.read_text() == "theirs"

    def test_link_elsewhere_is_a_conflict(self, tmp_path: Path):
        src = tmp_path / "src"
        other = tmp_path / "other"
        src.write_text("ours")
        other.write_text("theirs")
        dest = tmp_path / "dest"
        dest.symlink_to(other)

        assert link_state(src, dest) is LinkState.CONFLICT
        assert ensure_symlink(src, dest) is LinkState.CONFLICT
        assert os.readlink(dest) == str(other)

    def test_dangling_link_is_replaced(self, tmp_path: Path):
        src = tmp_path / "src"
        src.write_text("x")
        dest = tmp_path / "dest"
        dest.symlink_to(tmp_path / "gone")

        assert ensure_symlink(src, dest) is LinkState.MISSING
        assert os.readlink(dest) == str(src)

    def test_dry_run_writes_nothing(self, tmp_path: Path):
        src = tmp_path / "src"
        src.write_text("x")
        dest = tmp_path / "dest"
        ensure_symlink(src, dest, dry_run=True)
        assert not dest.exists() and not dest.is_symlink()


def test_expand_patterns_matches_hidden_and_nested(dotfiles_dir: Path):
    found = expand_patterns(dotfiles_dir, [".*.khan", ".vim/ftplugin/*.vim", ".git_template/commit_template"])
    assert found == [Path(".bashrc.khan"), Path(".profile.khan"), Path(".vim/ftplugin/python.vim")]


def test_default_dest_name():
    assert default_dest_name("bashrc.default", ".default") == ".bashrc"
    assert default_dest_name("gitignore.template", ".template") == ".gitignore"


class TestDotfileSteps:
    def test_symlinks_step_links_everything(self, make_ctx, root: Path, dotfiles_dir: Path):
        ctx = make_ctx()
        result = run_step(DotfileSymlinksStep(), ctx)
        assert result.outcome is Outcome.NEWLY_SATISFIED
        assert os.readlink(root / ".bashrc.khan") == str(dotfiles_dir.resolve() / ".bashrc.khan")
        assert (root / ".vim" / "ftplugin" / "python.vim").is_symlink()
        assert ctx.warnings == []

    def test_symlinks_step_second_run_is_already_satisfied(self, make_ctx):
        ctx = make_ctx()
        run_step(DotfileSymlinksStep(), ctx)
        assert run_step(DotfileSymlinksStep(), ctx).outcome is Outcome.ALREADY_SATISFIED
        assert ctx.warnings == []

    def test_conflicting_dest_warns_and_is_left_alone(self, make_ctx, root: Path):
        (root / ".profile.khan").write_text("my own profile")
        ctx = make_ctx()
        result = run_step(DotfileSymlinksStep(), ctx)

        assert (root / ".profile.khan").read_text() == "my own profile"
        assert (root / ".bashrc.khan").is_symlink()
        assert result.warnings == [f"Not symlinking to {root / '.profile.khan'} because it already exists."]
        assert result.outcome is Outcome.WARNED

    def test_directory_in_place_of_default_stops_the_run(self, make_ctx, root: Path):
        (root / ".bashrc").mkdir()
        ctx = make_ctx()
        result = run_pipeline(ctx=ctx, steps=[DotfileDefaultsStep(), DotfileSymlinksStep()])

        assert result.outcome_of("45_dotfiles_defaults") is Outcome.FATAL
        assert result.outcome_of("45_dotfiles_symlinks") is None
        assert result.exit_code == 1
        assert (root / ".bashrc").is_dir()

    def test_defaults_are_copied_when_missing(self, make_ctx, root: Path):
        ctx = make_ctx()
        run_step(DotfileDefaultsStep(), ctx)
        assert ". ~/.bashrc.khan" in (root / ".bashrc").read_text()
        assert not (root / ".bashrc").is_symlink()

    def test_existing_default_with_include_is_kept(self, make_ctx, root: Path):
        (root / ".bashrc").write_text("alias ll='ls -l'\nsource ~/.bashrc.khan\n")
        ctx = make_ctx()
        assert run_step(DotfileDefaultsStep(), ctx).outcome is Outcome.ALREADY_SATISFIED

    def test_existing_default_without_include_is_fatal(self, make_ctx, root: Path):
        (root / ".bashrc").write_text("alias ll='ls -l'\n")
        ctx = make_ctx()
        with pytest.raises(FatalError, match=r"does not 'include' \.bashrc\.khan"):
            run_step(DotfileDefaultsStep(), ctx)
        assert (root / ".bashrc").read_text() == "alias ll='ls -l'\n"

    def test_templates_never_overwrite(self, make_ctx, root: Path):
        (root / ".gitignore").write_text("node_modules\n")
        ctx = make_ctx()
        assert run_step(DotfileTemplatesStep(), ctx).outcome is Outcome.ALREADY_SATISFIED
        assert (root / ".gitignore").read_text() == "node_modules\n"

    def test_templates_are_copied_when_missing(self, make_ctx, root: Path):
        ctx = make_ctx()
        run_step(DotfileTemplatesStep(), ctx)
        assert (root / ".gitignore").read_text() == "*.pyc\n"

    def test_legacy_symlink_is_removed_but_files_are_not(self, make_ctx, root: Path, tmp_path: Path):
        ctx = make_ctx()
        (root / ".gitignore.khan").symlink_to(tmp_path / "whatever")
        assert run_step(LegacyLinkCleanupStep(), ctx).outcome is Outcome.NEWLY_SATISFIED
        assert not (root / ".gitignore.khan").is_symlink()

        (root / ".gitignore.khan").write_text("user file")
        assert run_step(LegacyLinkCleanupStep(), ctx).outcome is Outcome.ALREADY_SATISFIED
        assert (root / ".gitignore.khan").exists()
