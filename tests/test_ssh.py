"""
Tests for ssh key generation and the registration loop.
"""

from __future__ import annotations

from pathlib import Path

from workstation_setup.lib.ssh import AUTH_OK_MARKER
from workstation_setup.pipeline import Outcome, run_step
from workstation_setup.steps import SshAuthStep, SshKeyStep

SSH = ("ssh", "-T", "-v")


def _keygen_effect(argv, cwd):
    key = Path(argv[-1])
    key.parent.mkdir(parents=True, exist_ok=True)
    key.write_text("PRIVATE")
    Path(f"{key}.pub").write_text("ssh-rsa AAAA dev@host\n")


class TestSshKey:
    def test_existing_key_is_kept(self, make_ctx, fake, root: Path):
        (root / ".ssh").mkdir()
        (root / ".ssh" / "id_dsa").write_text("OLD")
        ctx = make_ctx()
        assert run_step(SshKeyStep(), ctx).outcome is Outcome.ALREADY_SATISFIED
        assert fake.runs == []

    def test_empty_key_file_does_not_count(self, make_ctx, fake, root: Path):
        (root / ".ssh").mkdir()
        (root / ".ssh" / "id_rsa").write_text("")
        fake.on("ssh-keygen", effect=_keygen_effect)
        ctx = make_ctx()
        assert run_step(SshKeyStep(), ctx).outcome is Outcome.NEWLY_SATISFIED
        assert fake.runs[0][:2] == ["ssh-keygen", "-q"]

    def test_generates_rsa_key_under_root(self, make_ctx, fake, root: Path):
        fake.on("ssh-keygen", effect=_keygen_effect)
        ctx = make_ctx()
        run_step(SshKeyStep(), ctx)
        assert fake.runs == [["ssh-keygen", "-q", "-N", "", "-t", "rsa", "-f", str(root / ".ssh" / "id_rsa")]]
        assert run_step(SshKeyStep(), ctx).outcome is Outcome.ALREADY_SATISFIED


class TestSshAuth:
    def test_registered_key_needs_no_prompt(self, make_ctx, fake):
        fake.on(*SSH, returncode=1, stderr=f"debug1: {AUTH_OK_MARKER}.\n")
        ctx = make_ctx(answers=[])
        assert run_step(SshAuthStep(), ctx).outcome is Outcome.ALREADY_SATISFIED

    def test_skip_is_a_warning(self, make_ctx, fake):
        fake.on(*SSH, returncode=255, stderr="Permission denied (publickey).")
        ctx = make_ctx(answers=["s"])
        result = run_step(SshAuthStep(), ctx)
        assert result.outcome is Outcome.WARNED
        assert "skipping GitHub ssh registration" in ctx.warnings[0]

    def test_second_failure_ends_the_loop(self, make_ctx, fake):
        fake.on(*SSH, returncode=255, stderr="Permission denied (publickey).")
        ctx = make_ctx(answers=["t"])
        result = run_step(SshAuthStep(), ctx)
        assert result.outcome is Outcome.WARNED
        assert "Still no luck with GitHub ssh auth" in ctx.warnings[0]

    def test_open_copy_then_test_succeeds(self, make_ctx, fake, root: Path):
        (root / ".ssh").mkdir()
        (root / ".ssh" / "id_rsa").write_text("PRIVATE")
        (root / ".ssh" / "id_rsa.pub").write_text("ssh-rsa AAAA dev@host\n")
        fake.on(*SSH, returncode=255, stderr="Permission denied (publickey).")

        def register(argv, cwd):
            fake.on(*SSH, returncode=1, stderr=AUTH_OK_MARKER)

        fake.on("xclip", effect=register)
        ctx = make_ctx(answers=["o", "c", "t"])

        result = run_step(SshAuthStep(), ctx)
        assert result.outcome is Outcome.NEWLY_SATISFIED
        assert fake.runs[0] == ["xdg-open", "https://github.com/settings/ssh"]
        copy = fake.run_calls[1]
        assert copy["argv"] == ["xclip", "-selection", "clipboard"]
        assert copy["input_text"] == "ssh-rsa AAAA dev@host\n"

    def test_unattended_run_tests_once_and_moves_on(self, make_ctx, fake):
        fake.on(*SSH, returncode=255)
        ctx = make_ctx(assume_defaults=True)
        assert run_step(SshAuthStep(), ctx).outcome is Outcome.WARNED
        assert sum(1 for p in fake.probes if p[:1] == ["ssh"]) == 2

    def test_invalid_answers_reprompt(self, make_ctx, fake):
        fake.on(*SSH, returncode=255)
        ctx = make_ctx(answers=["x", "?", "s"])
        assert run_step(SshAuthStep(), ctx).outcome is Outcome.WARNED
