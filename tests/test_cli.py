"""Command-level tests using typer's CliRunner."""

from __future__ import annotations

from typer.testing import CliRunner

import claude_setup
from claude_setup import app
from claude_setup.ui import SetupCancelled

runner = CliRunner()


class TestBypass:
    def test_ci_skips_without_prompts_or_writes(self, package_root, claude_dir):
        result = runner.invoke(app, [], env={"CI": "true", "CLAUDE_CONFIG_DIR": str(claude_dir)})

        assert result.exit_code == 0
        assert "Skipping Claude setup" in result.output
        assert not claude_dir.exists()

    def test_skip_variable_on_install_command(self, package_root, claude_dir):
        result = runner.invoke(
            app,
            ["install", "--source", str(package_root), "--target", str(claude_dir)],
            env={"SKIP_CLAUDE_SETUP": "1", "CI": ""},
        )

        assert result.exit_code == 0
        assert not claude_dir.exists()

    def test_non_interactive_stdin_skips(self, package_root, claude_dir):
        # CliRunner never provides a TTY
        result = runner.invoke(
            app,
            ["install", "--source", str(package_root), "--target", str(claude_dir)],
            env={"CI": ""},
        )

        assert result.exit_code == 0
        assert "non-interactive terminal" in result.output
        assert not claude_dir.exists()


class TestInstallCommand:
    def test_cancellation_exits_cleanly(self, package_root, claude_dir, monkeypatch):
        monkeypatch.setattr(claude_setup, "skip_reason", lambda environ, interactive: None)

        def cancel(*args, **kwargs):
            raise SetupCancelled()

        monkeypatch.setattr(claude_setup, "run_install", cancel)

        result = runner.invoke(app, ["install", "--source", str(package_root), "--target", str(claude_dir)])

        assert result.exit_code == 0
        assert "cancelled" in result.output

    def test_uncreatable_target_exits_with_error(self, package_root, tmp_path, monkeypatch):
        monkeypatch.setattr(claude_setup, "skip_reason", lambda environ, interactive: None)
        blocker = tmp_path / "blocker"
        blocker.write_text("file")

        result = runner.invoke(
            app,
            ["install", "--source", str(package_root), "--target", str(blocker / ".claude"), "--debug"],
        )

        assert result.exit_code == 1
        assert "Installation failed" in result.output
        assert "Debug Environment" in result.output


class TestCheckCommand:
    def test_reports_items(self, package_root, claude_dir):
        result = runner.invoke(app, ["check", "--source", str(package_root), "--target", str(claude_dir)])

        assert result.exit_code == 0
        assert "agents/" in result.output
        assert "skills/" in result.output
        assert "scripts/" not in result.output
        assert "All checks passed" in result.output
        assert not claude_dir.exists()

    def test_missing_source_fails(self, tmp_path, claude_dir):
        result = runner.invoke(app, ["check", "--source", str(tmp_path / "nope"), "--target", str(claude_dir)])

        assert result.exit_code == 1
        assert "Some checks failed" in result.output

    def test_missing_library_fails(self, package_root, claude_dir, monkeypatch):
        monkeypatch.setattr(claude_setup, "REQUIRED_LIBRARIES", ["rich", "no_such_library_for_claude_setup"])

        result = runner.invoke(app, ["check", "--source", str(package_root), "--target", str(claude_dir)])

        assert result.exit_code == 1


class TestVersionCommand:
    def test_shows_table(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "CLI Version" in result.output
