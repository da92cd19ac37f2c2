"""Tests for the commitguard CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from git import Repo

from commitguard import __version__
from commitguard.main import cli
from commitguard.review import ResponseCache


@pytest.fixture
def repo_root(git_repo: Repo, monkeypatch: pytest.MonkeyPatch, clean_env: None) -> Path:
    root = Path(git_repo.working_tree_dir)  # type: ignore[arg-type]
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestMain:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_groups(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for group in ("hook", "config", "cache"):
            assert group in result.output


class TestConfigShow:
    def test_reports_values_and_sources(self, runner: CliRunner, repo_root: Path) -> None:
        (repo_root / ".claude-hooks-config.sh").write_text('export CLAUDE_MODEL="opus"\n')
        (repo_root / ".claude-hooks-team.yml").write_text(
            "file_filters:\n  max_files_per_commit: 5\n"
        )

        result = runner.invoke(
            cli, ["config", "show", "-f", "json"], env={"MAX_FILE_SIZE": "500"}
        )

        assert result.exit_code == 0, result.output
        document = json.loads(result.output)
        assert document["CLAUDE_MODEL"] == {"value": "opus", "source": "repo config"}
        assert document["MAX_FILE_SIZE"] == {"value": 500, "source": "environment"}
        assert document["MAX_FILES_PER_COMMIT"] == {"value": 5, "source": "team config"}
        assert document["CACHE_DIR"] == {"value": ".claude-hooks-cache", "source": "default"}

    def test_without_sources(self, runner: CliRunner, repo_root: Path) -> None:
        result = runner.invoke(cli, ["config", "show", "-f", "json", "--no-sources"])

        assert result.exit_code == 0, result.output
        document = json.loads(result.output)
        assert document["CLAUDE_API_RETRIES"] == 3
        assert document["ENABLE_CACHE"] is True

    def test_yaml_output(self, runner: CliRunner, repo_root: Path) -> None:
        result = runner.invoke(cli, ["config", "show", "--no-sources"])

        assert result.exit_code == 0, result.output
        assert "CLAUDE_MODEL: sonnet" in result.output

    def test_invalid_value(self, runner: CliRunner, repo_root: Path) -> None:
        result = runner.invoke(cli, ["config", "show"], env={"CLAUDE_TIMEOUT": "soon"})

        assert result.exit_code == 1
        assert "CLAUDE_TIMEOUT" in result.output
        assert "environment" in result.output


class TestCacheCommands:
    def test_clear(self, runner: CliRunner, repo_root: Path) -> None:
        cache = ResponseCache(repo_root / ".claude-hooks-cache", ttl=3600)
        cache.put("a", "PASS")
        cache.put("b", "PASS")

        result = runner.invoke(cli, ["cache", "clear"])

        assert result.exit_code == 0, result.output
        assert list(cache.directory.glob("*.json")) == []

    def test_clean_keeps_fresh_entries(self, runner: CliRunner, repo_root: Path) -> None:
        cache = ResponseCache(repo_root / ".claude-hooks-cache", ttl=3600, clock=lambda: 0.0)
        cache.put("stale", "PASS")
        ResponseCache(cache.directory, ttl=3600).put("fresh", "PASS")

        result = runner.invoke(cli, ["cache", "clean"])

        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in cache.directory.glob("*.json")) == ["fresh.json"]


class TestHookCommands:
    def test_pre_commit_with_nothing_staged(self, runner: CliRunner, repo_root: Path) -> None:
        result = runner.invoke(cli, ["hook", "--no-input", "pre-commit"])

        assert result.exit_code == 0, result.output

    def test_commit_msg_blocks_empty_message(
        self, runner: CliRunner, repo_root: Path
    ) -> None:
        message_file = repo_root / ".git" / "COMMIT_EDITMSG"
        message_file.write_text("# only a comment\n")

        result = runner.invoke(cli, ["hook", "--no-input", "commit-msg", str(message_file)])

        assert result.exit_code == 1

    def test_commit_msg_without_credentials_uses_basic_checks(
        self, runner: CliRunner, repo_root: Path
    ) -> None:
        message_file = repo_root / ".git" / "COMMIT_EDITMSG"
        message_file.write_text("feat: add login validation\n")

        result = runner.invoke(cli, ["hook", "--no-input", "commit-msg", str(message_file)])

        assert result.exit_code == 0, result.output

    def test_pre_push_with_no_updates(self, runner: CliRunner, repo_root: Path) -> None:
        result = runner.invoke(cli, ["hook", "--no-input", "pre-push", "origin"], input="")

        assert result.exit_code == 0, result.output

    def test_invalid_config_fails_hook(self, runner: CliRunner, repo_root: Path) -> None:
        result = runner.invoke(
            cli, ["hook", "pre-commit"], env={"INDETERMINATE_POLICY": "sometimes"}
        )

        assert result.exit_code == 1
        assert "INDETERMINATE_POLICY" in result.output
