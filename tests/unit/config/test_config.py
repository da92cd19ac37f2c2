"""Tests for the configuration cascade."""

from __future__ import annotations

from pathlib import Path

import pytest

from commitguard.config import (
    ReviewConfig,
    flatten_team_config,
    load_config,
    read_shell_config,
    read_team_config,
    resolve_config,
    resolve_config_with_provenance,
    split_patterns,
)
from commitguard.exceptions import ConfigError


class TestDefaults:
    def test_defaults_match_documented_values(self) -> None:
        config = resolve_config({})

        assert config.max_file_size == 100000
        assert config.max_files_per_commit == 20
        assert config.timeout_ms == 30000
        assert config.max_retries == 3
        assert config.retry_delay_ms == 1000
        assert config.cache_enabled is True
        assert config.cache_ttl == 3600
        assert config.model == "sonnet"
        assert config.indeterminate_policy == "allow"
        assert "py" in config.code_extensions
        assert "go" in config.code_extensions
        assert config.exclude_patterns == (
            "test",
            "spec",
            r"\.min\.",
            "node_modules",
            "dist",
            "build",
            r"\.git",
        )

    def test_config_is_frozen(self) -> None:
        config = resolve_config({})

        with pytest.raises(Exception):
            config.max_file_size = 1  # type: ignore[misc]

    def test_unit_conversions(self) -> None:
        config = resolve_config({"CLAUDE_TIMEOUT": "1500", "CLAUDE_API_RETRY_DELAY": "250"})

        assert config.timeout_seconds == 1.5
        assert config.retry_delay_seconds == 0.25


class TestPrecedence:
    def test_environment_beats_repo_and_team(self) -> None:
        config = resolve_config(
            {"MAX_FILE_SIZE": "10"},
            {"MAX_FILE_SIZE": "20"},
            {"MAX_FILE_SIZE": 30},
        )
        assert config.max_file_size == 10

    def test_repo_beats_team(self) -> None:
        config = resolve_config({}, {"MAX_FILE_SIZE": "20"}, {"MAX_FILE_SIZE": 30})
        assert config.max_file_size == 20

    def test_team_beats_default(self) -> None:
        config = resolve_config({}, {}, {"MAX_FILE_SIZE": 30})
        assert config.max_file_size == 30

    def test_empty_environment_value_is_ignored(self) -> None:
        config = resolve_config({"MAX_FILE_SIZE": "  "}, {"MAX_FILE_SIZE": "20"})
        assert config.max_file_size == 20

    @pytest.mark.parametrize(
        ("env_name", "raw", "attr", "expected"),
        [
            ("CLAUDE_TIMEOUT", "5000", "timeout_ms", 5000),
            ("CLAUDE_API_RETRIES", "0", "max_retries", 0),
            ("ENABLE_CACHE", "false", "cache_enabled", False),
            ("CLAUDE_MODEL", "opus", "model", "opus"),
            ("ANALYSIS_LEVEL", "thorough", "analysis_level", "thorough"),
            ("INDETERMINATE_POLICY", "block", "indeterminate_policy", "block"),
        ],
    )
    def test_environment_override_wins_for_each_field(
        self, env_name: str, raw: str, attr: str, expected: object
    ) -> None:
        config = resolve_config(
            {env_name: raw},
            {"CLAUDE_TIMEOUT": "1", "CLAUDE_MODEL": "haiku", "ENABLE_CACHE": "true"},
            {"CLAUDE_API_RETRIES": 9, "ANALYSIS_LEVEL": "quick"},
        )
        assert getattr(config, attr) == expected

    def test_provenance_names_each_source(self) -> None:
        _, provenance = resolve_config_with_provenance(
            {"CLAUDE_MODEL": "opus"},
            {"MAX_FILE_SIZE": "20"},
            {"CACHE_EXPIRY": 60},
        )

        assert provenance["model"] == "environment"
        assert provenance["max_file_size"] == "repo config"
        assert provenance["cache_ttl"] == "team config"
        assert provenance["max_retries"] == "default"

    def test_input_maps_are_not_shared(self) -> None:
        environ = {"CODE_EXTENSIONS": "py|go"}
        config = resolve_config(environ)
        environ["CODE_EXTENSIONS"] = "js"

        assert config.code_extensions == frozenset({"py", "go"})

    def test_unknown_keys_are_ignored(self) -> None:
        config = resolve_config({"SOMETHING_ELSE": "x", "PATH": "/bin"})
        assert config == resolve_config({})


class TestParsing:
    def test_extensions_accept_dots_case_and_lists(self) -> None:
        assert resolve_config({"CODE_EXTENSIONS": ".PY|Go"}).code_extensions == frozenset(
            {"py", "go"}
        )
        assert resolve_config({}, {}, {"CODE_EXTENSIONS": ["ts", ".tsx"]}).code_extensions == (
            frozenset({"ts", "tsx"})
        )

    def test_exclude_patterns_from_yaml_list(self) -> None:
        config = resolve_config({}, {}, {"EXCLUDE_PATTERNS": ["vendor/", r"\.lock$"]})
        assert config.exclude_patterns == ("vendor/", r"\.lock$")

    def test_split_patterns_respects_groups_classes_and_escapes(self) -> None:
        assert split_patterns(r"a|(b|c)|[|]|d\|e") == ["a", "(b|c)", "[|]", r"d\|e"]

    def test_model_must_be_supported(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            resolve_config({"CLAUDE_MODEL": "gpt-4"})
        assert exc_info.value.field == "CLAUDE_MODEL"

    def test_full_model_identifier_is_accepted(self) -> None:
        config = resolve_config({"CLAUDE_MODEL": "claude-sonnet-4-5-20250929"})
        assert config.model == "claude-sonnet-4-5-20250929"

    def test_log_level_accepts_warn_alias(self) -> None:
        assert resolve_config({"LOG_LEVEL": "warn"}).log_level == "WARN"


class TestMalformedValues:
    def test_malformed_environment_value_names_field_and_value(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            resolve_config({"MAX_FILE_SIZE": "big"}, {"MAX_FILE_SIZE": "20"})

        error = exc_info.value
        assert error.field == "MAX_FILE_SIZE"
        assert error.value == "big"
        assert "environment" in error.message

    def test_malformed_repo_value_does_not_fall_back(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            resolve_config({}, {"CLAUDE_API_RETRIES": "-1"}, {"CLAUDE_API_RETRIES": 2})
        assert exc_info.value.field == "CLAUDE_API_RETRIES"
        assert "repo config" in exc_info.value.message

    def test_invalid_exclude_regex(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            resolve_config({"EXCLUDE_PATTERNS": "dist|(unclosed"})
        assert exc_info.value.field == "EXCLUDE_PATTERNS"

    def test_unknown_analysis_level(self) -> None:
        with pytest.raises(ConfigError):
            resolve_config({"ANALYSIS_LEVEL": "extreme"})


class TestShellConfig:
    def test_parses_export_quotes_and_default_expansion(self, tmp_path: Path) -> None:
        path = tmp_path / ".claude-hooks-config.sh"
        path.write_text(
            "#!/bin/bash\n"
            "# comment\n"
            "export CLAUDE_MODEL=${CLAUDE_MODEL:-\"opus\"}\n"
            "export MAX_FILE_SIZE=${MAX_FILE_SIZE:-50000}\n"
            "CACHE_DIR='.cache dir'\n"
            "LOG_LEVEL=DEBUG  # verbose\n"
            "PROJECT_NAME=$(basename \"$(pwd)\")\n"
            "echo hello\n"
        )

        values = read_shell_config(path)

        assert values == {
            "CLAUDE_MODEL": "opus",
            "MAX_FILE_SIZE": "50000",
            "CACHE_DIR": ".cache dir",
            "LOG_LEVEL": "DEBUG",
        }

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert read_shell_config(tmp_path / "nope.sh") == {}


class TestTeamConfig:
    TEAM_YAML = """
file_filters:
  include_extensions: [py, go]
  exclude_patterns: ["vendor/"]
  max_file_size: 2048
  max_files_per_commit: 5
api:
  default_model: haiku
  timeout:
    pre_commit: 30000
    commit_msg: 15000
    pre_push: 60000
  retries:
    max_retries: 1
    retry_delay: 500
  cache:
    enabled: false
    ttl: 120
hooks:
  pre-push:
    enabled: false
analysis:
  default_level: quick
project:
  type: backend
  primary_language: python
"""

    def test_structured_layout_is_flattened(self) -> None:
        import yaml

        flat = flatten_team_config(yaml.safe_load(self.TEAM_YAML), "commit-msg")

        assert flat["CODE_EXTENSIONS"] == ["py", "go"]
        assert flat["MAX_FILES_PER_COMMIT"] == 5
        assert flat["CLAUDE_TIMEOUT"] == 15000
        assert flat["CLAUDE_MODEL"] == "haiku"
        assert flat["ENABLE_CACHE"] is False
        assert flat["PRE_PUSH_ENABLED"] is False
        assert flat["PROJECT_TYPE"] == "backend"

    def test_per_hook_timeout(self, tmp_path: Path) -> None:
        path = tmp_path / ".claude-hooks-team.yml"
        path.write_text(self.TEAM_YAML)

        assert resolve_config({}, {}, read_team_config(path, "pre-push")).timeout_ms == 60000
        assert resolve_config({}, {}, read_team_config(path, "pre-commit")).timeout_ms == 30000

    def test_flat_keys_are_accepted(self) -> None:
        assert flatten_team_config({"MAX_FILE_SIZE": 10}) == {"MAX_FILE_SIZE": 10}

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / ".claude-hooks-team.yml"
        path.write_text("api: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            read_team_config(path)

    def test_non_mapping_root_raises(self, tmp_path: Path) -> None:
        path = tmp_path / ".claude-hooks-team.yml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="must be a mapping"):
            read_team_config(path)


class TestLoadConfig:
    def test_reads_both_files_under_repo_root(self, tmp_path: Path) -> None:
        (tmp_path / ".claude-hooks-config.sh").write_text("export MAX_FILE_SIZE=1234\n")
        (tmp_path / ".claude-hooks-team.yml").write_text(
            "file_filters:\n  max_file_size: 99\n  max_files_per_commit: 7\n"
        )

        config = load_config(tmp_path, {"CLAUDE_MODEL": "opus"})

        assert isinstance(config, ReviewConfig)
        assert config.max_file_size == 1234
        assert config.max_files_per_commit == 7
        assert config.model == "opus"

    def test_no_files_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path, {}) == resolve_config({})

    def test_hook_enabled_flags(self, tmp_path: Path) -> None:
        config = load_config(tmp_path, {"PRE_PUSH_ENABLED": "false"})

        assert config.hook_enabled("pre-commit") is True
        assert config.hook_enabled("pre-push") is False
