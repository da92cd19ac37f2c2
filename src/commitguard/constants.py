"""commitguard constants: setting defaults, file names and model aliases.

The setting defaults below are the values existing deployments rely on; the
env names in ``commitguard.config`` map onto them one to one.
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# File Names
# =============================================================================

#: Per-repository shell config (``KEY=value`` lines), relative to the repo root
REPO_CONFIG_FILENAME: str = ".claude-hooks-config.sh"

#: Team-shared YAML config, relative to the repo root
TEAM_CONFIG_FILENAME: str = ".claude-hooks-team.yml"

# =============================================================================
# Review Defaults
# =============================================================================

DEFAULT_CODE_EXTENSIONS: str = "js|ts|jsx|tsx|py|java|go|rs|php|rb|swift|kt|cs|cpp|c|h"

DEFAULT_EXCLUDE_PATTERNS: str = r"test|spec|\.min\.|node_modules|dist|build|\.git"

#: Bytes; files at or under this size are eligible
DEFAULT_MAX_FILE_SIZE: int = 100000

DEFAULT_MAX_FILES_PER_COMMIT: int = 20

DEFAULT_TIMEOUT_MS: int = 30000

DEFAULT_MAX_RETRIES: int = 3

DEFAULT_RETRY_DELAY_MS: int = 1000

DEFAULT_CACHE_TTL_SECONDS: int = 3600

DEFAULT_CACHE_DIR: str = ".claude-hooks-cache"

DEFAULT_LOG_FILE: str = ".claude-hooks.log"

DEFAULT_COMMIT_MESSAGE_FORMAT_REGEX: str = (
    r"^(feat|fix|docs|style|refactor|test|chore|perf|build|ci|revert|wip)"
    r"(\(.+\))?!?: .+"
)

# =============================================================================
# Models
# =============================================================================

ModelAlias = Literal["sonnet", "opus", "haiku"]

#: Short model names accepted by the claude CLI
MODEL_ALIASES: tuple[ModelAlias, ...] = ("sonnet", "opus", "haiku")

DEFAULT_MODEL: ModelAlias = "sonnet"

# =============================================================================
# Hooks
# =============================================================================

HookName = Literal["pre-commit", "commit-msg", "pre-push"]

HOOK_NAMES: tuple[HookName, ...] = ("pre-commit", "commit-msg", "pre-push")

#: Lines of staged content included per file in the pre-commit prompt
PROMPT_MAX_LINES_PER_FILE: int = 150

#: Characters of diff included in the pre-push prompt
PROMPT_MAX_DIFF_CHARS: int = 60000


def is_supported_model(model_id: str) -> bool:
    """Check whether the claude CLI accepts ``model_id``.

    Example:
        >>> is_supported_model("opus")
        True
        >>> is_supported_model("claude-sonnet-4-5-20250929")
        True
        >>> is_supported_model("gpt-4")
        False
    """
    return model_id in MODEL_ALIASES or model_id.startswith("claude-")
