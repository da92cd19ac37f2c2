from __future__ import annotations

import logging
import os
from collections.abc import Callable, Generator, Iterator
from pathlib import Path
from typing import Any

import pytest
from git import Repo

from commitguard.config import ReviewConfig, resolve_config

#: Environment variables that would leak developer settings into tests
_CONFIG_ENV_NAMES = [
    field.alias for field in ReviewConfig.model_fields.values() if field.alias
] + ["ANTHROPIC_API_KEY", "CLAUDE_CODE_OAUTH_TOKEN", "COMMITGUARD_LOG_FORMAT"]


@pytest.fixture(autouse=True)
def configure_test_logging() -> Generator[None, None, None]:
    """Configure structlog for test environment.

    Logs go to stderr at WARNING level so they neither clutter test output
    nor mix with stdout assertions.
    """
    from commitguard.logging import clear_context, configure_logging

    configure_logging(level=logging.WARNING)
    yield
    clear_context()


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove configuration variables from the environment for the test."""
    original_env = os.environ.copy()
    for key in _CONFIG_ENV_NAMES:
        os.environ.pop(key, None)
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def make_config() -> Callable[..., ReviewConfig]:
    """Build a ReviewConfig from env-style overrides.

    Example:
        config = make_config(MAX_FILES_PER_COMMIT="2")
    """

    def _make(**overrides: Any) -> ReviewConfig:
        return resolve_config({key: str(value) for key, value in overrides.items()})

    return _make


@pytest.fixture
def git_repo(tmp_path: Path) -> Iterator[Repo]:
    """Create a temporary git repository with an initial commit."""
    repo_path = tmp_path / "repo"
    repo_path.mkdir()

    repo = Repo.init(repo_path)
    repo.config_writer().set_value("user", "email", "test@example.com").release()
    repo.config_writer().set_value("user", "name", "Test User").release()

    (repo_path / "README.md").write_text("# Test Repo\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    yield repo
    repo.close()


def write_file(repo: Repo, path: str, content: str | bytes) -> None:
    """Write ``content`` to ``path`` inside the repo's working tree."""
    target = Path(repo.working_tree_dir) / path  # type: ignore[arg-type]
    target.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        target.write_bytes(content)
    else:
        target.write_text(content)


@pytest.fixture
def stage() -> Callable[..., None]:
    """Write files into a repo and add them to the index."""

    def _stage(repo: Repo, files: dict[str, str | bytes]) -> None:
        for path, content in files.items():
            write_file(repo, path, content)
        repo.index.add(list(files))

    return _stage
