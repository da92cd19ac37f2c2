"""Fixtures shared by the hook tests."""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from git import Repo
from rich.console import Console

from commitguard.git import GitRepository
from commitguard.review import ReviewClient


class ScriptedConfirm:
    """Confirm callback that records questions and returns a fixed answer."""

    def __init__(self, answer: bool | None) -> None:
        self.answer = answer
        self.questions: list[tuple[str, bool]] = []

    def __call__(self, question: str, default: bool) -> bool | None:
        self.questions.append((question, default))
        return self.answer


@pytest.fixture
def repository(git_repo: Repo) -> GitRepository:
    return GitRepository(git_repo.working_tree_dir)


@pytest.fixture
def client() -> MagicMock:
    """ReviewClient whose review() answers PASS unless reconfigured."""
    mock = MagicMock(spec=ReviewClient)
    mock.review = AsyncMock(return_value="PASS")
    return mock


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=120)


@pytest.fixture
def environ() -> dict[str, str]:
    return {"ANTHROPIC_API_KEY": "sk-test"}


@pytest.fixture(autouse=True)
def review_available() -> Iterator[MagicMock]:
    """Pretend the review command is installed and authenticated."""
    with patch("commitguard.hooks.base.ensure_available") as mock:
        yield mock


@pytest.fixture
def scripted_confirm() -> Callable[[bool | None], ScriptedConfirm]:
    return ScriptedConfirm
