"""Tests for the commit-msg checks and hook."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from rich.console import Console

from commitguard.config import ReviewConfig
from commitguard.exceptions import ReviewError, ReviewErrorKind
from commitguard.git import GitRepository
from commitguard.hooks import CommitMsgHook, check_message, clean_message, no_tty
from commitguard.review import ReviewOutcome


class TestCleanMessage:
    def test_strips_comments_and_blank_edges(self) -> None:
        raw = "\nfeat: add login\n\nBody text\n# Please enter the commit message\n#\n"

        assert clean_message(raw) == "feat: add login\n\nBody text"

    def test_only_comments(self) -> None:
        assert clean_message("# nothing here\n") == ""


class TestCheckMessage:
    def test_good_message(self, make_config: Callable[..., ReviewConfig]) -> None:
        check = check_message("feat(auth): add token refresh", make_config())

        assert check.outcome is ReviewOutcome.READY_TO_PROCEED
        assert check.problems == ()

    def test_empty_blocks(self, make_config: Callable[..., ReviewConfig]) -> None:
        assert check_message("", make_config()).outcome is ReviewOutcome.BLOCKED

    def test_long_subject_blocks(self, make_config: Callable[..., ReviewConfig]) -> None:
        check = check_message("feat: " + "x" * 80, make_config())

        assert check.outcome is ReviewOutcome.BLOCKED
        assert "too long" in check.problems[0]

    def test_short_subject_warns(self, make_config: Callable[..., ReviewConfig]) -> None:
        check = check_message("fix: a", make_config())

        assert check.outcome is ReviewOutcome.PROCEED_WITH_WARNINGS
        assert any("too short" in problem for problem in check.problems)

    def test_format_mismatch_warns(self, make_config: Callable[..., ReviewConfig]) -> None:
        check = check_message("Updated some files here", make_config())

        assert check.outcome is ReviewOutcome.PROCEED_WITH_WARNINGS

    def test_format_not_enforced(self, make_config: Callable[..., ReviewConfig]) -> None:
        config = make_config(ENFORCE_COMMIT_MESSAGE_FORMAT="false")

        check = check_message("Updated some files here", config)

        assert check.outcome is ReviewOutcome.READY_TO_PROCEED

    def test_only_subject_is_length_checked(
        self, make_config: Callable[..., ReviewConfig]
    ) -> None:
        message = "docs: explain cache layout\n\n" + "a long body line " * 20

        assert check_message(message, make_config()).outcome is ReviewOutcome.READY_TO_PROCEED


@pytest.fixture
def make_hook(
    tmp_path: Path,
    repository: GitRepository,
    client: MagicMock,
    console: Console,
    environ: dict[str, str],
    make_config: Callable[..., ReviewConfig],
) -> Callable[..., CommitMsgHook]:
    def _make(message: str | None, confirm=no_tty, **overrides: object) -> CommitMsgHook:
        message_file = tmp_path / "COMMIT_EDITMSG"
        if message is not None:
            message_file.write_text(message, encoding="utf-8")
        return CommitMsgHook(
            repository,
            make_config(**overrides),
            client,
            message_file=message_file,
            environ=environ,
            confirm=confirm,
            console=console,
        )

    return _make


class TestCommitMsgHook:
    @pytest.mark.asyncio
    async def test_good_message_passes(
        self, make_hook: Callable[..., CommitMsgHook], client: MagicMock
    ) -> None:
        decision = await make_hook("feat: add login validation\n").run()

        assert decision.allowed
        prompt = client.review.call_args.args[0]
        assert "feat: add login validation" in prompt

    @pytest.mark.asyncio
    async def test_special_messages_are_not_reviewed(
        self, make_hook: Callable[..., CommitMsgHook], client: MagicMock
    ) -> None:
        for message in ("Merge branch 'x'", "Revert \"feat: y\"", "fixup! feat: z"):
            decision = await make_hook(message).run()
            assert decision.allowed

        client.review.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_message_blocks(
        self, make_hook: Callable[..., CommitMsgHook], client: MagicMock
    ) -> None:
        decision = await make_hook("# comment only\n").run()

        assert not decision.allowed
        client.review.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_message_file_blocks(
        self, make_hook: Callable[..., CommitMsgHook]
    ) -> None:
        decision = await make_hook(None).run()

        assert not decision.allowed

    @pytest.mark.asyncio
    async def test_ai_reject_blocks(
        self, make_hook: Callable[..., CommitMsgHook], client: MagicMock
    ) -> None:
        client.review = AsyncMock(return_value="❌ REJECT - says nothing about the change")

        decision = await make_hook("fix: stuff and things").run()

        assert not decision.allowed
        assert decision.outcome is ReviewOutcome.BLOCKED

    @pytest.mark.asyncio
    async def test_ai_indeterminate_keeps_basic_outcome(
        self, make_hook: Callable[..., CommitMsgHook], client: MagicMock
    ) -> None:
        client.review = AsyncMock(return_value="I think this is fine")

        decision = await make_hook("feat: add login validation").run()

        assert decision.allowed
        assert decision.outcome is ReviewOutcome.READY_TO_PROCEED

    @pytest.mark.asyncio
    async def test_review_failure_falls_back_to_basic_checks(
        self, make_hook: Callable[..., CommitMsgHook], client: MagicMock, scripted_confirm
    ) -> None:
        client.review = AsyncMock(
            side_effect=ReviewError("timed out", kind=ReviewErrorKind.TIMEOUT)
        )

        good = await make_hook("feat: add login validation").run()
        sloppy = await make_hook("updated code", confirm=scripted_confirm(False)).run()

        assert good.allowed
        assert not sloppy.allowed
        assert sloppy.outcome is ReviewOutcome.PROCEED_WITH_WARNINGS

    @pytest.mark.asyncio
    async def test_unavailable_review_uses_basic_checks(
        self,
        make_hook: Callable[..., CommitMsgHook],
        client: MagicMock,
        review_available: MagicMock,
    ) -> None:
        review_available.side_effect = ReviewError(
            "no credentials", kind=ReviewErrorKind.CLIENT_UNAVAILABLE
        )

        decision = await make_hook("feat: add login validation").run()

        assert decision.allowed
        client.review.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_disabled(
        self, make_hook: Callable[..., CommitMsgHook], client: MagicMock
    ) -> None:
        decision = await make_hook("", COMMIT_MSG_ENABLED="false").run()

        assert decision.allowed
        client.review.assert_not_awaited()
