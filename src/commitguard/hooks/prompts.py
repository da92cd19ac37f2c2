"""Prompt construction for the review hooks.

Prompts are assembled from explicit fields; nothing here is ever handed to a
shell. Each prompt ends with the marker vocabulary the matching interpreter
table understands.
"""

from __future__ import annotations

from collections.abc import Sequence

from commitguard.config import ReviewConfig
from commitguard.constants import PROMPT_MAX_DIFF_CHARS, PROMPT_MAX_LINES_PER_FILE
from commitguard.git import CommitInfo

__all__ = [
    "PRE_COMMIT_SYSTEM_PROMPT",
    "COMMIT_MSG_SYSTEM_PROMPT",
    "PRE_PUSH_SYSTEM_PROMPT",
    "truncate_lines",
    "build_pre_commit_prompt",
    "build_commit_msg_prompt",
    "build_pre_push_prompt",
]

PRE_COMMIT_SYSTEM_PROMPT = (
    "You are a senior code reviewer. Find security issues, bugs and serious "
    "quality problems in staged changes. Be specific and actionable."
)

COMMIT_MSG_SYSTEM_PROMPT = (
    "You are a software engineering expert evaluating Git commit message "
    "quality. Focus on clarity, completeness, and best practices."
)

PRE_PUSH_SYSTEM_PROMPT = (
    "You are a release reviewer deciding whether a set of commits is safe to "
    "push. Focus on security, production risk and breaking changes."
)

_LEVEL_GUIDANCE = {
    "quick": "Only report problems that would clearly break or endanger the code.",
    "moderate": "Report real bugs, security issues and notable quality problems.",
    "thorough": "Review in depth, including design, performance and test coverage.",
}


def truncate_lines(text: str, max_lines: int) -> tuple[str, int]:
    """Keep the first ``max_lines`` lines of ``text``.

    Returns:
        Tuple of (kept text, total line count).
    """
    lines = text.splitlines()
    return "\n".join(lines[:max_lines]), len(lines)


def _project_line(config: ReviewConfig) -> str:
    return f"Project type: {config.project_type}; primary language: {config.primary_language}"


def build_pre_commit_prompt(
    config: ReviewConfig, files: Sequence[tuple[str, str]]
) -> str:
    """Prompt asking for a review of staged file contents.

    Args:
        config: Analysis level and project context.
        files: ``(path, staged content)`` pairs, in review order.
    """
    sections = [
        "Review the following staged files before they are committed.",
        _project_line(config),
        f"Analysis level: {config.analysis_level}. {_LEVEL_GUIDANCE[config.analysis_level]}",
        "",
    ]
    for path, content in files:
        kept, total = truncate_lines(content, PROMPT_MAX_LINES_PER_FILE)
        sections.append(f"### {path}")
        sections.append("```")
        sections.append(kept)
        sections.append("```")
        if total > PROMPT_MAX_LINES_PER_FILE:
            sections.append(
                f"(showing {PROMPT_MAX_LINES_PER_FILE} of {total} lines)"
            )
        sections.append("")
    sections.extend(
        [
            "## Output format",
            "For each problem write one line:",
            "ERROR [CRITICAL|HIGH|MEDIUM|LOW] <file>:<line> - <description>",
            "followed by the type, details and a suggested fix.",
            "Use WARNING instead of ERROR for minor issues.",
            "If there are no serious issues, start your answer with:",
            "PASS - Code quality is good, can be committed",
        ]
    )
    return "\n".join(sections)


def build_commit_msg_prompt(message: str, changed_files: Sequence[str]) -> str:
    """Prompt asking for an evaluation of a commit message."""
    listing = "\n".join(f"- {path}" for path in changed_files[:10]) or "- (none)"
    return "\n".join(
        [
            "Evaluate this Git commit message.",
            "",
            "## Commit message",
            message,
            "",
            f"## Changed files ({len(changed_files)})",
            listing,
            "",
            "Judge clarity, whether it matches the changes, format (Conventional "
            "Commits), and use of the imperative mood.",
            "",
            "## Output format",
            "Start your answer with exactly one of:",
            "✅ PASS - the message is good",
            "⚠️ NEEDS_IMPROVEMENT - list the problems and suggest a better message",
            "❌ REJECT - the message must be rewritten; explain why",
        ]
    )


def build_pre_push_prompt(
    config: ReviewConfig,
    *,
    remote: str,
    branch: str | None,
    commits: Sequence[CommitInfo],
    files: Sequence[str],
    diff: str,
) -> str:
    """Prompt asking whether a push range is ready."""
    if len(diff) > PROMPT_MAX_DIFF_CHARS:
        diff = diff[:PROMPT_MAX_DIFF_CHARS] + "\n... (diff truncated)"
    commit_lines = "\n".join(f"- {c.short_sha} {c.message}" for c in commits) or "- (none)"
    file_lines = "\n".join(f"- {path}" for path in files) or "- (none)"
    return "\n".join(
        [
            f"Review commits about to be pushed to {remote}"
            + (f" from branch {branch}." if branch else "."),
            _project_line(config),
            f"Analysis level: {config.analysis_level}. {_LEVEL_GUIDANCE[config.analysis_level]}",
            "",
            f"## Commits ({len(commits)})",
            commit_lines,
            "",
            "## Reviewed files",
            file_lines,
            "",
            "## Diff",
            "```diff",
            diff,
            "```",
            "",
            "## Output format",
            "Start your answer with exactly one of:",
            "✅ PUSH_READY - safe to push",
            "⚠️ PUSH_WITH_ATTENTION - safe to push, but list what to watch",
            "❌ DELAY_PUSH - fix the listed problems before pushing",
            "🚫 BLOCK_PUSH - serious problems that must be fixed",
        ]
    )
