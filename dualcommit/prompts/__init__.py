"""Prompt Construction Package"""

from dualcommit.prompts.builder import (
    CHANGELOG_SYSTEM_PROMPT,
    COMMIT_SYSTEM_PROMPT,
    MAX_DIFF_SIZE,
    TRUNCATION_RETRY_PROMPT,
    ChangelogContext,
    CommitContext,
    PromptBuilder,
    truncate_diff,
)

__all__ = [
    "PromptBuilder",
    "CommitContext",
    "ChangelogContext",
    "truncate_diff",
    "MAX_DIFF_SIZE",
    "COMMIT_SYSTEM_PROMPT",
    "CHANGELOG_SYSTEM_PROMPT",
    "TRUNCATION_RETRY_PROMPT",
]
