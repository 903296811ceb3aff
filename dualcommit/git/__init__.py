"""Git Operations Package"""

from dualcommit.git.analyzer import (
    CommitInfo,
    GitAnalyzer,
    GitError,
    LogOptions,
    RepoStatus,
    count_changed_lines,
)

__all__ = [
    "GitAnalyzer",
    "GitError",
    "CommitInfo",
    "LogOptions",
    "RepoStatus",
    "count_changed_lines",
]
