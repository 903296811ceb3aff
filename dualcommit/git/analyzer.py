"""Git Analyzer - Status, diffs and history from the git executable."""

import subprocess
from dataclasses import dataclass, field
from datetime import datetime

FIELD_SEP = '\x1f'
RECORD_SEP = '\x1e'
LOG_FORMAT = f"%h{FIELD_SEP}%aI{FIELD_SEP}%an{FIELD_SEP}%s{FIELD_SEP}%B{RECORD_SEP}"

STAGED_HEADER = "=== STAGED CHANGES ==="
UNSTAGED_HEADER = "=== UNSTAGED CHANGES ==="


@dataclass
class RepoStatus:
    """Working tree state, grouped the way `git status` reports it."""
    modified_files: list[str] = field(default_factory=list)
    new_files: list[str] = field(default_factory=list)
    deleted_files: list[str] = field(default_factory=list)
    renamed_files: list[str] = field(default_factory=list)
    has_unstaged: bool = False

    @property
    def total_changes(self) -> int:
        return (len(self.modified_files) + len(self.new_files)
                + len(self.deleted_files) + len(self.renamed_files))

    @property
    def is_clean(self) -> bool:
        return self.total_changes == 0


@dataclass
class CommitInfo:
    short_id: str
    time: datetime
    summary: str
    author: str
    message: str = ""


@dataclass
class LogOptions:
    count: int = 10
    grep: str | None = None
    author: str | None = None
    since: str | None = None
    until: str | None = None


class GitError(Exception):
    """Raised when git operations fail."""
    pass


def parse_porcelain(output: str) -> RepoStatus:
    """Parse `git status --porcelain` (v1) output."""
    status = RepoStatus()
    for line in output.splitlines():
        if len(line) < 4:
            continue
        code, path = line[:2], line[3:]

        if code == '??':
            status.new_files.append(path)
            status.has_unstaged = True
            continue
        if code[1] != ' ':
            status.has_unstaged = True

        if 'M' in code:
            status.modified_files.append(path)
        elif 'A' in code:
            status.new_files.append(path)
        elif 'D' in code:
            status.deleted_files.append(path)
        elif 'R' in code:
            status.renamed_files.append(path)
    return status


def parse_log(output: str) -> list[CommitInfo]:
    """Parse output produced with LOG_FORMAT."""
    commits = []
    for record in output.split(RECORD_SEP):
        record = record.strip('\n')
        if not record:
            continue
        parts = record.split(FIELD_SEP, 4)
        if len(parts) < 5:
            continue
        short_id, timestamp, author, summary, message = parts
        commits.append(CommitInfo(
            short_id=short_id,
            time=datetime.fromisoformat(timestamp),
            summary=summary,
            author=author,
            message=message.strip(),
        ))
    return commits


def count_changed_lines(diff: str) -> tuple[int, int]:
    """Count added and removed lines in a unified diff."""
    lines = diff.splitlines()
    added = sum(1 for line in lines if line.startswith('+'))
    removed = sum(1 for line in lines if line.startswith('-'))
    return added, removed


class GitAnalyzer:
    """Reads repository state for prompt building and runs commits."""

    def __init__(self, path: str | None = None):
        self.path = path
        self._verify_git_available()
        self._verify_in_repo()

    def _run_git(self, *args: str) -> str:
        """Run a git command and return stdout."""
        cmd = ['git', *args] if self.path is None else ['git', '-C', self.path, *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            output = (e.stderr or e.stdout or "").strip()
            raise GitError(f"Git command failed: git {' '.join(args)}\n{output}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_git_available(self) -> None:
        """Fail fast if git isn't available."""
        try:
            self._run_git('--version')
        except GitError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_in_repo(self) -> None:
        """Fail fast if we're not in a git repository."""
        try:
            self._run_git('rev-parse', '--git-dir')
        except GitError:
            raise GitError("Not a Git repository. Run 'git init' to initialize one.")

    def get_status(self) -> RepoStatus:
        return parse_porcelain(self._run_git('status', '--porcelain'))

    def get_branch_name(self) -> str | None:
        """Current branch, or None when HEAD is detached."""
        try:
            return self._run_git('symbolic-ref', '--short', 'HEAD').strip() or None
        except GitError:
            return None

    def get_diff(self, staged: bool) -> str:
        if staged:
            return self._run_git('diff', '--staged')
        return self._run_git('diff')

    def get_combined_diff(self) -> str:
        staged = self.get_diff(staged=True)
        unstaged = self.get_diff(staged=False)

        sections = []
        if staged:
            sections.append(f"{STAGED_HEADER}\n\n{staged}")
        if unstaged:
            sections.append(f"{UNSTAGED_HEADER}\n\n{unstaged}")
        return "\n\n".join(sections)

    def get_commits(self, options: LogOptions) -> list[CommitInfo]:
        args = ['log', f'-n{options.count}', f'--format={LOG_FORMAT}']
        if options.grep:
            args.append(f'--grep={options.grep}')
        if options.author:
            args.append(f'--author={options.author}')
        if options.since:
            args.append(f'--since={options.since}')
        if options.until:
            args.append(f'--until={options.until}')
        try:
            output = self._run_git(*args)
        except GitError as e:
            # No commits yet
            if "does not have any commits" in str(e):
                return []
            raise
        return parse_log(output)

    def stage_all(self) -> None:
        self._run_git('add', '.')

    def commit(self, message: str) -> None:
        try:
            self._run_git('commit', '-m', message)
        except GitError as e:
            text = str(e)
            if "nothing to commit" in text:
                raise GitError("No changes to commit. All changes may already be committed.")
            if "Please tell me who you are" in text:
                raise GitError(
                    "Git user not configured. Please run:\n"
                    '  git config --global user.email "you@example.com"\n'
                    '  git config --global user.name "Your Name"'
                )
            raise
