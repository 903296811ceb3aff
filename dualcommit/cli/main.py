"""CLI Main Entry Point"""

import os
import sys

from dualcommit.config import Config, load_config
from dualcommit.errors import LLMError
from dualcommit.generator import ResponseGenerator
from dualcommit.git import CommitInfo, GitAnalyzer, GitError, LogOptions, count_changed_lines
from dualcommit.llm import get_client
from dualcommit.output import (
    RULE, Spinner, bold, colorize_commit_type, dim, info, print_debug, print_error,
    print_info, print_success, print_warning, warning,
)
from dualcommit.prompts import ChangelogContext, CommitContext

from dualcommit.cli.args import parse_args
from dualcommit.cli.commands import display_config, run_diff, run_init, run_install_completion, run_status
from dualcommit.cli.utils import ask_action, confirm, edit_message, is_interactive, prompt_api_key

DIFF_PREVIEW_LINES = 30


def _display_message(message):
    """Display commit message between horizontal rules with colored type."""
    lines = colorize_commit_type(message).split('\n')
    width = min(max((len(line) for line in message.split('\n')), default=40), 100)
    print(f"\n{dim(RULE * width)}")
    print(bold(lines[0]))
    for line in lines[1:]:
        print(line)
    print(dim(RULE * width))


def _resolve_settings(args, config: Config) -> tuple[str, str, str | None]:
    """Precedence: CLI args > environment variables > config file."""
    provider = (os.environ.get('GCM_PROVIDER') or config.provider).lower()
    model = args.model or os.environ.get('GCM_MODEL') or config.model
    base_url = args.base_url or os.environ.get('GCM_BASE_URL') or config.base_url
    return provider, model, base_url


def _build_generator(args, config: Config) -> ResponseGenerator | None:
    provider, model, base_url = _resolve_settings(args, config)

    api_key = args.api_key or config.get_api_key() or prompt_api_key(provider)
    if not api_key:
        print_error("No API key provided. Use --api-key, set it in the config, or export it.")
        return None

    client = get_client(provider, api_key=api_key, model=model, base_url=base_url)
    if args.debug:
        print_debug("Client", f"{client.name}, max_tokens={config.max_tokens}")
    return ResponseGenerator(client, max_tokens=config.max_tokens, debug=args.debug)


def _stage_changes(analyzer: GitAnalyzer, config: Config) -> None:
    """Offer to stage everything when the working tree has unstaged changes."""
    status = analyzer.get_status()
    if not status.has_unstaged:
        return

    if config.auto_stage:
        analyzer.stage_all()
        print_info("All changes staged (auto_stage)")
        return

    if not is_interactive():
        return

    print(f"\n{warning('Unstaged changes detected:')}")
    print(RULE * 50)
    for path in status.modified_files:
        print(f"  {warning('M')} {path}")
    for path in status.new_files:
        print(f"  {warning('?')} {path}")
    for path in status.deleted_files:
        print(f"  {warning('D')} {path}")
    print(RULE * 50)

    if confirm("Do you want to stage all changes (git add .)?", default=True):
        analyzer.stage_all()
        print_info("All changes staged successfully")
    else:
        print_info("Proceeding with only currently staged changes")


def _preview_diff(diff: str) -> bool:
    lines = diff.split('\n')
    print(bold("\nDiff preview:"))
    for line in lines[:DIFF_PREVIEW_LINES]:
        print(dim(line))
    if len(lines) > DIFF_PREVIEW_LINES:
        print(dim(f"... {len(lines) - DIFF_PREVIEW_LINES} more lines"))
    return confirm("Generate a commit message for these changes?", default=True)


def _commit_flow(args, config: Config, analyzer: GitAnalyzer) -> int:
    status = analyzer.get_status()
    if status.is_clean:
        print_info("No changes to commit")
        return 0

    _stage_changes(analyzer, config)

    diff = analyzer.get_combined_diff()
    if args.debug:
        print_debug("Combined diff length", str(len(diff)))
    if not diff:
        print_info("No changes detected")
        return 0

    if args.show_diff and not _preview_diff(diff):
        print_info("Commit generation cancelled")
        return 0

    generator = _build_generator(args, config)
    if generator is None:
        return 1

    try:
        return _generate_and_commit(args, generator, analyzer, diff)
    finally:
        generator.client.close()


def _generate_and_commit(args, generator: ResponseGenerator, analyzer: GitAnalyzer, diff: str) -> int:
    added, removed = count_changed_lines(diff)
    context = CommitContext(
        branch_name=analyzer.get_branch_name(),
        file_count=analyzer.get_status().total_changes,
        added_lines=added,
        removed_lines=removed,
    )

    while True:
        print_info(f"Generating commit message with {info(generator.client.name)}...")
        with Spinner(enabled=not args.debug):
            commit_message = generator.generate_commit_message(diff, context)
        message = commit_message.format_conventional()
        _display_message(message)

        if args.auto or not is_interactive():
            action = 'accept' if args.auto else 'cancel'
        else:
            action = ask_action()

        if action == 'regenerate':
            continue
        if action == 'edit':
            edited = edit_message(message)
            if not edited:
                print_warning("Edit aborted, nothing committed")
                return 1
            analyzer.commit(edited)
            print_success("Changes committed with edited message!")
            return 0
        if action == 'accept':
            analyzer.commit(message)
            print_success("Changes committed successfully!")
            return 0

        if not is_interactive() and not args.auto:
            print(dim("Not a terminal; use --auto to commit without confirmation."))
        print_info("Commit cancelled")
        return 0


def _print_commit(commit: CommitInfo, full: bool) -> None:
    print(f"{warning(commit.short_id)} {dim(f'{commit.time:%Y-%m-%d %H:%M}')} - "
          f"{bold(commit.summary)} ({info(commit.author)})")
    if not full:
        return
    body = [f"    {line}" for line in commit.message.split('\n')[1:] if line.strip()]
    if body:
        print(dim('\n'.join(body)))
    print()


def _date_range(commits: list[CommitInfo]) -> str | None:
    if not commits:
        return None
    newest, oldest = commits[0].time, commits[-1].time
    return f"{oldest:%Y-%m-%d} ~ {newest:%Y-%m-%d}"


def _log_flow(args, config: Config, analyzer: GitAnalyzer) -> int:
    options = LogOptions(
        count=args.count,
        grep=args.grep,
        author=args.author,
        since=args.since,
        until=args.until,
    )
    commits = analyzer.get_commits(options)
    if not commits:
        print(warning("No commits found"))
        return 0

    if not args.summarize:
        print(f"{bold('Changelog')} ({len(commits)} commits)\n")
        for commit in commits:
            _print_commit(commit, args.full)
        return 0

    generator = _build_generator(args, config)
    if generator is None:
        return 1

    context = ChangelogContext(total_commits=len(commits), date_range=_date_range(commits))
    print_info(f"Summarizing {len(commits)} commits with {info(generator.client.name)}...")
    try:
        with Spinner(enabled=not args.debug):
            summary = generator.generate_changelog(commits, context)
    finally:
        generator.client.close()
    print()
    print(summary.format_display().rstrip())
    return 0


def _run(args) -> int:
    if args.command == 'init':
        return run_init(args.local, args.force)
    if args.command == 'config':
        return display_config()
    if args.command == 'completion':
        return run_install_completion()

    try:
        analyzer = GitAnalyzer(path=args.path)
    except GitError as e:
        print_error(str(e))
        return 1

    config = load_config()

    if args.command == 'commit':
        return _commit_flow(args, config, analyzer)
    if args.command == 'diff':
        return run_diff(analyzer, args.staged)
    if args.command == 'log':
        return _log_flow(args, config, analyzer)
    return run_status(analyzer, args.verbose)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    try:
        return _run(args)
    except (LLMError, GitError) as e:
        print_error(str(e))
        return 1
    except KeyboardInterrupt:
        print()
        return 130


if __name__ == '__main__':
    sys.exit(main())
