"""CLI Argument Parsing"""

import argparse
import argcomplete

from dualcommit import __version__


def _add_llm_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--api-key', type=str, metavar='KEY', help='API key for the AI service (or set OPENAI_API_KEY / ANTHROPIC_API_KEY)')
    parser.add_argument('--model', type=str, metavar='MODEL', help='AI model to use (overrides config)')
    parser.add_argument('--base-url', type=str, metavar='URL', help='Custom API base URL (e.g., https://api.openai.com/v1)')
    parser.add_argument('--debug', action='store_true', help='Debug mode - show raw AI responses on stderr')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='gcm',
        description='Bilingual AI commit messages and changelogs',
        epilog='Example: gcm commit'
    )

    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-p', '--path', type=str, metavar='PATH', help='Repository path (default: current directory)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')

    subparsers.add_parser('status', help='Check repository status (default)')

    commit = subparsers.add_parser('commit', help='Generate a commit message using AI')
    _add_llm_options(commit)
    commit.add_argument('--auto', action='store_true', help='Commit without confirmation')
    commit.add_argument('--show-diff', action='store_true', help='Preview the diff before generating')

    diff = subparsers.add_parser('diff', help='Show git diff')
    diff.add_argument('--staged', action='store_true', help='Show staged changes only')

    log = subparsers.add_parser('log', help='Show commit log, or summarize it into a changelog')
    log.add_argument('-n', '--count', type=int, default=10, help='Number of commits (default: 10)')
    log.add_argument('--grep', type=str, metavar='TEXT', help='Only commits whose message contains TEXT')
    log.add_argument('--author', type=str, help='Only commits by this author')
    log.add_argument('--since', type=str, metavar='DATE', help="Commits since date (e.g., '2024-01-01' or '1 week ago')")
    log.add_argument('--until', type=str, metavar='DATE', help='Commits until date')
    log.add_argument('--full', action='store_true', help='Show full commit messages')
    log.add_argument('--summarize', action='store_true', help='Generate a bilingual changelog summary with AI')
    _add_llm_options(log)

    init = subparsers.add_parser('init', help='Create a configuration file')
    init.add_argument('--local', action='store_true', help='Create config in current directory instead of home')
    init.add_argument('--force', action='store_true', help='Overwrite an existing config')

    subparsers.add_parser('config', help='Show current configuration')
    subparsers.add_parser('completion', help='Show shell tab completion setup')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
