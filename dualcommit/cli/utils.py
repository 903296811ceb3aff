"""CLI Utility Functions"""

import getpass
import os
import subprocess
import sys
import tempfile

from dualcommit.config import DEFAULT_KEY_ENVS
from dualcommit.output import bold, dim


def is_interactive() -> bool:
    return sys.stdin.isatty() and sys.stderr.isatty()


def confirm(prompt: str, default: bool = True) -> bool:
    """Yes/no prompt. Non-interactive sessions get the default."""
    if not is_interactive():
        return default
    suffix = "[Y/n]" if default else "[y/N]"
    try:
        answer = input(f"{prompt} {dim(suffix)} ").strip().lower()
    except (KeyboardInterrupt, EOFError):
        print()
        return False
    if not answer:
        return default
    return answer in ('y', 'yes')


def prompt_api_key(provider: str) -> str | None:
    """Ask for an API key without echoing it."""
    if not is_interactive():
        return None
    env_name = DEFAULT_KEY_ENVS.get(provider, "API_KEY")
    print(dim(f"No API key configured. Set {env_name} to skip this prompt."))
    try:
        key = getpass.getpass(f"{bold(provider)} API key: ").strip()
    except (KeyboardInterrupt, EOFError):
        print()
        return None
    return key or None


def ask_action() -> str:
    """Return one of 'accept', 'edit', 'regenerate', 'cancel'."""
    choices = {'a': 'accept', '': 'accept', 'e': 'edit', 'r': 'regenerate', 'c': 'cancel', 'q': 'cancel'}
    while True:
        try:
            answer = input(f"\n{dim('(a)ccept, (e)dit, (r)egenerate, (c)ancel [a]: ')}").strip().lower()
        except (KeyboardInterrupt, EOFError):
            print()
            return 'cancel'
        if answer in choices:
            return choices[answer]
        print("Enter a, e, r or c")


def edit_message(message: str) -> str | None:
    """Open message in user's editor. Returns edited text or None on failure."""
    editor = os.environ.get('VISUAL') or os.environ.get('EDITOR')
    if not editor:
        editor = 'notepad' if sys.platform == 'win32' else 'vi'

    tmp = tempfile.NamedTemporaryFile(mode='w', suffix='.gitcommit', delete=False, encoding='utf-8')
    try:
        tmp.write(message)
        tmp.close()
        subprocess.run([editor, tmp.name], check=True)
        with open(tmp.name, 'r', encoding='utf-8') as f:
            edited = f.read().strip()
        return edited if edited else None
    except (subprocess.CalledProcessError, OSError):
        return None
    finally:
        try:
            os.unlink(tmp.name)
        except OSError as e:
            print(f"Warning: Could not delete temp file {tmp.name}: {e}", file=sys.stderr)
