"""Terminal Output Formatting Package

Human-facing messages go to stdout, errors and --debug dumps to stderr.
Colors honour NO_COLOR / FORCE_COLOR; glyphs fall back to ASCII when the
console encoding cannot show them.
"""

import itertools
import os
import re
import sys
import threading


class Colors:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'


def _enable_windows_ansi() -> bool:
    try:
        import ctypes
        kernel32 = ctypes.windll.kernel32
        # ENABLE_PROCESSED_OUTPUT | ENABLE_WRAP_AT_EOL | ENABLE_VIRTUAL_TERMINAL_PROCESSING
        return bool(kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7))
    except (AttributeError, OSError):
        return False


def _color_wanted(stream) -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    isatty = getattr(stream, 'isatty', None)
    if isatty is None or not isatty():
        return False
    return _enable_windows_ansi() if sys.platform == 'win32' else True


def _encodable(sample: str, stream) -> bool:
    try:
        sample.encode(getattr(stream, 'encoding', None) or 'utf-8')
    except (UnicodeEncodeError, LookupError):
        return False
    return True


COLORS_ENABLED = _color_wanted(sys.stdout)
_FANCY_GLYPHS = _encodable('✓✗─⚠ℹ⠋', sys.stdout)


def _glyph(fancy: str, plain: str) -> str:
    return fancy if _FANCY_GLYPHS else plain


CHECK = _glyph('✓', '[OK]')
CROSS = _glyph('✗', '[X]')
RULE = _glyph('─', '-')
_WARN = _glyph('⚠', '[!]')
_INFO = _glyph('ℹ', '[i]')


def _colorize(text: str, *codes: str) -> str:
    if not COLORS_ENABLED or not codes:
        return text
    return ''.join(codes) + text + Colors.RESET


def success(text: str) -> str:
    return _colorize(text, Colors.GREEN)


def error(text: str) -> str:
    return _colorize(text, Colors.RED)


def warning(text: str) -> str:
    return _colorize(text, Colors.YELLOW)


def info(text: str) -> str:
    return _colorize(text, Colors.CYAN)


def blue(text: str) -> str:
    return _colorize(text, Colors.BLUE)


def dim(text: str) -> str:
    return _colorize(text, Colors.DIM)


def bold(text: str) -> str:
    return _colorize(text, Colors.BOLD)


def print_success(message: str) -> None:
    print(success(CHECK), message)


def print_error(message: str) -> None:
    print(error(CROSS), error(message), file=sys.stderr)


def print_warning(message: str) -> None:
    print(warning(_WARN), warning(message))


def print_info(message: str) -> None:
    print(info(_INFO), message)


def print_debug(title: str, body: str) -> None:
    """Diagnostic channel for --debug. Always stderr, never parsed."""
    header = f"=== DEBUG: {title} ==="
    print('\n' + _colorize(header, Colors.BOLD, Colors.CYAN), file=sys.stderr)
    if body:
        print(body, file=sys.stderr)
    print(_colorize('=' * len(header), Colors.BOLD, Colors.CYAN), file=sys.stderr)


_TYPE_COLORS = {
    'feat': Colors.GREEN,
    'perf': Colors.GREEN,
    'fix': Colors.RED,
    'refactor': Colors.YELLOW,
    'docs': Colors.CYAN,
    'test': Colors.MAGENTA,
    'chore': Colors.DIM,
    'style': Colors.DIM,
}

# type, optional (scope), optional !, then the colon
_HEADER_PREFIX = re.compile(r'^(\w+)(?:\([^)]*\))?!?:')


def colorize_commit_type(message: str) -> str:
    """Color the `type(scope):` prefix of the header line."""
    if not COLORS_ENABLED:
        return message
    header, sep, rest = message.partition('\n')
    match = _HEADER_PREFIX.match(header)
    color = _TYPE_COLORS.get(match.group(1)) if match else None
    if color is None:
        return message
    prefix = match.group(0)
    header = _colorize(prefix, Colors.BOLD, color) + header[len(prefix):]
    return header + sep + rest


class Spinner:
    """Braille spinner on stdout while a request is in flight.

    Does nothing when disabled or when stdout is not a terminal, so piped
    output stays clean.
    """

    INTERVAL = 0.08

    def __init__(self, enabled: bool = True):
        self._active = enabled and sys.stdout.isatty()
        self._done = threading.Event()
        self._worker = None

    def _frames(self):
        return itertools.cycle('⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏' if _FANCY_GLYPHS else '-\\|/')

    def _run(self):
        for frame in self._frames():
            if self._done.is_set():
                break
            print(f'\r\033[K{frame} ', end='', flush=True)
            self._done.wait(self.INTERVAL)

    def __enter__(self):
        if self._active:
            self._done.clear()
            self._worker = threading.Thread(target=self._run, daemon=True)
            self._worker.start()
        return self

    def __exit__(self, *exc_info):
        self._done.set()
        if self._worker is not None:
            self._worker.join()
            self._worker = None
            print('\r\033[K', end='', flush=True)


__all__ = [
    "Colors", "COLORS_ENABLED", "CHECK", "CROSS", "RULE",
    "success", "error", "warning", "info", "blue", "dim", "bold",
    "print_success", "print_error", "print_warning", "print_info", "print_debug",
    "colorize_commit_type", "Spinner",
]
