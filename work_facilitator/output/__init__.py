"""Terminal Output Formatting Package"""

import logging
import os
import shutil
import sys
import textwrap
import threading


class Colors:
    """ANSI escape codes for terminal colors."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    CYAN = '\033[36m'


def _supports_color() -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    if not getattr(sys.stdout, 'isatty', None) or not sys.stdout.isatty():
        return False
    if sys.platform != 'win32':
        return True
    try:
        import ctypes
        kernel32 = ctypes.windll.kernel32
        # ENABLE_VIRTUAL_TERMINAL_PROCESSING on the stdout handle
        kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7)
        return True
    except (AttributeError, OSError):
        return False


def _supports_unicode() -> bool:
    try:
        '✓⚠→'.encode(sys.stdout.encoding or 'utf-8')
        return True
    except (UnicodeEncodeError, LookupError):
        return False


COLORS_ENABLED = _supports_color()
UNICODE_ENABLED = _supports_unicode()

CHECK = '✓' if UNICODE_ENABLED else '[OK]'
CROSS = '✗' if UNICODE_ENABLED else '[X]'
WARN = '⚠' if UNICODE_ENABLED else '[!]'
ARROW = '→' if UNICODE_ENABLED else '->'


def _colorize(text: str, *codes: str) -> str:
    if not COLORS_ENABLED:
        return text
    return f"{''.join(codes)}{text}{Colors.RESET}"


def info(text: str) -> str:
    return _colorize(text, Colors.CYAN)


def dim(text: str) -> str:
    return _colorize(text, Colors.DIM)


def bold(text: str) -> str:
    return _colorize(text, Colors.BOLD)


def print_success(message: str) -> None:
    print(f"{_colorize(CHECK, Colors.GREEN)} {message}")


def print_error(message: str) -> None:
    """Errors go to stderr so piped stdout stays clean."""
    print(f"{_colorize(CROSS, Colors.RED)} {_colorize(message, Colors.RED)}", file=sys.stderr)


def print_warning(message: str) -> None:
    print(_colorize(f"{WARN} {message}", Colors.YELLOW))


def print_box(text: str) -> None:
    """Frame a commit message, wrapping lines wider than 80% of the terminal."""
    term_width = shutil.get_terminal_size((80, 24)).columns
    # "│ " + " │"
    max_width = max(int(term_width * 0.8), 60) - 4

    lines = []
    for line in text.split('\n'):
        lines.extend(textwrap.wrap(line, width=max_width) if len(line) > max_width else [line])
    width = max(len(line) for line in lines)

    if UNICODE_ENABLED:
        top, bottom, side = f'┌─{"─" * width}─┐', f'└─{"─" * width}─┘', '│'
    else:
        top = bottom = f'+-{"-" * width}-+'
        side = '|'

    print(dim(top))
    for line in lines:
        print(f"{dim(side)} {line.ljust(width)} {dim(side)}")
    print(dim(bottom))


def configure_logging(level: str = "warning") -> None:
    """Route library logging to stderr. Called once by the CLI."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=dim("%(levelname)s %(name)s: ") + "%(message)s",
        stream=sys.stderr,
        force=True,
    )


class Spinner:
    """Animated '<frame> label' line while a provider call or hook runs. Use as context manager."""
    FRAMES_UNICODE = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
    FRAMES_ASCII = ['-', '\\', '|', '/']

    def __init__(self, label: str = ""):
        self.label = label
        self._thread = None
        self._stop_event = threading.Event()
        self._frames = self.FRAMES_UNICODE if UNICODE_ENABLED else self.FRAMES_ASCII
        self._active = False

    def _spin(self):
        idx = 0
        while not self._stop_event.wait(0.08):
            frame = self._frames[idx % len(self._frames)]
            print(f'\r\033[K{frame} {self.label}', end='', flush=True)
            idx += 1

    def __enter__(self):
        self._active = sys.stdout.isatty()
        if self._active:
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._spin, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, *args):
        self._stop_event.set()
        if self._thread:
            self._thread.join()
            self._thread = None
        if self._active:
            print('\r\033[K', end='', flush=True)


__all__ = [
    "Colors", "COLORS_ENABLED", "UNICODE_ENABLED",
    "CHECK", "CROSS", "WARN", "ARROW",
    "info", "dim", "bold",
    "print_success", "print_error", "print_warning", "print_box",
    "configure_logging", "Spinner",
]
