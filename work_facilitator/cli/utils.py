"""CLI Utility Functions"""

import os
import subprocess
import sys
import tempfile

from work_facilitator.output import dim

REVIEW_CHOICES = {
    'a': 'accept',
    '': 'accept',
    'e': 'edit',
    'r': 'regenerate',
    'c': 'cancel',
    'q': 'cancel',
}


def clean_commit_message(text: str) -> str:
    """Strip code fences and quotes a model sometimes wraps around the message."""
    lines = [line for line in text.strip().split('\n') if not line.strip().startswith('```')]
    cleaned = '\n'.join(lines).strip()
    if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in '"\'`':
        cleaned = cleaned[1:-1].strip()
    return cleaned


def ask_review_action() -> str:
    """Prompt until the user picks accept, edit, regenerate or cancel."""
    while True:
        try:
            choice = input(dim('(a)ccept, (e)dit, (r)egenerate, (c)ancel [a]: ')).strip().lower()
        except (KeyboardInterrupt, EOFError):
            print()
            return 'cancel'
        if choice in REVIEW_CHOICES:
            return REVIEW_CHOICES[choice]
        print("Enter a, e, r or c")


def ask_hint() -> str | None:
    try:
        return input(dim('  Hint (Enter to skip): ')).strip() or None
    except (KeyboardInterrupt, EOFError):
        return None


def prompt_manual_message() -> str | None:
    """Ask the user to type the commit message. None when left empty or aborted."""
    try:
        message = input('Commit message: ').strip()
    except (KeyboardInterrupt, EOFError):
        print()
        return None
    return message or None


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
