"""Git Analyzer - Staged changes and commit/push plumbing."""

import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

# 'git hook' output that means the command itself is unusable, not that a hook failed
_GIT_HOOK_UNSUPPORTED = (
    "git: 'hook' is not a git command",
    "fatal: not a git repository",
)


@dataclass
class FileChange:
    """Represents a single file's changes."""
    path: str
    additions: int
    deletions: int


@dataclass
class StagedChanges:
    """Complete picture of what's staged for commit."""
    files: list[FileChange] = field(default_factory=list)
    diff: str = ""

    @property
    def is_empty(self) -> bool:
        return len(self.files) == 0


class GitError(Exception):
    """Raised when git operations fail."""
    pass


class GitAnalyzer:
    """Thin subprocess wrapper around the git commands the workflow needs."""

    def __init__(self, cwd: str | Path | None = None):
        self.cwd = str(cwd) if cwd is not None else None
        self._verify_git_available()
        self._verify_in_repo()

    def _run_git(self, *args: str) -> str:
        """Run a git command and return stdout."""
        try:
            result = subprocess.run(
                ['git', *args],
                cwd=self.cwd,
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr}")
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
            raise GitError("Not inside a git repository")

    @property
    def git_dir(self) -> Path:
        path = Path(self._run_git('rev-parse', '--git-dir').strip())
        if not path.is_absolute():
            path = Path(self.cwd or os.getcwd()) / path
        return path

    def get_staged_changes(self) -> StagedChanges:
        """Get staged changes only."""
        files = self._get_staged_files()
        diff = self._get_staged_diff()
        return StagedChanges(files=files, diff=diff)

    def _get_staged_files(self) -> list[FileChange]:
        """Parse 'git diff --staged --numstat' output."""
        output = self._run_git('diff', '--staged', '--numstat')

        if not output.strip():
            return []

        files = []
        for line in output.strip().split('\n'):
            parts = line.split('\t')
            if len(parts) >= 3:
                additions = int(parts[0]) if parts[0] != '-' else 0
                deletions = int(parts[1]) if parts[1] != '-' else 0
                path = parts[2]
                files.append(FileChange(path=path, additions=additions, deletions=deletions))

        return files

    def _get_staged_diff(self) -> str:
        """Get the actual diff content for staged changes."""
        return self._run_git('diff', '--staged')

    def current_branch(self) -> str:
        branch = self._run_git('rev-parse', '--abbrev-ref', 'HEAD').strip()
        if branch == 'HEAD':
            raise GitError("HEAD is detached, not on a branch")
        return branch

    def status(self) -> str:
        """'git status --short' output, empty for a clean working tree."""
        return self._run_git('status', '--short').rstrip('\n')

    def add_all(self) -> None:
        logger.debug("git add --all")
        self._run_git('add', '--all')

    def commit(self, message: str) -> None:
        logger.debug("git commit -m %s", message)
        self._run_git('commit', '--no-verify', '-m', message)

    def push(self, branch: str, remote: str = "origin") -> None:
        logger.debug("git push %s %s", remote, branch)
        self._run_git('push', remote, f"refs/heads/{branch}:refs/heads/{branch}")

    def run_pre_commit_hooks(self) -> None:
        """Run the pre-commit hook, raising GitError with its output on failure.

        Prefers 'git hook run' (git 2.36+) and falls back to executing
        .git/hooks/pre-commit directly. A missing hook is not an error.
        """
        result = subprocess.run(
            ['git', 'hook', 'run', '--ignore-missing', 'pre-commit'],
            cwd=self.cwd,
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='replace'
        )
        if result.returncode == 0:
            return

        output = result.stdout + result.stderr
        if not any(marker in output for marker in _GIT_HOOK_UNSUPPORTED) \
                and "usage: git hook" not in output:
            raise GitError(f"Pre-commit hooks failed:\n{output}")

        hook_path = self.git_dir / 'hooks' / 'pre-commit'
        if not hook_path.exists():
            logger.debug("No pre-commit hook found, skipping")
            return
        if not os.access(hook_path, os.X_OK):
            logger.debug("Pre-commit hook exists but is not executable, skipping")
            return

        result = subprocess.run(
            [str(hook_path)],
            cwd=self.cwd,
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='replace'
        )
        if result.returncode != 0:
            raise GitError(f"Pre-commit hooks failed:\n{result.stdout}{result.stderr}")
