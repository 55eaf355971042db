"""Diff Processor - Drop excluded files from the diff sent to the model."""

import logging
import re
from dataclasses import dataclass, field

from work_facilitator.git.analyzer import StagedChanges

logger = logging.getLogger(__name__)


@dataclass
class FilteredDiff:
    """Diff text restricted to the files that survived exclude patterns."""
    diff: str
    kept_files: list[str] = field(default_factory=list)
    excluded_files: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.diff.strip()


class DiffProcessor:
    """Filters per-file diff sections by path regex."""

    def __init__(self, exclude_patterns: list[str] | None = None):
        try:
            self._exclude_re = [re.compile(p) for p in exclude_patterns or []]
        except re.error as e:
            raise ValueError(f"Invalid exclude pattern '{e.pattern}': {e}") from e

    def is_excluded(self, path: str) -> bool:
        for pattern in self._exclude_re:
            if pattern.search(path):
                logger.debug("File '%s' matches exclude pattern '%s'", path, pattern.pattern)
                return True
        return False

    def filter(self, changes: StagedChanges) -> FilteredDiff:
        file_diffs = self._split_diff_by_file(changes.diff)
        kept, excluded, parts = [], [], []

        for path, file_diff in file_diffs.items():
            if self.is_excluded(path):
                excluded.append(path)
                continue
            kept.append(path)
            parts.append(file_diff)

        return FilteredDiff(diff="\n".join(parts), kept_files=kept, excluded_files=excluded)

    def _split_diff_by_file(self, diff: str) -> dict[str, str]:
        files = {}
        current_file = None
        current_lines = []

        for line in diff.split('\n'):
            if line.startswith('diff --git'):
                if current_file:
                    files[current_file] = '\n'.join(current_lines)
                match = re.search(r'diff --git a/(.+?) b/', line)
                if match:
                    current_file = match.group(1)
                    current_lines = [line]
            elif current_file:
                current_lines.append(line)

        if current_file:
            files[current_file] = '\n'.join(current_lines)

        return files


def filter_diff(changes: StagedChanges, exclude_patterns: list[str]) -> FilteredDiff:
    return DiffProcessor(exclude_patterns).filter(changes)
