"""Git Operations Package"""

from work_facilitator.git.analyzer import GitAnalyzer, GitError, FileChange, StagedChanges
from work_facilitator.git.diff_processor import DiffProcessor, FilteredDiff, filter_diff
from work_facilitator.git.standard import check_standard, prefix_message
from work_facilitator.git.workflow import Workflow, WorkflowError, WorkflowStore

__all__ = [
    "GitAnalyzer",
    "GitError",
    "FileChange",
    "StagedChanges",
    "DiffProcessor",
    "FilteredDiff",
    "filter_diff",
    "check_standard",
    "prefix_message",
    "Workflow",
    "WorkflowError",
    "WorkflowStore",
]
