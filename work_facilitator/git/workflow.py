"""
Workflow Store

Workflows live in the repository's own .git/config:

    [workflowsetup]
        current = feat/PROJ-12-add-login
    [workflow "feat/PROJ-12-add-login"]
        type-branch = feat
        type-commit = feat
        ticket = PROJ-12
        title = Add login
        branch = feat/PROJ-12-add-login
        commit = feat(PROJ-12):
        refbranch = main
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

SETUP_SECTION = "workflowsetup"
WORKFLOW_SECTION = "workflow"
CURRENT_OPTION = "current"

TYPE_BRANCH_OPTION = "type-branch"
TYPE_COMMIT_OPTION = "type-commit"
MR_REF_OPTION = "mrref"
TICKET_OPTION = "ticket"
TITLE_OPTION = "title"
BRANCH_OPTION = "branch"
COMMIT_OPTION = "commit"
REF_BRANCH_OPTION = "refbranch"


class WorkflowError(Exception):
    """Raised when workflow data is missing or git config cannot be read/written."""
    pass


@dataclass
class Workflow:
    name: str
    branch_type: str = ""
    commit_type: str = ""
    issue: int = 0
    ticket: str = ""
    title: str = ""
    commit: str = ""
    ref_branch: str = ""
    branch: str = ""


class WorkflowStore:
    """Reads and writes workflow sections with 'git config --local'."""

    def __init__(self, cwd: str | Path | None = None):
        self.cwd = str(cwd) if cwd is not None else None

    def _git_config(self, *args: str) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                ['git', 'config', '--local', *args],
                cwd=self.cwd,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace'
            )
        except FileNotFoundError:
            raise WorkflowError("Git is not installed or not in PATH")

    def _get(self, key: str) -> str | None:
        result = self._git_config('--get', key)
        # Exit status 1 means the key is not set
        if result.returncode == 1:
            return None
        if result.returncode != 0:
            raise WorkflowError(f"Could not read {key}: {result.stderr.strip()}")
        return result.stdout.rstrip('\n')

    def _set(self, key: str, value: str) -> None:
        result = self._git_config(key, value)
        if result.returncode != 0:
            raise WorkflowError(f"Could not write {key}: {result.stderr.strip()}")

    @staticmethod
    def _key(workflow: str, option: str) -> str:
        return f"{WORKFLOW_SECTION}.{workflow}.{option}"

    def current(self) -> str | None:
        return self._get(f"{SETUP_SECTION}.{CURRENT_OPTION}") or None

    def set_current(self, name: str) -> None:
        logger.debug("Setting current workflow to %s", name)
        self._set(f"{SETUP_SECTION}.{CURRENT_OPTION}", name)

    def clear_current(self) -> None:
        result = self._git_config('--unset', f"{SETUP_SECTION}.{CURRENT_OPTION}")
        # 5: key was not set
        if result.returncode not in (0, 5):
            raise WorkflowError(f"Could not clear current workflow: {result.stderr.strip()}")

    def get(self, workflow: str, option: str) -> str:
        value = self._get(self._key(workflow, option))
        if value is None:
            raise WorkflowError(f"Option '{option}' not found in workflow '{workflow}'")
        return value

    def set(self, workflow: str, option: str, value: str) -> None:
        self._set(self._key(workflow, option), value)

    def workflows(self) -> list[str]:
        """Names of every [workflow "<name>"] subsection, in config order."""
        result = self._git_config('--name-only', '--get-regexp', rf'^{WORKFLOW_SECTION}\.')
        if result.returncode == 1:
            return []
        if result.returncode != 0:
            raise WorkflowError(f"Could not list workflows: {result.stderr.strip()}")

        names = []
        for key in result.stdout.splitlines():
            _, _, rest = key.partition('.')
            name, sep, _ = rest.rpartition('.')
            if sep and name not in names:
                names.append(name)
        return names

    def exists(self, name: str) -> bool:
        return name in self.workflows()

    def load(self, name: str) -> Workflow:
        if not self.exists(name):
            raise WorkflowError(f"Workflow '{name}' not found")

        def option(opt: str) -> str:
            return self._get(self._key(name, opt)) or ""

        mr_ref = option(MR_REF_OPTION)
        return Workflow(
            name=name,
            branch_type=option(TYPE_BRANCH_OPTION),
            commit_type=option(TYPE_COMMIT_OPTION),
            issue=int(mr_ref) if mr_ref.isdigit() else 0,
            ticket=option(TICKET_OPTION),
            title=option(TITLE_OPTION),
            commit=option(COMMIT_OPTION),
            ref_branch=option(REF_BRANCH_OPTION),
            branch=option(BRANCH_OPTION),
        )

    def save(self, workflow: Workflow) -> None:
        values = {
            TYPE_BRANCH_OPTION: workflow.branch_type,
            TYPE_COMMIT_OPTION: workflow.commit_type,
            TITLE_OPTION: workflow.title,
            BRANCH_OPTION: workflow.branch or workflow.name,
            COMMIT_OPTION: workflow.commit,
            REF_BRANCH_OPTION: workflow.ref_branch,
        }
        if workflow.issue:
            values[MR_REF_OPTION] = str(workflow.issue)
        if workflow.ticket:
            values[TICKET_OPTION] = workflow.ticket
        for option, value in values.items():
            self.set(workflow.name, option, value)

    def remove(self, name: str) -> None:
        result = self._git_config('--remove-section', f"{WORKFLOW_SECTION}.{name}")
        if result.returncode != 0:
            raise WorkflowError(f"Could not remove workflow '{name}': {result.stderr.strip()}")
        if self.current() == name:
            self.clear_current()
