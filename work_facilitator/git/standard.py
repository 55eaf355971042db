"""Commit/branch naming standard checks."""

import re


def check_standard(message: str, commit_expr: str, branch: str, branch_expr: str,
                   enforced: bool) -> list[str]:
    """Return human-readable violations; empty when compliant or not enforced."""
    if not enforced:
        return []

    violations = []
    if commit_expr and not _matches(commit_expr, message):
        violations.append(
            "The commit message does not comply with the standard\n"
            f"  regex : {commit_expr}\n"
            f"  commit: {message}"
        )
    if branch_expr and not _matches(branch_expr, branch):
        violations.append(
            "The branch name does not comply with the standard\n"
            f"  regex : {branch_expr}\n"
            f"  branch: {branch}"
        )
    return violations


def _matches(expr: str, value: str) -> bool:
    try:
        return re.search(expr, value) is not None
    except re.error as e:
        raise ValueError(f"Invalid standard expression '{expr}': {e}") from e


def prefix_message(prefix: str, message: str) -> str:
    """Prepend the workflow commit prefix unless the message already carries it."""
    if not prefix or message.startswith(prefix):
        return message
    return f"{prefix}{message}"
