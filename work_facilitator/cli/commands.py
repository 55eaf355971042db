"""CLI Commands"""

import os
import sys

from work_facilitator.config import Config, get_config_path
from work_facilitator.git import GitAnalyzer, WorkflowError, WorkflowStore, Workflow, check_standard, prefix_message
from work_facilitator.output import (
    ARROW, bold, dim, info, print_box, print_error, print_success, print_warning,
)


def display_config(config: Config) -> int:
    """Display current configuration."""
    config_path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .wfrc found)")

    env_provider = os.environ.get('WF_PROVIDER')
    env_model = os.environ.get('WF_MODEL')
    if env_provider or env_model:
        print(f"  {dim('Environment overrides:')}")
        if env_provider:
            print(f"    WF_PROVIDER={env_provider}")
        if env_model:
            print(f"    WF_MODEL={env_model}")

    print()
    print(f"  {bold('Settings:')}")
    settings = config.masked()
    width = max(len(k) for k in settings) + 1
    for key, value in settings.items():
        if isinstance(value, bool):
            value = str(value).lower()
        elif isinstance(value, list):
            value = ', '.join(value) or '(none)'
        print(f"    {(key + ':').ljust(width)} {info(str(value))}")

    print(f"\n  {dim('Config locations:')}")
    print(f"    Local:  .wfrc (in current directory)")
    print(f"    Global: ~/.wfrc\n")

    return 0


def run_completion() -> int:
    """Show how to enable shell tab completion."""
    shell = os.environ.get('SHELL', '')

    print(f"\n{bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_file = '~/.zshrc' if 'zsh' in shell else '~/.bashrc'
        print(f"Add this line to {dim(os.path.expanduser(rc_file))}:\n")
        print('  eval "$(register-python-argcomplete wf)"\n')
        print(f"Then run: {dim('source ' + rc_file)}")
    elif sys.platform == 'win32':
        print("For PowerShell, add to your $PROFILE:\n")
        print("  register-python-argcomplete --shell powershell wf | Out-String | Invoke-Expression")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print('  eval "$(register-python-argcomplete wf)"\n')
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish wf | source")

    print(f"\n{dim('After setup, press TAB to autocomplete commands and flags.')}")
    return 0


def run_list(store: WorkflowStore) -> int:
    """List the current workflow and every workflow recorded in .git/config."""
    current = store.current()
    if current:
        print(f"{bold('Current workflow')}")
        print(f"  {ARROW} {info(current)}\n")

    names = store.workflows()
    if not names:
        print(dim("No workflow initiated yet."))
        return 0

    print(bold("Available workflows"))
    for name in names:
        marker = info('*') if name == current else ' '
        print(f"  {marker} {name}")
    return 0


def show_summary(workflow: Workflow) -> None:
    """Print the recorded fields of a workflow."""
    rows = [
        ("branch type", workflow.branch_type),
        ("commit type", workflow.commit_type),
        ("title", workflow.title),
        ("issue" if workflow.issue else "ticket", str(workflow.issue or workflow.ticket)),
        ("branch", workflow.branch),
        ("commit", workflow.commit),
        ("ref branch", workflow.ref_branch),
    ]
    print(f"\n{bold(workflow.name)}")
    for label, value in rows:
        print(f"  {info(label.ljust(12))} {value or dim('-')}")
    print()


def run_init(args, config: Config, store: WorkflowStore) -> int:
    """Record a workflow for branch NAME in .git/config and make it current."""
    name = args.name
    if store.exists(name):
        print_error(f"Workflow '{name}' already exists.\n  Run 'wf use {name}' to switch to it.")
        return 1

    workflow = Workflow(
        name=name,
        branch_type=args.branch_type or "",
        commit_type=args.commit_type or args.branch_type or "",
        issue=args.issue or 0,
        ticket=args.ticket or "",
        title=args.title or "",
        commit=args.commit or "",
        ref_branch=args.ref_branch,
        branch=name,
    )

    # The prefix alone must already satisfy the commit standard
    violations = check_standard(prefix_message(workflow.commit, "test_message"), config.commit_expr,
                                name, config.branch_expr, config.enforce_standard)
    if violations:
        for violation in violations:
            print_error(violation)
        return 1

    store.save(workflow)
    store.set_current(name)
    print_success(f"Workflow {bold(name)} created")
    show_summary(workflow)
    return 0


def run_use(args, store: WorkflowStore) -> int:
    """Make an existing workflow the current one."""
    if not store.exists(args.name):
        raise WorkflowError(
            f"Workflow '{args.name}' not found.\n"
            "  Run 'wf list' to see available workflows."
        )
    store.set_current(args.name)
    print_success(f"Now working on {bold(args.name)}")
    show_summary(store.load(args.name))
    return 0


def run_pause(store: WorkflowStore) -> int:
    """Leave the current workflow without removing it."""
    current = store.current()
    if not current:
        print_warning("No current workflow set up. Use 'wf use NAME' first.")
        return 1
    store.clear_current()
    print_success(f"Paused {bold(current)}")
    return 0


def run_status(store: WorkflowStore, analyzer: GitAnalyzer) -> int:
    """Current workflow summary and working tree status."""
    current = store.current()
    if not current:
        print_warning("No current workflow set up. Use 'wf use NAME' first.")
        return 1
    show_summary(store.load(current))
    print_box(analyzer.status() or "nothing to commit, working tree clean")
    return 0


def run_end(args, store: WorkflowStore) -> int:
    """Forget a workflow (the current one by default). The branch itself is kept."""
    name = args.name or store.current()
    if not name:
        print_warning("No current workflow set up. Name the workflow to end.")
        return 1
    if not store.exists(name):
        raise WorkflowError(f"Workflow '{name}' not found")
    store.remove(name)
    print_success(f"Ended {bold(name)}")
    return 0


def resolve_workflow(store: WorkflowStore, force: bool) -> Workflow | None:
    """Current workflow, or None when forced outside of one."""
    current = store.current()
    if current:
        return store.load(current)
    if not force:
        raise WorkflowError(
            "Not in a current workflow.\n"
            "  Run 'wf use NAME' or pass -f to commit anyway."
        )
    return None


def finalize_message(message: str, workflow: Workflow | None, branch: str, config: Config) -> str | None:
    """Prepend the workflow commit prefix and check the naming standard.

    Returns None (after printing the violations) when the standard is not met.
    """
    full_message = prefix_message(workflow.commit if workflow else "", message)
    violations = check_standard(full_message, config.commit_expr, branch,
                                config.branch_expr, config.enforce_standard)
    if violations:
        for violation in violations:
            print_error(violation)
        return None
    return full_message


def commit_and_push(analyzer: GitAnalyzer, message: str, branch: str, push: bool) -> None:
    analyzer.commit(message)
    print_success(f"Committed: {bold(message.splitlines()[0])}")
    if push:
        analyzer.push(branch)
        print_success(f"Pushed to origin/{branch}")


def run_commit(args, config: Config, analyzer: GitAnalyzer, store: WorkflowStore) -> int:
    """Commit with the workflow prefix, then push unless -n."""
    workflow = resolve_workflow(store, args.force)
    branch = (workflow.branch if workflow else "") or analyzer.current_branch()

    message = finalize_message(args.message, workflow, branch, config)
    if message is None:
        return 1

    if args.all_files:
        analyzer.add_all()

    if analyzer.get_staged_changes().is_empty:
        print_warning("Nothing staged to commit. Use -a to stage all files.")
        return 1

    commit_and_push(analyzer, message, branch, push=not args.no_push)
    return 0
