"""CLI Main Entry Point"""

import os
import sys
from dataclasses import replace

from work_facilitator.ai import Deadline, GenerateOptions, ProviderError, get_provider
from work_facilitator.config import Config, load_config
from work_facilitator.git import DiffProcessor, GitAnalyzer, GitError, WorkflowError, WorkflowStore
from work_facilitator.output import (
    Spinner, bold, configure_logging, dim, info, print_box, print_error, print_warning,
)

from work_facilitator.cli.args import parse_args
from work_facilitator.cli.commands import (
    commit_and_push, display_config, finalize_message, resolve_workflow, run_commit,
    run_completion, run_end, run_init, run_list, run_pause, run_status, run_use,
)
from work_facilitator.cli.utils import (
    ask_hint, ask_review_action, clean_commit_message, edit_message, prompt_manual_message,
)


def _apply_overrides(args, config: Config) -> None:
    """Resolve provider and model from args, env, or config.

    Precedence: CLI args > environment variables > config file
    """
    provider = getattr(args, 'provider', None) or os.environ.get('WF_PROVIDER')
    model = getattr(args, 'model', None) or os.environ.get('WF_MODEL')
    if provider:
        config.provider = provider
    if model:
        config.model = model


def _build_options(config: Config, branch: str, hint: str | None) -> GenerateOptions:
    return GenerateOptions(
        max_tokens=config.max_tokens,
        temperature=config.temperature,
        commit_standard=config.commit_expr if config.enforce_standard and config.commit_expr else None,
        branch_name=branch or None,
        additional_context=hint,
    )


def _generate_message(provider, diff: str, options: GenerateOptions, timeout: float) -> str:
    """One provider round-trip bounded by a fresh deadline."""
    with Spinner(f"Generating commit message with {provider.name}..."):
        message = provider.generate_commit_message(diff, options, Deadline.after(timeout))
    return clean_commit_message(message) or message


def _review_message(provider, diff: str, options: GenerateOptions, timeout: float) -> str | None:
    """Generate, then loop on accept/edit/regenerate/cancel. None means cancelled.

    A failed generation falls back to a manually typed message.
    """
    while True:
        try:
            message = _generate_message(provider, diff, options, timeout)
        except ProviderError as e:
            print_error(f"AI generation failed: {e}")
            print_warning("Falling back to manual message entry")
            return prompt_manual_message()

        print(f"\n{bold('Generated commit message:')}")
        print_box(message)

        action = ask_review_action()
        if action == 'accept':
            return message
        if action == 'cancel':
            return None
        if action == 'edit':
            return edit_message(message) or message

        hint = ask_hint()
        if hint:
            options = replace(options, additional_context=hint)


def run_ai_commit(args, config: Config, analyzer: GitAnalyzer, store: WorkflowStore) -> int:
    if not config.ai_enabled:
        print_error("AI features are not enabled. Set \"ai_enabled\": true in .wfrc")
        return 1

    workflow = resolve_workflow(store, args.force)
    branch = (workflow.branch if workflow else "") or analyzer.current_branch()

    provider = get_provider(config)
    provider.validate()

    if args.all_files:
        analyzer.add_all()

    changes = analyzer.get_staged_changes()
    if changes.is_empty:
        print_error("No staged changes. Run 'git add' first or use -a.")
        return 1

    filtered = DiffProcessor(config.exclude_patterns).filter(changes)
    if filtered.excluded_files:
        print(dim(f"  {len(filtered.excluded_files)} files excluded from analysis"))
    if filtered.is_empty:
        print_error("Every staged file matches exclude_patterns, nothing to analyze.")
        return 1

    if not args.skip_hooks:
        with Spinner("Running pre-commit hooks..."):
            analyzer.run_pre_commit_hooks()

    print(f"Analyzing {bold(str(len(filtered.kept_files)))} files using {info(provider.name)} ({provider.model})")
    options = _build_options(config, branch, args.hint)
    message = _review_message(provider, filtered.diff, options, provider.timeout)
    if not message:
        print(dim("Cancelled."))
        return 0

    final_message = finalize_message(message, workflow, branch, config)
    if final_message is None:
        return 1

    commit_and_push(analyzer, final_message, branch, push=not args.no_push)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)

    if args.command == 'completion':
        return run_completion()

    config = load_config()
    _apply_overrides(args, config)
    configure_logging("debug" if getattr(args, 'verbose', False) else config.log_level)

    if args.command == 'config':
        return display_config(config)

    try:
        store = WorkflowStore()
        if args.command == 'list':
            return run_list(store)
        if args.command == 'init':
            return run_init(args, config, store)
        if args.command == 'use':
            return run_use(args, store)
        if args.command == 'pause':
            return run_pause(store)
        if args.command == 'end':
            return run_end(args, store)

        analyzer = GitAnalyzer()
        if args.command == 'status':
            return run_status(store, analyzer)
        if args.command == 'commit':
            return run_commit(args, config, analyzer, store)
        return run_ai_commit(args, config, analyzer, store)
    except (GitError, WorkflowError, ProviderError, ValueError) as e:
        print_error(str(e))
        return 1
    except KeyboardInterrupt:
        print()
        print(dim("Cancelled."))
        return 0


if __name__ == '__main__':
    sys.exit(main())
