"""CLI Argument Parsing"""

import argparse
import argcomplete

from work_facilitator import __version__
from work_facilitator.config import VALID_PROVIDERS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='wf',
        description='Git workflow assistant with AI-drafted commit messages',
        epilog='Example: wf ai-commit -a'
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    # ai-commit
    ai_commit = subparsers.add_parser('ai-commit', help='Commit with an AI-generated message')
    ai_commit.add_argument('-a', '--all-files', action='store_true', help='Stage all files before committing')
    ai_commit.add_argument('-n', '--no-push', action='store_true', help='Do not push after committing')
    ai_commit.add_argument('-f', '--force', action='store_true', help='Commit even outside of a workflow')
    ai_commit.add_argument('-s', '--skip-hooks', action='store_true', help='Skip pre-commit hooks')
    ai_commit.add_argument('--hint', type=str, metavar='TEXT', help='Add context: --hint "fixing the login bug"')
    ai_commit.add_argument('-p', '--provider', type=str, choices=sorted(VALID_PROVIDERS), help='AI provider')
    ai_commit.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name')
    ai_commit.add_argument('--verbose', action='store_true', help='Show debug logs (payload size, tokens used)')

    # commit
    commit = subparsers.add_parser('commit', help='Commit with the workflow prefix')
    commit.add_argument('message', type=str, help='Commit message')
    commit.add_argument('-a', '--all-files', action='store_true', help='Stage all files before committing')
    commit.add_argument('-n', '--no-push', action='store_true', help='Do not push after committing')
    commit.add_argument('-f', '--force', action='store_true', help='Commit even outside of a workflow')
    commit.add_argument('--verbose', action='store_true', help='Show debug logs')

    # workflow bookkeeping (.git/config only, no checkout)
    init = subparsers.add_parser('init', help='Record a workflow for a branch and make it current')
    init.add_argument('name', type=str, help='Workflow (branch) name, e.g. feat/PROJ-12-add-login')
    init.add_argument('-c', '--commit', type=str, metavar='PREFIX', help='Commit prefix, e.g. "feat(PROJ-12): "')
    init.add_argument('-t', '--branch-type', type=str, metavar='TYPE', help='Branch type, e.g. feat')
    init.add_argument('--commit-type', type=str, metavar='TYPE', help='Commit type (defaults to the branch type)')
    init.add_argument('--ticket', type=str, help='Ticket key, e.g. PROJ-12')
    init.add_argument('--issue', type=int, help='Merge request / issue number')
    init.add_argument('--title', type=str, help='Short title of the work')
    init.add_argument('-r', '--ref-branch', type=str, default='main', metavar='BRANCH',
                      help='Branch the work starts from (default: main)')

    use = subparsers.add_parser('use', help='Switch the current workflow')
    use.add_argument('name', type=str, help='Workflow name (see wf list)')

    subparsers.add_parser('pause', help='Leave the current workflow without removing it')
    subparsers.add_parser('status', help='Show the current workflow and working tree status')

    end = subparsers.add_parser('end', help='Forget a workflow (the current one by default)')
    end.add_argument('name', type=str, nargs='?', help='Workflow name')

    subparsers.add_parser('list', help='List current and available workflows')
    subparsers.add_parser('config', help='Show current configuration')
    subparsers.add_parser('completion', help='Show how to enable shell tab completion')

    argcomplete.autocomplete(parser)
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
