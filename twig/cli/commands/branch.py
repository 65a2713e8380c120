"""Branch command - list or create branches."""

import click
from colorama import Fore, Style
from twig.core.errors import TwigError
from twig.core.repository import Repository
from twig.operations.commit import create_branch
from twig.cli.output import success, warning, abort_with, short


@click.command('branch')
@click.option('-v', '--verbose', is_flag=True, help='Show tip hash and message')
@click.argument('branch_name', required=False)
@click.argument('start_point', required=False)
def branch_cmd(verbose, branch_name, start_point):
    """
    List or create branches.

    With no arguments, lists all branches; the current branch is marked
    with *. With one argument, creates a branch at the current commit.
    With two arguments, creates it at START_POINT (a branch or a digest).

    Examples:
        twig branch                   # List branches
        twig branch feature           # Create 'feature' at HEAD
        twig branch hotfix main       # Create 'hotfix' at main's tip
    """
    try:
        repo = Repository.open()

        if branch_name:
            start = None
            if start_point:
                start = repo.refs.read_branch(start_point) if repo.refs.branch_exists(start_point) else start_point
            target = create_branch(repo, branch_name, start)
            click.echo(success(f"Branch '{branch_name}' created at commit: {short(target)}"))
            return

        current = repo.refs.current_branch()
        branches = repo.refs.list_branches()
        tips = {name: repo.refs.read_branch(name) for name in branches}
        summaries = {}
        if verbose:
            for name, tip in tips.items():
                summaries[name] = repo.read_commit(tip).summary if tip else '(no commits)'
    except TwigError as e:
        abort_with(e)

    if not branches:
        click.echo(warning("No branches found"))
        return

    for name in branches:
        if name == current:
            prefix = f"{Fore.GREEN}* "
        else:
            prefix = "  "

        if verbose:
            click.echo(f"{prefix}{name:<20}{Style.RESET_ALL} {short(tips[name])} {summaries[name][:50]}")
        else:
            click.echo(f"{prefix}{name}{Style.RESET_ALL}")
