"""Merge command for Twig."""

import click
from twig.core.errors import ConflictDetected, TwigError
from twig.core.repository import Repository
from twig.operations.merge import UP_TO_DATE
from twig.cli.output import success, warning, info, abort_with, short


@click.command('merge')
@click.argument('branch')
@click.option('-m', '--message', default=None, help='Message for the merge commit')
def merge_cmd(branch, message):
    """
    Merge a branch into the current branch.

    Fast-forwards when the current branch has not diverged. Otherwise a
    merge commit with two parents is created. Paths changed on both sides
    keep the current branch's version and are listed as conflicts.

    Examples:
        twig merge feature
        twig merge feature -m "Bring in feature"
    """
    try:
        repo = Repository.open()
        current = repo.refs.current_branch() or 'HEAD'
        click.echo(info(f"Merging branch '{branch}' into '{current}'..."))
        result = repo.merge.merge(branch, message=message)
    except TwigError as e:
        abort_with(e)

    if result.strategy == UP_TO_DATE:
        click.echo(success("Already up to date"))
        return

    if result.is_fast_forward:
        click.echo(success("Fast-forward merge complete."))
        click.echo(info(f"Current branch '{current}' is now at {result.commit}"))
        return

    click.echo(success(f"Created merge commit: {result.commit}"))
    click.echo(info(f"Merge base: {short(result.base)}"))

    try:
        result.check()
    except ConflictDetected as e:
        click.echo(warning(f"CONFLICT: {len(e.paths)} path(s) changed on both branches:"))
        for path in e.paths:
            click.echo(warning(f"  {path}"))
        click.echo(warning(f"The version from '{current}' was kept; review these paths manually."))
