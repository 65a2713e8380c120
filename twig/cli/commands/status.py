"""Status command - show branch and staged files."""

import click
from twig.core.errors import TwigError
from twig.core.index import Index
from twig.core.repository import Repository
from twig.cli.output import info, success, abort_with, short


@click.command('status')
def status_cmd():
    """Show the current branch and the files staged for commit."""
    try:
        repo = Repository.open()
        head = repo.refs.read_head()
        tip = repo.refs.resolve_current_commit()
        index = Index.load(repo)
    except TwigError as e:
        abort_with(e)

    if head.is_symbolic:
        click.echo(info(f"On branch {head.branch}"))
    else:
        click.echo(info(f"HEAD detached at {short(head.digest)}"))

    if not tip:
        click.echo(info("No commits yet"))

    if len(index) == 0:
        click.echo(info("No files staged for commit."))
        return

    click.echo(success("Files staged for commit:"))
    for entry in index:
        click.echo(f"  {entry.path}")
