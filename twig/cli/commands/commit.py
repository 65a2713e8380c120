"""Commit command - create a commit from staged changes."""

import click
from twig.core.errors import TwigError
from twig.core.repository import Repository
from twig.operations.commit import create_commit
from twig.cli.output import success, info, abort_with, short


@click.command('commit')
@click.option('-m', '--message', 'messages', multiple=True, required=True,
              help='Commit message (repeat for multiple paragraphs)')
@click.option('--author', help='Author, e.g. "Name <email>" (defaults to user.name/user.email)')
def commit_cmd(messages, author):
    """
    Record staged changes to the repository.

    Examples:
        twig commit -m "Initial commit"
        twig commit -m "Subject" -m "Body paragraph"
        twig commit -m "Fix" --author "Jane <jane@example.com>"
    """
    message = '\n\n'.join(messages)

    try:
        repo = Repository.open()
        commit_hash = create_commit(repo, message, author=author)
        commit = repo.read_commit(commit_hash)
        branch = repo.refs.current_branch()
    except TwigError as e:
        abort_with(e)

    click.echo(success(f"Committed to branch '{branch or 'HEAD'}' with hash: {commit_hash}"))
    click.echo(info(f"Author: {commit.author}"))
    if commit.parents:
        click.echo(info(f"Parent: {short(commit.parents[0])}"))
    else:
        click.echo(info("(root commit)"))
