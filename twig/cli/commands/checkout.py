"""Checkout/switch commands - move HEAD to another branch."""

import click
from twig.core.errors import TwigError
from twig.core.repository import Repository
from twig.operations.commit import create_branch, switch_branch
from twig.cli.output import success, info, abort_with


def _switch(branch_name, create):
    try:
        repo = Repository.open()
        if create:
            create_branch(repo, branch_name)
            click.echo(success(f"Created new branch '{branch_name}'"))

        if repo.refs.current_branch() == branch_name:
            click.echo(info(f"Already on '{branch_name}'"))
            return

        switch_branch(repo, branch_name)
    except TwigError as e:
        abort_with(e)

    click.echo(success(f"Switched to branch '{branch_name}'"))


@click.command('checkout')
@click.option('-b', 'create', is_flag=True, help='Create the branch before switching')
@click.argument('branch_name')
def checkout_cmd(create, branch_name):
    """
    Switch HEAD to a branch.

    Only HEAD moves; files in the work tree are left as they are.

    Examples:
        twig checkout feature
        twig checkout -b hotfix
    """
    _switch(branch_name, create)


@click.command('switch')
@click.option('-c', '--create', is_flag=True, help='Create the branch before switching')
@click.argument('branch_name')
def switch_cmd(create, branch_name):
    """Switch HEAD to a branch (same as checkout)."""
    _switch(branch_name, create)
