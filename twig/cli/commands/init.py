"""Initialize a new Twig repository."""

import click
from pathlib import Path
from twig.core.errors import TwigError
from twig.core.repository import Repository
from twig.cli.output import success, error, info, abort_with


@click.command('init')
@click.argument('path', default='.')
@click.option('-b', '--initial-branch', 'branch', default=None,
              help='Name of the default branch (default: main)')
def init_cmd(path, branch):
    """
    Initialize a new Twig repository.

    Creates a .twig directory holding the object store, branch references,
    HEAD and the staging index.

    Examples:
        twig init                   # Initialize in current directory
        twig init my-project        # Initialize in my-project directory
        twig init -b trunk          # Use 'trunk' as the default branch
    """
    repo_path = Path(path).resolve()

    try:
        if not repo_path.exists():
            repo_path.mkdir(parents=True)
            click.echo(info(f"Created directory {repo_path}"))

        repo = Repository(str(repo_path))
        repo.init(default_branch=branch)
    except TwigError as e:
        abort_with(e)
    except PermissionError:
        click.echo(error(f"Permission denied: Cannot create repository at {path}"))
        raise click.Abort()

    click.echo(success(f"Initialized empty Twig repository in {repo.twig_dir}"))
    click.echo(info(f"Default branch: {repo.default_branch}"))
