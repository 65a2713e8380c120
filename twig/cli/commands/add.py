"""Add command - stage files for commit."""

import click
from pathlib import Path
from twig.core.errors import TwigError
from twig.core.index import Index
from twig.core.repository import Repository
from twig.cli.output import success, error, info, warning, abort_with


def iter_work_tree_files(repo):
    """Yield every regular file under the work tree, skipping hidden paths."""
    for file_path in sorted(repo.work_tree.rglob('*')):
        rel_path = file_path.relative_to(repo.work_tree)
        if any(part.startswith('.') for part in rel_path.parts):
            continue
        if file_path.is_file():
            yield file_path


@click.command('add')
@click.argument('paths', nargs=-1)
@click.option('-A', '--all', 'add_all', is_flag=True, help='Stage every changed file in the work tree')
def add_cmd(paths, add_all):
    """
    Add file contents to the staging area.

    Files whose content matches what is already staged or committed are
    reported as unchanged and not staged again.

    Examples:
        twig add file.txt
        twig add a.txt b.txt
        twig add --all
    """
    if not paths and not add_all:
        click.echo(error("Nothing specified, nothing added"))
        click.echo(info("Usage: twig add <file>... or twig add --all"))
        raise click.Abort()

    try:
        repo = Repository.open()
        index = Index.load(repo)

        if add_all:
            targets = list(iter_work_tree_files(repo))
        else:
            targets = [Path(p) for p in paths]

        added_files = []
        unchanged_files = []
        failed_files = []

        for target in targets:
            try:
                if index.stage(repo, target):
                    added_files.append(index.relative_path(repo, target))
                else:
                    unchanged_files.append(index.relative_path(repo, target))
            except (OSError, ValueError) as e:
                failed_files.append((str(target), str(e)))
    except TwigError as e:
        abort_with(e)

    if added_files:
        click.echo(success(f"Added {len(added_files)} file(s) to staging area"))
        for file in added_files:
            click.echo(info(f"  {file}"))

    # --all skips unchanged files silently
    if not add_all:
        for file in unchanged_files:
            click.echo(warning(f"No changes detected for: {file}"))

    if failed_files:
        click.echo(error(f"Failed to add {len(failed_files)} file(s):"))
        for file, reason in failed_files:
            click.echo(error(f"  {file}: {reason}"))
        raise click.Abort()

    if add_all and not added_files:
        click.echo(info("No changes detected"))
