"""Log command - show commit history."""

from datetime import datetime

import click
from colorama import Fore, Style
from twig.core.errors import TwigError
from twig.core.repository import Repository
from twig.cli.output import info, abort_with


def format_timestamp(timestamp):
    """Format Unix timestamp to readable date."""
    if not timestamp:
        return "Unknown date"
    return datetime.fromtimestamp(int(timestamp)).strftime("%a %b %d %H:%M:%S %Y")


@click.command('log')
@click.option('-n', '--max-count', type=int, default=None, help='Limit the number of commits')
@click.option('--oneline', is_flag=True, help='One line per commit')
@click.option('--priority', default=None,
              help='Comma-separated branch order for attributing commits (overrides log.branchpriority)')
def log_cmd(max_count, oneline, priority):
    """
    Show commit history of the current branch.

    Follows first parents from HEAD. Each commit is labelled with the branch
    it is attributed to; the default branch claims shared commits first.

    Examples:
        twig log
        twig log -n 5 --oneline
        twig log --priority feature,main
    """
    try:
        repo = Repository.open()
        tip = repo.refs.resolve_current_commit()
        if not tip:
            click.echo(info("No commit history found."))
            return

        order = None
        if priority:
            names = [name.strip() for name in priority.split(',') if name.strip()]
            rest = [name for name in repo.graph.default_priority() if name not in names]
            order = names + rest

        labels = repo.graph.branch_labels(order)

        for count, entry in enumerate(repo.graph.history(tip, labels)):
            if max_count is not None and count >= max_count:
                break

            branch = entry.branch or '-'
            if oneline:
                click.echo(f"{Fore.YELLOW}{entry.digest[:7]}{Style.RESET_ALL} "
                           f"{Fore.GREEN}({branch}){Style.RESET_ALL} {entry.summary}")
                continue

            click.echo(f"{Fore.YELLOW}Commit: {entry.digest}{Style.RESET_ALL}")
            if len(entry.parents) > 1:
                click.echo(f"Merge:  {' '.join(p[:7] for p in entry.parents)}")
            click.echo(f"Branch: {branch}")
            click.echo(f"Author: {entry.author}")
            click.echo(f"Date:   {format_timestamp(entry.timestamp)}")
            click.echo()
            for line in entry.message.split('\n'):
                click.echo(f"    {line}")
            click.echo()
    except TwigError as e:
        abort_with(e)
