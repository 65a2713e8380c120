"""CLI output utilities and formatting."""

import click
from colorama import Fore, Style

from twig.core.errors import TwigError

BANNER = f"""
{Fore.GREEN}{Style.BRIGHT}  twig{Style.RESET_ALL} {Fore.WHITE}- a minimal content-addressable version control engine{Style.RESET_ALL}
"""


def success(message: str) -> str:
    """Format success message in green."""
    return f"{Fore.GREEN}✓ {message}{Style.RESET_ALL}"


def info(message: str) -> str:
    """Format info message in cyan."""
    return f"{Fore.CYAN}→ {message}{Style.RESET_ALL}"


def warning(message: str) -> str:
    """Format warning message in yellow."""
    return f"{Fore.YELLOW}⚠ {message}{Style.RESET_ALL}"


def error(message: str) -> str:
    """Format error message in red."""
    return f"{Fore.RED}✗ {message}{Style.RESET_ALL}"


def short(digest) -> str:
    """Abbreviated digest for display."""
    return digest[:7] if digest else '(none)'


def abort_with(exc: TwigError):
    """Print a Twig error and stop the command with exit status 1."""
    click.echo(error(str(exc)))
    raise click.Abort()
