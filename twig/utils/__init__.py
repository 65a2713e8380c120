"""Utilities module for common helper functions."""

from twig.utils.fs import atomic_write, atomic_write_text

__all__ = [
    'atomic_write', 'atomic_write_text',
]
