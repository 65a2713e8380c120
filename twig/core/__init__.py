"""Core functionality for Twig.

This module contains the core data structures:
- Twig objects (Blob, Tree, Commit)
- Repository handle and object store
- Index/staging area
- Reference management
- Configuration management
- Errors and hashing utilities

For graph traversal and merging, see twig.operations
"""

from twig.core.objects import TwigObject, Blob, Tree, TreeEntry, Commit
from twig.core.repository import Repository
from twig.core.hash import hash_object
from twig.core.index import Index, IndexEntry
from twig.core.refs import RefManager, HeadValue
from twig.core.config import Config
from twig.core.lock import RepositoryLock

__all__ = [
    'TwigObject',
    'Blob',
    'Tree',
    'TreeEntry',
    'Commit',
    'Repository',
    'Index',
    'IndexEntry',
    'RefManager',
    'HeadValue',
    'Config',
    'RepositoryLock',
    'hash_object',
]
