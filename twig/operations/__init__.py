"""Operations module for high-level Twig operations.

This module contains the business logic for:
- Commit graph traversal (ancestry, merge base, history)
- Merge algorithms
- Commit and branch operations
"""

from twig.operations.graph import CommitGraph, HistoryEntry
from twig.operations.merge import MergeEngine, MergeResult, MergeConflict, merge_trees
from twig.operations.commit import create_commit, create_branch, switch_branch

__all__ = [
    'CommitGraph', 'HistoryEntry',
    'MergeEngine', 'MergeResult', 'MergeConflict', 'merge_trees',
    'create_commit', 'create_branch', 'switch_branch',
]
