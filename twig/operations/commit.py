"""Commit and branch operations for Twig.

These are the write paths that move HEAD. Each one runs under the repository
lock and stores objects before updating any reference to them.
"""

import logging
from typing import Optional

from twig.core.errors import BranchNotFound, NothingToCommit
from twig.core.index import Index
from twig.core.objects import Commit, Tree
from twig.core.refs import HeadValue


logger = logging.getLogger(__name__)


def create_commit(repo, message: str, author: Optional[str] = None) -> str:
    """
    Record the staged changes as a new commit.

    The new snapshot is the parent commit's tree with every staged entry
    laid over it, so each commit holds the full set of tracked paths. After
    the branch moves, the last commit state is rewritten and the index is
    emptied.

    Args:
        repo: Repository instance
        message: Commit message (may span several lines)
        author: Author string (defaults to the configured author)

    Returns:
        str: Digest of the new commit

    Raises:
        NothingToCommit: If the index is empty
    """
    repo.require_initialized()

    with repo.lock():
        index = Index.load(repo)
        if len(index) == 0:
            raise NothingToCommit("No changes staged for commit")

        parent = repo.refs.resolve_current_commit()
        if parent:
            files = repo.graph.tree_of(parent)
        else:
            files = {}

        for sha1, path in index.as_pairs():
            files[path] = sha1

        tree = Tree.from_mapping(files)
        tree_hash = repo.write_object(tree)

        commit = Commit.create(
            tree_hash=tree_hash,
            parent_hashes=[parent] if parent else [],
            author=author or repo.config.get_author(),
            message=message
        )
        commit_hash = repo.write_object(commit)

        repo.refs.advance_head(commit_hash)

        repo.write_last_commit_state(tree)
        index.clear()
        index.write(str(repo.index_file))

    logger.info("Committed %s (%d staged path(s))", commit_hash, len(files))
    return commit_hash


def create_branch(repo, name: str, start: Optional[str] = None) -> Optional[str]:
    """
    Create a branch at start, or at the current commit.

    Before the first commit the new branch is created empty, like the
    default branch.

    Returns:
        The digest the branch points at, or None if there are no commits

    Raises:
        AlreadyExists: If the branch exists
        InvalidBranchName: If the name is unusable
        ObjectNotFound: If start does not exist
    """
    with repo.lock():
        target = start or repo.refs.resolve_current_commit()
        if target is not None:
            # Reject dangling or non-commit start points
            repo.read_commit(target)
        repo.refs.create_branch(name, target)

    return target


def switch_branch(repo, name: str) -> Optional[str]:
    """
    Point HEAD at branch name.

    Staged entries stay in the index; working-tree files are not touched.

    Returns:
        The branch tip, or None if the branch has no commits

    Raises:
        BranchNotFound: If the branch does not exist
    """
    refs = repo.refs

    with repo.lock():
        if not refs.branch_exists(name):
            raise BranchNotFound(name)

        refs.set_head(HeadValue.symbolic(name))

        tip = refs.read_branch(name)
        if tip:
            repo.write_last_commit_state(repo.read_tree(repo.read_commit(tip).tree))
        else:
            repo.write_last_commit_state(None)

    logger.info("Switched to %s", name)
    return tip
