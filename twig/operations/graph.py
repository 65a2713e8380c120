"""Commit graph traversal for Twig.

All walks use an explicit worklist and a visited set, so long histories never
hit the recursion limit and a corrupted history containing a cycle still
terminates.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from twig.core.errors import ObjectNotFound
from twig.core.objects import Commit


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """One commit as shown by the log."""
    digest: str
    tree: str
    parents: Tuple[str, ...]
    author: str
    timestamp: int
    message: str
    branch: Optional[str]

    @property
    def summary(self) -> str:
        return self.message.split('\n')[0]


class CommitGraph:
    """
    Answers ancestry questions over the commit DAG.

    Commits are read lazily from the object store; nothing is cached across
    calls, so the graph always reflects what is on disk.
    """

    def __init__(self, repo):
        self.repo = repo

    def read_commit(self, digest: str) -> Commit:
        """
        Raises:
            ObjectNotFound: If no object is stored under digest
            MalformedObject: If the object is not a well-formed commit
        """
        return self.repo.read_commit(digest)

    def parents_of(self, digest: str) -> List[str]:
        """
        Parents of a commit, first parent first (zero, one or two).

        Raises:
            ObjectNotFound: If the commit does not exist
            MalformedObject: If the stored record cannot be parsed
        """
        return list(self.read_commit(digest).parents)

    def _walk(self, start: str) -> Iterator[str]:
        """
        Breadth-first walk over every parent edge, start commit first.

        The start commit must exist. A missing ancestor is logged and treated
        as a root so one dangling reference does not hide the rest of the
        history.
        """
        queue = deque([start])
        visited: Set[str] = set()

        while queue:
            current = queue.popleft()
            if current in visited:
                continue
            visited.add(current)

            try:
                parents = self.parents_of(current)
            except ObjectNotFound:
                if current == start:
                    raise
                logger.warning("Commit %s is referenced but missing; treating it as a root", current)
                yield current
                continue

            yield current

            for parent in parents:
                if parent not in visited:
                    queue.append(parent)

    def ancestors(self, digest: str) -> Set[str]:
        """
        All commits reachable from digest, including digest itself.

        Raises:
            ObjectNotFound: If digest itself does not exist
        """
        return set(self._walk(digest))

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """True if ancestor is reachable from descendant (or equal to it)."""
        return ancestor in self.ancestors(descendant)

    def merge_base(self, commit_a: str, commit_b: str) -> Optional[str]:
        """
        Find a common ancestor of two commits.

        Collects every ancestor of commit_a, then walks commit_b's history
        breadth-first (commit_b first) and returns the first commit already
        in that set.

        This is a best-effort lowest common ancestor. When the two commits
        have several merge bases (criss-cross merges) the answer depends on
        the walk order from commit_b, so ``merge_base(a, b)`` and
        ``merge_base(b, a)`` may differ.

        Args:
            commit_a: First commit digest
            commit_b: Second commit digest

        Returns:
            Digest of a common ancestor, or None if the histories are unrelated
        """
        if commit_a == commit_b:
            return commit_a

        ancestors_a = self.ancestors(commit_a)

        for current in self._walk(commit_b):
            if current in ancestors_a:
                logger.debug("Merge base of %s and %s is %s", commit_a[:7], commit_b[:7], current[:7])
                return current

        return None

    def tree_of(self, commit_digest: str) -> Dict[str, str]:
        """Flat path -> digest mapping of a commit's snapshot."""
        commit = self.read_commit(commit_digest)
        return self.repo.read_tree(commit.tree).as_mapping()

    def default_priority(self) -> List[str]:
        """
        Branch order used to attribute commits to branches.

        Configured ``log.branchpriority`` first, then the default branch,
        then every other branch alphabetically.
        """
        branches = self.repo.refs.list_branches()
        order: List[str] = []

        for name in self.repo.config.get_list('log', 'branchpriority') + [self.repo.default_branch]:
            if name in branches and name not in order:
                order.append(name)

        order.extend(name for name in branches if name not in order)
        return order

    def branch_labels(self, priority: Optional[Iterable[str]] = None) -> Dict[str, str]:
        """
        Map every reachable commit to the branch it is attributed to.

        Branches are walked in priority order; a commit keeps the first branch
        whose walk reaches it, and a walk stops at commits already claimed.
        This is a presentation heuristic only.

        Args:
            priority: Branch names in claim order (defaults to default_priority())

        Returns:
            Dict mapping commit digest -> branch name
        """
        order = list(priority) if priority is not None else self.default_priority()
        labels: Dict[str, str] = {}

        for branch in order:
            tip = self.repo.refs.read_branch(branch)
            if not tip or tip in labels:
                continue

            stack = [tip]
            while stack:
                current = stack.pop()
                if current in labels:
                    continue
                labels[current] = branch

                try:
                    parents = self.parents_of(current)
                except ObjectNotFound:
                    logger.warning("Branch %s reaches missing commit %s", branch, current)
                    continue

                # Reverse so the first parent is explored first
                for parent in reversed(parents):
                    if parent not in labels:
                        stack.append(parent)

        return labels

    def history(self, start: str, labels: Optional[Dict[str, str]] = None) -> Iterator[HistoryEntry]:
        """
        Lazily walk the first-parent chain from start.

        Args:
            start: Commit digest to start from
            labels: Commit -> branch mapping (defaults to branch_labels())

        Yields:
            HistoryEntry for each commit, newest first

        Raises:
            ObjectNotFound: If start does not exist
        """
        if labels is None:
            labels = self.branch_labels()

        current: Optional[str] = start
        visited: Set[str] = set()

        while current and current not in visited:
            visited.add(current)

            try:
                commit = self.read_commit(current)
            except ObjectNotFound:
                if current == start:
                    raise
                logger.warning("History stops at missing commit %s", current)
                return

            yield HistoryEntry(
                digest=current,
                tree=commit.tree,
                parents=tuple(commit.parents),
                author=commit.author,
                timestamp=commit.timestamp,
                message=commit.message,
                branch=labels.get(current),
            )

            current = commit.parents[0] if commit.parents else None
