"""Merge operations for Twig."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from twig.core.errors import (BranchNotFound, ConflictDetected, SelfMergeError,
                              UnrelatedHistoriesError)
from twig.core.objects import Commit, Tree


logger = logging.getLogger(__name__)

UP_TO_DATE = 'up_to_date'
FAST_FORWARD = 'fast_forward'
THREE_WAY = 'three_way'


@dataclass(frozen=True)
class MergeConflict:
    """A path both sides changed away from the merge base."""
    path: str
    base: Optional[str]
    current: Optional[str]
    source: Optional[str]

    def __repr__(self) -> str:
        return f"MergeConflict({self.path})"


@dataclass
class MergeResult:
    """
    Outcome of a merge.

    Attributes:
        strategy: 'up_to_date', 'fast_forward' or 'three_way'
        commit: Commit the current branch now points at
        tree: Merged tree digest (three-way merges only)
        base: Merge base used (three-way merges only)
        conflicts: Paths where the current side's version was kept
        message: Human-readable summary
    """
    strategy: str
    commit: Optional[str]
    tree: Optional[str] = None
    base: Optional[str] = None
    conflicts: List[MergeConflict] = field(default_factory=list)
    message: str = ""

    @property
    def is_fast_forward(self) -> bool:
        return self.strategy == FAST_FORWARD

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def conflict_paths(self) -> List[str]:
        return [conflict.path for conflict in self.conflicts]

    def check(self) -> None:
        """
        Raises:
            ConflictDetected: If the merge recorded any conflicts
        """
        if self.conflicts:
            raise ConflictDetected(self.conflict_paths, self.commit)

    def __repr__(self) -> str:
        return f"MergeResult({self.strategy}, conflicts={len(self.conflicts)})"


def merge_trees(
    base: Dict[str, str],
    current: Dict[str, str],
    source: Dict[str, str]
) -> Tuple[Dict[str, str], List[MergeConflict]]:
    """
    Three-way merge of flat path -> digest mappings.

    Starts from the current tree and applies, for every path in source:
    - absent in base: take source's version
    - unchanged on the current side: take source's version
    - unchanged on the source side: keep current's version
    - changed on both sides to different digests: conflict, keep current's

    Paths that exist only in current are carried over. Paths removed on the
    source side are not removed from the result.

    Args:
        base: Merge base snapshot
        current: Snapshot of the branch being merged into
        source: Snapshot of the branch being merged

    Returns:
        Tuple of (merged mapping, conflicts sorted by path)
    """
    merged = dict(current)
    conflicts = []

    for path in sorted(source):
        source_hash = source[path]
        base_hash = base.get(path)
        current_hash = current.get(path)

        # Added on the source side
        if base_hash is None:
            merged[path] = source_hash
            continue

        # Only source changed it
        if base_hash == current_hash:
            merged[path] = source_hash
            continue

        # Only current changed it, or neither did
        if base_hash == source_hash:
            continue

        # Both sides arrived at the same content
        if current_hash == source_hash:
            continue

        conflicts.append(MergeConflict(
            path=path,
            base=base_hash,
            current=current_hash,
            source=source_hash
        ))

    return merged, conflicts


class MergeEngine:
    """
    Handles merge operations for Twig.

    Supports:
    - Fast-forward merges
    - Three-way merges of flat trees
    - Conflict reporting (current side kept, merge commit still written)
    """

    def __init__(self, repo):
        """
        Initialize merge engine.

        Args:
            repo: Repository instance
        """
        self.repo = repo

    @property
    def graph(self):
        return self.repo.graph

    def find_merge_base(self, commit1_hash: str, commit2_hash: str) -> Optional[str]:
        """See CommitGraph.merge_base."""
        return self.graph.merge_base(commit1_hash, commit2_hash)

    def fast_forward(self, target_hash: str) -> MergeResult:
        """
        Move the current branch to target without creating a commit.

        Args:
            target_hash: Source tip

        Returns:
            MergeResult with strategy 'fast_forward'
        """
        commit = self.repo.read_commit(target_hash)

        with self.repo.lock():
            self.repo.refs.advance_head(target_hash)
            self.repo.write_last_commit_state(self.repo.read_tree(commit.tree))

        logger.info("Fast-forward to %s", target_hash)
        return MergeResult(
            strategy=FAST_FORWARD,
            commit=target_hash,
            message=f"Fast-forward to {target_hash[:7]}"
        )

    def three_way_merge(
        self,
        base_hash: str,
        ours_hash: str,
        theirs_hash: str,
        author: Optional[str] = None,
        message: Optional[str] = None
    ) -> MergeResult:
        """
        Merge theirs into ours and record a two-parent commit.

        The merged tree is stored first, then the commit, then the current
        branch is advanced. Conflicts do not stop the commit.

        Args:
            base_hash: Common ancestor commit hash
            ours_hash: Current tip
            theirs_hash: Source tip
            author: Commit author (defaults to the configured author)
            message: Commit message

        Returns:
            MergeResult with strategy 'three_way'
        """
        base_files = self.graph.tree_of(base_hash)
        ours_files = self.graph.tree_of(ours_hash)
        theirs_files = self.graph.tree_of(theirs_hash)

        merged_files, conflicts = merge_trees(base_files, ours_files, theirs_files)

        merged_tree = Tree.from_mapping(merged_files)

        with self.repo.lock():
            tree_hash = self.repo.write_object(merged_tree)

            commit = Commit.create(
                tree_hash=tree_hash,
                parent_hashes=[ours_hash, theirs_hash],
                author=author or self.repo.config.get_author(),
                message=message or f"Merge {theirs_hash[:7]} into {ours_hash[:7]}"
            )
            commit_hash = self.repo.write_object(commit)

            self.repo.refs.advance_head(commit_hash)
            self.repo.write_last_commit_state(merged_tree)

        for conflict in conflicts:
            logger.warning("Conflict in %s: kept current version", conflict.path)
        logger.info("Merge commit %s (base %s)", commit_hash, base_hash)

        summary = f"Merged {theirs_hash[:7]} into {ours_hash[:7]}"
        if conflicts:
            summary += f" with {len(conflicts)} conflict(s)"

        return MergeResult(
            strategy=THREE_WAY,
            commit=commit_hash,
            tree=tree_hash,
            base=base_hash,
            conflicts=conflicts,
            message=summary
        )

    def merge(self, source_branch: str, author: Optional[str] = None,
              message: Optional[str] = None) -> MergeResult:
        """
        Merge source_branch into the branch HEAD designates.

        Args:
            source_branch: Name of the branch to merge
            author: Author for a merge commit
            message: Message for a merge commit

        Returns:
            MergeResult describing what happened

        Raises:
            SelfMergeError: If source_branch is the current branch
            BranchNotFound: If source_branch does not exist or has no commits
            UnrelatedHistoriesError: If the two tips share no ancestor
        """
        refs = self.repo.refs

        with self.repo.lock():
            current_branch = refs.current_branch()
            if current_branch == source_branch:
                raise SelfMergeError(source_branch)

            if not refs.branch_exists(source_branch):
                raise BranchNotFound(source_branch)

            source_hash = refs.read_branch(source_branch)
            if source_hash is None:
                raise BranchNotFound(source_branch, "has no commits")

            current_hash = refs.resolve_current_commit()

            if current_hash is None:
                return self.fast_forward(source_hash)

            if current_hash == source_hash:
                return MergeResult(strategy=UP_TO_DATE, commit=current_hash, message="Already up to date")

            base = self.find_merge_base(current_hash, source_hash)
            if base is None:
                raise UnrelatedHistoriesError(current_hash, source_hash)

            if base == current_hash:
                return self.fast_forward(source_hash)

            if base == source_hash:
                return MergeResult(strategy=UP_TO_DATE, commit=current_hash, message="Already up to date")

            into = current_branch or 'HEAD'
            return self.three_way_merge(
                base,
                current_hash,
                source_hash,
                author=author,
                message=message or f"Merge branch '{source_branch}' into {into}"
            )
