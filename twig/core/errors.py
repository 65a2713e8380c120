"""Twig error types.

Every error raised by the core derives from TwigError so that command
boundaries can catch a single type and report it to the user.
"""

from typing import Iterable, Optional


class TwigError(Exception):
    """Base class for all recoverable Twig errors."""


class RepositoryNotInitialized(TwigError):
    """Raised when an operation needs a repository that does not exist."""

    def __init__(self, path) -> None:
        self.path = path
        super().__init__(f"Not a twig repository: {path} (run 'twig init' first)")


class NotFound(TwigError):
    """Raised when an object, branch or commit has no backing data."""


class ObjectNotFound(NotFound):
    """Raised when a digest has no stored object."""

    def __init__(self, digest: str) -> None:
        self.digest = digest
        super().__init__(f"Object {digest} not found")


class BranchNotFound(NotFound):
    """Raised when a branch does not exist or has no commits."""

    def __init__(self, name: str, reason: str = "does not exist") -> None:
        self.name = name
        super().__init__(f"Branch '{name}' {reason}")


class MalformedObject(TwigError):
    """Raised when stored bytes do not parse into the expected record."""

    def __init__(self, digest: Optional[str], reason: str) -> None:
        self.digest = digest
        self.reason = reason
        label = digest[:7] if digest else '<unsaved>'
        super().__init__(f"Malformed object {label}: {reason}")


class AlreadyExists(TwigError):
    """Raised when creating something whose name is already taken."""


class InvalidBranchName(TwigError):
    """Raised for branch names that cannot be stored as a ref file."""


class NothingToCommit(TwigError):
    """Raised when committing with an empty staging area."""


class SelfMergeError(TwigError):
    """Raised when merging a branch into itself."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Cannot merge branch '{name}' into itself")


class UnrelatedHistoriesError(TwigError):
    """Raised when two commits share no common ancestor."""

    def __init__(self, ours: str, theirs: str) -> None:
        self.ours = ours
        self.theirs = theirs
        super().__init__(
            f"Refusing to merge unrelated histories ({ours[:7]} and {theirs[:7]})"
        )


class ConflictDetected(TwigError):
    """
    Reports paths that both sides of a merge changed.

    This is not fatal: the merge commit has already been written with the
    current side's version of every conflicting path.

    Attributes:
        paths: Conflicting paths, sorted
        commit: Digest of the merge commit that was still created
    """

    def __init__(self, paths: Iterable[str], commit: Optional[str] = None) -> None:
        self.paths = sorted(paths)
        self.commit = commit
        super().__init__(
            f"Merge conflict in {len(self.paths)} path(s): {', '.join(self.paths)}"
        )
