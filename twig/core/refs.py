"""Reference management for Twig."""

import logging
from dataclasses import dataclass
from typing import List, Optional
from .errors import (AlreadyExists, BranchNotFound, InvalidBranchName,
                     MalformedObject, RepositoryNotInitialized)
from .hash import is_digest
from twig.utils.fs import atomic_write_text


logger = logging.getLogger(__name__)

HEADS_PREFIX = 'refs/heads/'
SYMREF_PREFIX = 'ref: '


@dataclass(frozen=True)
class HeadValue:
    """
    Contents of HEAD.

    Exactly one of three shapes:
    - symbolic: ``branch`` is set (HEAD is ``ref: refs/heads/<branch>``)
    - direct: ``digest`` is set (detached HEAD)
    - empty: neither is set
    """
    branch: Optional[str] = None
    digest: Optional[str] = None

    @classmethod
    def symbolic(cls, branch: str) -> 'HeadValue':
        return cls(branch=branch)

    @classmethod
    def direct(cls, digest: str) -> 'HeadValue':
        return cls(digest=digest)

    @classmethod
    def empty(cls) -> 'HeadValue':
        return cls()

    @property
    def is_symbolic(self) -> bool:
        return self.branch is not None

    @property
    def is_direct(self) -> bool:
        return self.digest is not None

    @property
    def is_empty(self) -> bool:
        return self.branch is None and self.digest is None

    def __str__(self) -> str:
        if self.is_symbolic:
            return f"{SYMREF_PREFIX}{HEADS_PREFIX}{self.branch}"
        return self.digest or ''


class RefManager:
    """
    Manages branch references and HEAD.

    Handles:
    - Symbolic HEAD (pointing at a branch)
    - Direct HEAD (detached, pointing at a commit)
    - Branch references (refs/heads/*), possibly empty before the first commit
    """

    def __init__(self, repo):
        """
        Initialize reference manager.

        Args:
            repo: Repository instance
        """
        self.repo = repo
        self.twig_dir = repo.twig_dir
        self.heads_dir = repo.heads_dir
        self.head_file = repo.head_file

    def _require_repo(self) -> None:
        if not self.twig_dir.is_dir():
            raise RepositoryNotInitialized(self.repo.work_tree)

    @staticmethod
    def validate_branch_name(name: str) -> None:
        """
        Raises:
            InvalidBranchName: If name cannot be used as a branch
        """
        if not name or name != name.strip():
            raise InvalidBranchName(f"Invalid branch name: {name!r}")
        if any(c.isspace() for c in name) or '..' in name or '\\' in name:
            raise InvalidBranchName(f"Invalid branch name: {name!r}")
        if name.startswith(('/', '-', '.')) or name.endswith(('/', '.lock')):
            raise InvalidBranchName(f"Invalid branch name: {name!r}")
        if name == 'HEAD' or '//' in name:
            raise InvalidBranchName(f"Invalid branch name: {name!r}")

    def read_head(self) -> HeadValue:
        """
        Read HEAD.

        Returns:
            HeadValue: symbolic, direct or empty
        """
        self._require_repo()

        if not self.head_file.exists():
            return HeadValue.empty()

        content = self.head_file.read_text().strip()

        if not content:
            return HeadValue.empty()

        if content.startswith(SYMREF_PREFIX):
            target = content[len(SYMREF_PREFIX):].strip()
            if not target.startswith(HEADS_PREFIX):
                raise MalformedObject(None, f"HEAD points outside refs/heads: {target}")
            return HeadValue.symbolic(target[len(HEADS_PREFIX):])

        if not is_digest(content):
            raise MalformedObject(None, f"HEAD is neither a ref nor a digest: {content!r}")

        return HeadValue.direct(content)

    def set_head(self, value: HeadValue) -> None:
        """
        Point HEAD at a branch or a commit.

        Args:
            value: New HEAD contents

        Raises:
            BranchNotFound: If a symbolic target branch does not exist
        """
        self._require_repo()

        if value.is_symbolic and not self.branch_exists(value.branch):
            raise BranchNotFound(value.branch)

        atomic_write_text(self.head_file, f"{value}\n" if not value.is_empty else '')
        logger.debug("HEAD -> %s", value)

    def branch_path(self, name: str):
        return self.heads_dir / name

    def branch_exists(self, name: str) -> bool:
        return self.branch_path(name).is_file()

    def read_branch(self, name: str) -> Optional[str]:
        """
        Read a branch tip.

        Args:
            name: Branch name

        Returns:
            Commit digest, or None if the branch is absent or has no commits
        """
        self._require_repo()

        path = self.branch_path(name)
        if not path.is_file():
            return None

        content = path.read_text().strip()
        return content or None

    def write_branch(self, name: str, digest: Optional[str]) -> None:
        """
        Create or update a branch atomically.

        Args:
            name: Branch name
            digest: Commit digest, or None for a branch with no commits
        """
        self._require_repo()
        self.validate_branch_name(name)

        if digest is not None and not is_digest(digest):
            raise ValueError(f"Not a commit digest: {digest!r}")

        atomic_write_text(self.branch_path(name), (digest + '\n') if digest else '')
        logger.debug("refs/heads/%s -> %s", name, digest)

    def create_branch(self, name: str, at_digest: Optional[str]) -> None:
        """
        Create a new branch.

        Args:
            name: Branch name
            at_digest: Commit the branch starts at (None if no commits yet)

        Raises:
            InvalidBranchName: If name is not usable
            AlreadyExists: If the branch already exists, or an existing
                branch is a directory prefix of name (or the reverse)
        """
        self.validate_branch_name(name)

        with self.repo.lock():
            if self.branch_exists(name):
                raise AlreadyExists(f"Branch '{name}' already exists")

            # refs/heads/a and refs/heads/a/b cannot both be files
            for existing in self.list_branches():
                if existing.startswith(name + '/') or name.startswith(existing + '/'):
                    raise AlreadyExists(f"Branch '{name}' conflicts with existing branch '{existing}'")

            self.write_branch(name, at_digest)

        logger.info("Created branch %s at %s", name, at_digest)

    def list_branches(self) -> List[str]:
        """
        List all branch names, sorted.
        """
        self._require_repo()

        if not self.heads_dir.exists():
            return []

        names = []
        for branch_file in self.heads_dir.rglob('*'):
            if branch_file.is_file() and not branch_file.name.startswith('.'):
                names.append(branch_file.relative_to(self.heads_dir).as_posix())

        return sorted(names)

    def current_branch(self) -> Optional[str]:
        """
        Get the current branch name.

        Returns:
            Branch name or None if HEAD is detached or empty
        """
        return self.read_head().branch

    def resolve_current_commit(self) -> Optional[str]:
        """
        Resolve HEAD to a commit digest.

        Returns:
            Commit digest, or None if there are no commits yet
        """
        head = self.read_head()

        if head.is_symbolic:
            return self.read_branch(head.branch)

        return head.digest

    def advance_head(self, digest: str) -> None:
        """
        Move whatever HEAD designates to digest.

        On a branch the branch ref moves; when detached (or empty) HEAD
        itself is rewritten.
        """
        head = self.read_head()

        if head.is_symbolic:
            self.write_branch(head.branch, digest)
        else:
            self.set_head(HeadValue.direct(digest))
