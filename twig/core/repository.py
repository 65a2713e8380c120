"""Repository management for Twig."""

import logging
from pathlib import Path
from typing import Optional, Tuple, Type, TypeVar
from .errors import (AlreadyExists, MalformedObject, ObjectNotFound,
                     RepositoryNotInitialized)
from .hash import hash_object, is_digest
from .lock import RepositoryLock
from .objects import OBJECT_TYPES, Blob, Commit, Tree, TwigObject
from twig.utils.fs import atomic_write, atomic_write_text


logger = logging.getLogger(__name__)

DEFAULT_BRANCH = 'main'

T = TypeVar('T', bound=TwigObject)


class Repository:
    """
    Handle on a Twig repository rooted at a directory.

    The repository owns the ``.twig`` directory and the object store inside
    it. Every operation takes a Repository explicitly; nothing depends on the
    process working directory once the handle exists.
    """

    def __init__(self, path: str = '.'):
        """
        Initialize repository handle.

        Args:
            path: Path to repository root (defaults to current directory)
        """
        self.work_tree = Path(path).resolve()
        self.twig_dir = self.work_tree / '.twig'
        self.objects_dir = self.twig_dir / 'objects'
        self.refs_dir = self.twig_dir / 'refs'
        self.heads_dir = self.refs_dir / 'heads'
        self.head_file = self.twig_dir / 'HEAD'
        self.index_file = self.twig_dir / 'index'
        self.last_commit_state_file = self.twig_dir / 'last_commit_state'
        self.config_file = self.twig_dir / 'config'
        self.lock_file = self.twig_dir / 'lock'

        # Managers are created lazily to avoid circular imports
        self._lock = RepositoryLock(self.lock_file)
        self._ref_manager = None
        self._graph = None
        self._merge_engine = None
        self._config = None

    @property
    def refs(self):
        """Get RefManager instance."""
        if self._ref_manager is None:
            from .refs import RefManager
            self._ref_manager = RefManager(self)
        return self._ref_manager

    @property
    def graph(self):
        """Get CommitGraph instance."""
        if self._graph is None:
            from twig.operations.graph import CommitGraph
            self._graph = CommitGraph(self)
        return self._graph

    @property
    def merge(self):
        """Get MergeEngine instance."""
        if self._merge_engine is None:
            from twig.operations.merge import MergeEngine
            self._merge_engine = MergeEngine(self)
        return self._merge_engine

    @property
    def config(self):
        """Get Config instance for this repository."""
        if self._config is None:
            from .config import Config
            self._config = Config(self.config_file)
        return self._config

    @property
    def default_branch(self) -> str:
        return self.config.get('core', 'defaultbranch', fallback=DEFAULT_BRANCH)

    def lock(self) -> RepositoryLock:
        """
        Exclusive lock for read-modify-write sequences.

        Usage:
            with repo.lock():
                ...
        """
        return self._lock

    @property
    def is_initialized(self) -> bool:
        return self.twig_dir.is_dir() and self.objects_dir.is_dir()

    def require_initialized(self) -> None:
        """
        Raises:
            RepositoryNotInitialized: If .twig does not exist yet
        """
        if not self.is_initialized:
            raise RepositoryNotInitialized(self.work_tree)

    def init(self, default_branch: Optional[str] = None) -> 'Repository':
        """
        Initialize a new repository.

        Creates the .twig directory structure:
        .twig/
        ├── objects/              # Object database
        ├── refs/heads/<branch>   # Default branch, empty until first commit
        ├── HEAD                  # ref: refs/heads/<branch>
        ├── index                 # Staging area
        └── config                # Repository configuration

        Args:
            default_branch: Name of the first branch (defaults to 'main')

        Returns:
            Repository: self for method chaining

        Raises:
            AlreadyExists: If a repository already exists here
        """
        if self.twig_dir.exists():
            raise AlreadyExists(f"Repository already exists at {self.twig_dir}")

        branch = default_branch or DEFAULT_BRANCH

        self.twig_dir.mkdir(parents=True)
        self.objects_dir.mkdir()
        self.refs_dir.mkdir()
        self.heads_dir.mkdir()

        (self.heads_dir / branch).write_text('')
        self.head_file.write_text(f'ref: refs/heads/{branch}\n')
        self.index_file.write_text('')

        config_content = f'[core]\nrepositoryformatversion = 0\ndefaultbranch = {branch}\n'
        self.config_file.write_text(config_content)

        self._config = None
        logger.info("Initialized repository at %s (default branch %s)", self.twig_dir, branch)
        return self

    @classmethod
    def find_repository(cls, path: str = '.') -> Optional['Repository']:
        """
        Find repository by searching up the directory tree.

        Args:
            path: Starting path for search

        Returns:
            Repository if found, None otherwise
        """
        current = Path(path).resolve()

        while True:
            if (current / '.twig').is_dir():
                return cls(str(current))

            # Reached filesystem root
            if current == current.parent:
                return None

            current = current.parent

    @classmethod
    def open(cls, path: str = '.') -> 'Repository':
        """
        Like find_repository, but raises instead of returning None.

        Raises:
            RepositoryNotInitialized: If no enclosing repository exists
        """
        repo = cls.find_repository(path)
        if repo is None:
            raise RepositoryNotInitialized(Path(path).resolve())
        return repo

    def object_path(self, hash: str) -> Path:
        """
        Get filesystem path for an object.

        Objects live in subdirectories named by the first 2 characters of
        the hash, with the remaining 38 characters as the filename.

        Args:
            hash: 40-character SHA-1 hash

        Returns:
            Path: Full path to object file
        """
        return self.objects_dir / hash[:2] / hash[2:]

    def write_object(self, obj: TwigObject) -> str:
        """
        Write object to repository.

        Writing is idempotent: identical content maps to the same digest and
        the existing file is left alone.

        Args:
            obj: Object to write

        Returns:
            str: Digest of the object
        """
        self.require_initialized()

        hash = obj.hash
        path = self.object_path(hash)

        if path.exists():
            return hash

        atomic_write(path, obj.frame())
        logger.debug("Stored %s %s", obj.type, hash)
        return hash

    def read_raw(self, hash: str) -> Tuple[str, bytes]:
        """
        Read an object's kind and body without parsing the body.

        Args:
            hash: 40-character SHA-1 hash

        Returns:
            Tuple of (kind, body bytes)

        Raises:
            ObjectNotFound: If no object is stored under hash
            MalformedObject: If the header is invalid or content does not
                match its digest
        """
        self.require_initialized()

        if not is_digest(hash):
            raise ObjectNotFound(hash)

        path = self.object_path(hash)
        if not path.is_file():
            raise ObjectNotFound(hash)

        content = path.read_bytes()

        if hash_object(content) != hash:
            raise MalformedObject(hash, "content does not match digest")

        null_idx = content.find(b'\0')
        if null_idx == -1:
            raise MalformedObject(hash, "missing header")

        try:
            header = content[:null_idx].decode()
            obj_type, size_str = header.split(' ', 1)
            size = int(size_str)
        except (UnicodeDecodeError, ValueError):
            raise MalformedObject(hash, "invalid header")

        data = content[null_idx + 1:]
        if len(data) != size:
            raise MalformedObject(hash, f"size mismatch: expected {size}, got {len(data)}")
        if obj_type not in OBJECT_TYPES:
            raise MalformedObject(hash, f"unknown object type {obj_type!r}")

        return obj_type, data

    def read_object(self, hash: str, expected: Optional[Type[T]] = None) -> TwigObject:
        """
        Read object from repository.

        Args:
            hash: 40-character SHA-1 hash
            expected: Optional object class the caller requires

        Returns:
            TwigObject: Deserialized object (Blob, Tree, or Commit)

        Raises:
            ObjectNotFound: If object not found
            MalformedObject: If object has invalid format or is not of the
                expected kind
        """
        obj_type, data = self.read_raw(hash)

        obj = OBJECT_TYPES[obj_type]()
        try:
            obj.deserialize(data)
        except MalformedObject as e:
            raise MalformedObject(hash, e.reason) from None

        if expected is not None and not isinstance(obj, expected):
            raise MalformedObject(hash, f"expected {expected.__name__.lower()}, found {obj_type}")

        return obj

    def read_commit(self, hash: str) -> Commit:
        return self.read_object(hash, Commit)

    def read_tree(self, hash: str) -> Tree:
        return self.read_object(hash, Tree)

    def object_exists(self, hash: str) -> bool:
        """
        Check if object exists in repository.

        Args:
            hash: 40-character SHA-1 hash

        Returns:
            bool: True if object exists
        """
        return is_digest(hash) and self.object_path(hash).is_file()

    def compute_digest(self, data: bytes) -> str:
        """Digest that data would have once stored as a blob."""
        return Blob(data).hash

    def store_object(self, data: bytes) -> str:
        """Store raw file bytes as a blob and return its digest."""
        return self.write_object(Blob(data))

    def write_last_commit_state(self, tree: Optional[Tree]) -> None:
        """
        Record the snapshot HEAD now points at.

        The staging collaborator consults this file to decide whether a
        file changed since the last commit.
        """
        text = tree.serialize().decode() if tree is not None else ''
        atomic_write_text(self.last_commit_state_file, text)

    def __repr__(self) -> str:
        return f"Repository(path={self.work_tree})"
