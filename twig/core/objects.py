"""Twig objects.

Every stored object is framed with an explicit kind header so that reading
it back never has to guess what it is from its shape:

    <kind> <size>\\0<body>

The digest of an object is the SHA-1 of that full framed content.
"""

import time
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Iterator, List, Optional, Tuple
from .errors import MalformedObject
from .hash import hash_object, is_digest


class TwigObject(ABC):
    """Base class for all Twig objects."""

    def __init__(self):
        self._hash: Optional[str] = None

    @abstractmethod
    def serialize(self) -> bytes:
        """
        Serialize object body to bytes.

        Returns:
            bytes: Serialized object data
        """
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> None:
        """
        Deserialize object body from bytes.

        Args:
            data: Serialized object data

        Raises:
            MalformedObject: If data does not parse for this kind
        """
        pass

    @property
    def type(self) -> str:
        """
        Return object kind name.

        Returns:
            str: Object kind (blob, tree, commit)
        """
        return self.__class__.__name__.lower()

    def frame(self) -> bytes:
        """Return the exact bytes stored on disk (header plus body)."""
        data = self.serialize()
        header = f"{self.type} {len(data)}\0".encode()
        return header + data

    def compute_hash(self) -> str:
        """
        Compute and cache object digest.

        Returns:
            str: 40-character SHA-1 hash of the framed content
        """
        if self._hash is None:
            self._hash = hash_object(self.frame())
        return self._hash

    @property
    def hash(self) -> str:
        """40-character digest of this object."""
        return self.compute_hash()


class Blob(TwigObject):
    """
    Represents file content.

    A blob stores the raw bytes of a staged file without its path.
    """

    def __init__(self, data: Optional[bytes] = None):
        super().__init__()
        self.data = data or b''

    def serialize(self) -> bytes:
        return self.data

    def deserialize(self, data: bytes) -> None:
        self.data = data
        self._hash = None

    def __repr__(self) -> str:
        return f"Blob(hash={self.hash[:7]}, size={len(self.data)})"


class TreeEntry:
    """A single (digest, path) pair in a flat tree."""

    __slots__ = ('hash', 'path')

    def __init__(self, obj_hash: str, path: str):
        self.hash = obj_hash
        self.path = path

    def __eq__(self, other) -> bool:
        if not isinstance(other, TreeEntry):
            return NotImplemented
        return self.hash == other.hash and self.path == other.path

    def __lt__(self, other: 'TreeEntry') -> bool:
        return self.path < other.path

    def __repr__(self) -> str:
        return f"TreeEntry({self.hash[:7]} {self.path})"


class Tree(TwigObject):
    """
    Flat snapshot mapping paths to object digests.

    There are no nested subtrees: a path such as ``docs/a.txt`` is simply a
    key. Paths are unique; adding a path again replaces its digest.

    Body format is one ``<digest> <path>`` record per line, sorted by path,
    so two trees with the same mapping always have the same digest.
    """

    def __init__(self):
        super().__init__()
        self._entries: Dict[str, TreeEntry] = {}

    @property
    def entries(self) -> List[TreeEntry]:
        """Entries in insertion order."""
        return list(self._entries.values())

    def add_entry(self, obj_hash: str, path: str) -> None:
        """
        Add or replace the entry for path.

        Args:
            obj_hash: Digest of the object stored at path
            path: File path

        Raises:
            ValueError: If path is empty or contains a line break
        """
        if not path or '\n' in path or '\r' in path:
            raise ValueError(f"Invalid tree path: {path!r}")
        self._entries[path] = TreeEntry(obj_hash, path)
        self._hash = None

    def get(self, path: str) -> Optional[str]:
        """Return the digest stored for path, or None."""
        entry = self._entries.get(path)
        return entry.hash if entry else None

    def as_mapping(self) -> Dict[str, str]:
        """Return a fresh path -> digest dict."""
        return {path: entry.hash for path, entry in self._entries.items()}

    @classmethod
    def from_entries(cls, entries: Iterable[Tuple[str, str]]) -> 'Tree':
        """
        Build a tree from (digest, path) pairs; the last pair for a path wins.
        """
        tree = cls()
        for obj_hash, path in entries:
            tree.add_entry(obj_hash, path)
        return tree

    @classmethod
    def from_mapping(cls, mapping: Dict[str, str]) -> 'Tree':
        """Build a tree from a path -> digest dict."""
        return cls.from_entries((obj_hash, path) for path, obj_hash in mapping.items())

    def serialize(self) -> bytes:
        lines = [f"{entry.hash} {entry.path}" for entry in sorted(self._entries.values())]
        return '\n'.join(lines).encode()

    def deserialize(self, data: bytes) -> None:
        self._entries = {}
        try:
            content = data.decode()
        except UnicodeDecodeError:
            raise MalformedObject(None, "tree is not valid UTF-8")

        for lineno, line in enumerate(content.split('\n'), 1):
            if not line:
                continue
            obj_hash, sep, path = line.partition(' ')
            if not sep or not path or not is_digest(obj_hash):
                raise MalformedObject(None, f"bad tree record on line {lineno}")
            self._entries[path] = TreeEntry(obj_hash, path)

        self._hash = None

    def __iter__(self) -> Iterator[TreeEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __repr__(self) -> str:
        return f"Tree(entries={len(self._entries)})"


class Commit(TwigObject):
    """
    Represents a commit.

    A commit records:
    - the snapshot (tree digest)
    - zero, one or two parent commits
    - author and timestamp
    - the message, which may span several lines
    """

    MAX_PARENTS = 2

    def __init__(self):
        super().__init__()
        self.tree: str = ''
        self.parents: List[str] = []
        self.author: str = ''
        self.timestamp: int = 0
        self.message: str = ''

    def serialize(self) -> bytes:
        """
        Serialize commit body.

        Format:
        tree <tree-hash>
        parent <parent-hash>  (zero to two)
        author <name>
        timestamp <unix seconds>
        message <text, runs to end of object>

        Returns:
            bytes: Serialized commit data
        """
        lines = [f'tree {self.tree}']
        for parent in self.parents:
            lines.append(f'parent {parent}')
        lines.append(f'author {self.author}')
        lines.append(f'timestamp {self.timestamp}')
        lines.append(f'message {self.message}')
        return '\n'.join(lines).encode()

    def deserialize(self, data: bytes) -> None:
        """
        Deserialize commit body.

        Raises:
            MalformedObject: If tree, author or message is missing, a field
                is unknown, or there are more than two parents
        """
        try:
            content = data.decode()
        except UnicodeDecodeError:
            raise MalformedObject(None, "commit is not valid UTF-8")

        self.tree = ''
        self.parents = []
        self.author = ''
        self.timestamp = 0
        self.message = ''
        seen = set()

        pos = 0
        while pos < len(content):
            end = content.find('\n', pos)
            if end == -1:
                end = len(content)
            line = content[pos:end]
            field, _, value = line.partition(' ')

            if field == 'message':
                # Message is last and keeps its own line breaks
                self.message = content[pos + len('message '):]
                seen.add(field)
                break
            elif field == 'tree':
                self.tree = value
            elif field == 'parent':
                self.parents.append(value)
            elif field == 'author':
                self.author = value
            elif field == 'timestamp':
                try:
                    self.timestamp = int(value)
                except ValueError:
                    raise MalformedObject(None, f"bad timestamp {value!r}")
            else:
                raise MalformedObject(None, f"unknown commit field {field!r}")

            seen.add(field)
            pos = end + 1

        missing = {'tree', 'author', 'message'} - seen
        if missing:
            raise MalformedObject(None, f"commit missing {', '.join(sorted(missing))}")
        if not is_digest(self.tree):
            raise MalformedObject(None, f"bad tree digest {self.tree!r}")
        if len(self.parents) > self.MAX_PARENTS:
            raise MalformedObject(None, f"commit has {len(self.parents)} parents")

        self._hash = None

    @classmethod
    def create(
        cls,
        tree_hash: str,
        parent_hashes: List[str],
        author: str,
        message: str,
        timestamp: Optional[int] = None
    ) -> 'Commit':
        """
        Create a new commit.

        Args:
            tree_hash: Hash of tree object
            parent_hashes: Parent commit hashes (at most two)
            author: Author name, e.g. "Jane <jane@example.com>"
            message: Commit message
            timestamp: Unix timestamp (defaults to current time)

        Returns:
            Commit: New commit object

        Raises:
            ValueError: If more than two parents are given or the author
                contains a line break
        """
        if len(parent_hashes) > cls.MAX_PARENTS:
            raise ValueError(f"A commit has at most {cls.MAX_PARENTS} parents")
        if '\n' in author:
            raise ValueError("Author must be a single line")

        commit = cls()
        commit.tree = tree_hash
        commit.parents = list(parent_hashes)
        commit.author = author
        commit.message = message
        commit.timestamp = int(time.time()) if timestamp is None else timestamp
        return commit

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def summary(self) -> str:
        """First line of the message."""
        return self.message.split('\n')[0]

    def __repr__(self) -> str:
        parent_info = f", parents={len(self.parents)}" if self.parents else ""
        return f"Commit(hash={self.hash[:7]}{parent_info}, msg='{self.summary[:50]}')"


OBJECT_TYPES = {
    'blob': Blob,
    'tree': Tree,
    'commit': Commit,
}
