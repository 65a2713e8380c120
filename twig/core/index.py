"""Index (staging area) implementation."""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple
from dataclasses import dataclass
from .errors import MalformedObject
from .hash import is_digest
from twig.utils.fs import atomic_write_text


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexEntry:
    """A staged file: the digest of its content and its path."""
    sha1: str
    path: str

    def __str__(self) -> str:
        return f"{self.sha1} {self.path}"


def parse_entries(text: str, source: str = 'index') -> Dict[str, IndexEntry]:
    """
    Parse newline-joined ``<digest> <path>`` records.

    Later records for the same path replace earlier ones.

    Raises:
        MalformedObject: If a non-empty line is not a valid record
    """
    entries: Dict[str, IndexEntry] = {}

    for lineno, line in enumerate(text.split('\n'), 1):
        if not line.strip():
            continue
        sha1, sep, path = line.partition(' ')
        if not sep or not path or not is_digest(sha1):
            raise MalformedObject(None, f"bad {source} record on line {lineno}")
        entries.pop(path, None)
        entries[path] = IndexEntry(sha1, path)

    return entries


def format_entries(entries) -> str:
    lines = [str(entry) for entry in entries]
    return '\n'.join(lines) + ('\n' if lines else '')


class Index:
    """
    Twig index (staging area).

    An ordered set of (digest, path) entries that will be laid over the
    current commit's tree by the next commit. Unique by path: staging a path
    again replaces its entry and moves it to the end.
    """

    def __init__(self):
        """Initialize empty index."""
        self.entries: Dict[str, IndexEntry] = {}

    @classmethod
    def load(cls, repo) -> 'Index':
        """Read the repository's index file."""
        index = cls()
        index.read(str(repo.index_file))
        return index

    def add_entry(self, path: str, sha1: str) -> None:
        """
        Add or update entry in index.

        Args:
            path: File path relative to repository root
            sha1: Digest of the staged blob
        """
        if not path or '\n' in path or '\r' in path:
            raise ValueError(f"Invalid path: {path!r}")
        self.entries.pop(path, None)
        self.entries[path] = IndexEntry(sha1, path)

    def get_entry(self, path: str) -> Optional[IndexEntry]:
        """Get entry by path."""
        return self.entries.get(path)

    def remove_entry(self, path: str) -> None:
        self.entries.pop(path, None)

    def clear(self) -> None:
        """Clear all entries from index."""
        self.entries.clear()

    def as_pairs(self) -> List[Tuple[str, str]]:
        """Entries as (digest, path) pairs in staging order."""
        return [(entry.sha1, entry.path) for entry in self.entries.values()]

    def relative_path(self, repo, filepath) -> str:
        """
        Path as recorded in the index: relative to the repository root when
        the file lives inside it, with forward slashes.
        """
        file_path = Path(filepath)
        if not file_path.is_absolute():
            file_path = Path.cwd() / file_path
        file_path = file_path.resolve()

        try:
            return file_path.relative_to(repo.work_tree).as_posix()
        except ValueError:
            return Path(filepath).as_posix()

    def committed_digest(self, repo, path: str) -> Optional[str]:
        """Digest recorded for path in the last commit state, if any."""
        state_file = repo.last_commit_state_file
        if not state_file.exists():
            return None

        entry = parse_entries(state_file.read_text(), 'last_commit_state').get(path)
        return entry.sha1 if entry else None

    def is_unchanged(self, repo, sha1: str, path: str) -> bool:
        """
        Check whether path with this digest is already staged or committed.

        A staged entry wins over the last commit state: if the path is staged
        with other content, the file has changed.
        """
        entry = self.entries.get(path)
        if entry is not None:
            return entry.sha1 == sha1

        return self.committed_digest(repo, path) == sha1

    def stage(self, repo, filepath) -> bool:
        """
        Stage a file for commit.

        Args:
            repo: Repository instance
            filepath: Path to file (absolute or relative to the cwd)

        Returns:
            bool: True if staged, False if its content is unchanged

        Raises:
            FileNotFoundError: If the file does not exist
            IsADirectoryError: If the path is not a regular file
        """
        file_path = Path(filepath)
        if not file_path.is_absolute():
            file_path = Path.cwd() / file_path

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        if not file_path.is_file():
            raise IsADirectoryError(f"Not a file: {filepath}")

        data = file_path.read_bytes()
        path = self.relative_path(repo, file_path)
        if not path or '\n' in path or '\r' in path:
            raise ValueError(f"Invalid path: {path!r}")
        sha1 = repo.compute_digest(data)

        with repo.lock():
            # Another process may have staged in between
            self.read(str(repo.index_file))

            if self.is_unchanged(repo, sha1, path):
                logger.debug("No changes for %s", path)
                return False

            # Reverted to the committed content: the staged entry is stale
            if path in self.entries and self.committed_digest(repo, path) == sha1:
                self.remove_entry(path)
                self.write(str(repo.index_file))
                logger.debug("Unstaged %s (matches last commit)", path)
                return False

            repo.store_object(data)
            self.add_entry(path, sha1)
            self.write(str(repo.index_file))

        logger.debug("Staged %s as %s", path, sha1)
        return True

    def write(self, index_path: str) -> None:
        """
        Write index to disk.

        Format: one ``<digest> <path>`` record per line, staging order.
        """
        atomic_write_text(index_path, format_entries(self.entries.values()))

    def read(self, index_path: str) -> None:
        """
        Read index from disk; a missing file means an empty index.

        Raises:
            MalformedObject: If a record cannot be parsed
        """
        path = Path(index_path)
        if not path.exists():
            self.entries = {}
            return

        self.entries = parse_entries(path.read_text())

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self.entries.values())

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"Index(entries={len(self.entries)})"
