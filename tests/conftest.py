"""Shared pytest fixtures for Twig tests."""

import pytest
import tempfile
import shutil
from pathlib import Path
from twig.core.config import Config
from twig.core.index import Index
from twig.core.objects import Blob, Tree, Commit
from twig.core.repository import Repository
from twig.operations.commit import create_commit


AUTHOR = "Test User <test@example.com>"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep tests away from the real ~/.twigconfig and TWIG_* variables."""
    home = tmp_path_factory.mktemp('home')
    monkeypatch.setattr(Config, 'GLOBAL_CONFIG_PATH', home / '.twigconfig')
    for key in ('TWIG_USER_NAME', 'TWIG_USER_EMAIL', 'TWIG_CORE_DEFAULTBRANCH',
                'TWIG_LOG_BRANCHPRIORITY'):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def repo(temp_dir):
    """Create an initialized repository."""
    repo = Repository(str(temp_dir))
    repo.init()
    return repo


@pytest.fixture
def repo_with_config(repo):
    """Create a repository with an author configured."""
    repo.config.set('user', 'name', 'Test User')
    repo.config.set('user', 'email', 'test@example.com')
    return repo


@pytest.fixture
def sample_blob():
    """Create a sample blob object."""
    return Blob(b"Hello, World!\n")


@pytest.fixture
def sample_tree(repo, sample_blob):
    """Create a sample tree with one blob."""
    blob_hash = repo.write_object(sample_blob)
    tree = Tree()
    tree.add_entry(blob_hash, 'test.txt')
    return tree


@pytest.fixture
def sample_commit(sample_tree, repo):
    """Sample root commit object."""
    tree_hash = repo.write_object(sample_tree)
    return Commit.create(
        tree_hash=tree_hash,
        parent_hashes=[],
        author=AUTHOR,
        message="Test commit",
        timestamp=1700000000
    )


@pytest.fixture
def commit_files(repo_with_config):
    """
    Return a helper that writes files, stages them and commits.

    Usage:
        digest = commit_files({'a.txt': 'hello'}, 'first')
    """
    repo = repo_with_config

    def _commit(files, message='Test commit'):
        for name, content in files.items():
            path = repo.work_tree / name
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, str):
                content = content.encode()
            path.write_bytes(content)
            Index.load(repo).stage(repo, path)
        return create_commit(repo, message, author=AUTHOR)

    return _commit


def write_commit(repo, files, parents, message='commit', timestamp=1700000000):
    """
    Store a commit directly from a path -> content mapping.

    Bypasses the index so tests can build arbitrary graphs.
    """
    tree = Tree()
    for path, content in files.items():
        tree.add_entry(repo.store_object(content.encode()), path)
    tree_hash = repo.write_object(tree)
    commit = Commit.create(tree_hash, list(parents), AUTHOR, message, timestamp=timestamp)
    return repo.write_object(commit)


@pytest.fixture
def make_commit(repo):
    """Fixture form of write_commit bound to the test repository."""
    def _make(files, parents=(), message='commit', timestamp=1700000000):
        return write_commit(repo, files, parents, message, timestamp)
    return _make


def count_objects(repo):
    """Number of stored objects."""
    return sum(1 for p in repo.objects_dir.rglob('*') if p.is_file())


@pytest.fixture
def object_counter():
    return count_objects
