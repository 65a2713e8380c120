"""Unit tests for reference management."""

import pytest
from twig.core.errors import (AlreadyExists, BranchNotFound, InvalidBranchName,
                              MalformedObject)
from twig.core.refs import HeadValue, RefManager


def test_ref_manager_init(repo):
    """Test RefManager initialization."""
    refs = RefManager(repo)
    assert refs.repo == repo
    assert refs.twig_dir == repo.twig_dir


def test_fresh_repository_head(repo):
    head = repo.refs.read_head()
    assert head == HeadValue.symbolic('main')
    assert head.is_symbolic
    assert repo.refs.current_branch() == 'main'
    assert repo.refs.resolve_current_commit() is None


def test_read_head_direct(repo):
    repo.head_file.write_text('a' * 40 + '\n')
    head = repo.refs.read_head()
    assert head.is_direct
    assert head.digest == 'a' * 40
    assert repo.refs.current_branch() is None


def test_read_head_empty(repo):
    repo.head_file.write_text('')
    assert repo.refs.read_head().is_empty
    assert repo.refs.resolve_current_commit() is None


@pytest.mark.parametrize('content', ['garbage', 'ref: refs/tags/v1', 'a' * 39])
def test_read_head_malformed(repo, content):
    repo.head_file.write_text(content)
    with pytest.raises(MalformedObject):
        repo.refs.read_head()


def test_set_head_round_trip(repo, make_commit):
    commit = make_commit({'a.txt': 'a'})
    repo.refs.set_head(HeadValue.direct(commit))
    assert repo.refs.read_head() == HeadValue.direct(commit)

    repo.refs.set_head(HeadValue.symbolic('main'))
    assert repo.head_file.read_text() == 'ref: refs/heads/main\n'

    repo.refs.set_head(HeadValue.empty())
    assert repo.refs.read_head().is_empty


def test_set_head_to_missing_branch(repo):
    with pytest.raises(BranchNotFound):
        repo.refs.set_head(HeadValue.symbolic('nope'))
    assert repo.refs.current_branch() == 'main'


def test_head_value_str():
    assert str(HeadValue.symbolic('dev')) == 'ref: refs/heads/dev'
    assert str(HeadValue.direct('b' * 40)) == 'b' * 40
    assert str(HeadValue.empty()) == ''


def test_empty_branch_reads_as_none(repo):
    assert repo.refs.branch_exists('main')
    assert repo.refs.read_branch('main') is None
    assert repo.refs.read_branch('missing') is None


def test_write_and_read_branch(repo, make_commit):
    commit = make_commit({'a.txt': 'a'})
    repo.refs.write_branch('main', commit)
    assert repo.refs.read_branch('main') == commit
    assert (repo.heads_dir / 'main').read_text() == commit + '\n'


def test_write_branch_rejects_non_digest(repo):
    with pytest.raises(ValueError):
        repo.refs.write_branch('main', 'HEAD~1')


def test_create_branch(repo, make_commit):
    commit = make_commit({'a.txt': 'a'})
    repo.refs.create_branch('feature', commit)
    assert repo.refs.read_branch('feature') == commit
    assert repo.refs.list_branches() == ['feature', 'main']


def test_create_branch_twice(repo):
    repo.refs.create_branch('feature', None)
    with pytest.raises(AlreadyExists):
        repo.refs.create_branch('feature', None)


def test_nested_branch_names_listed(repo):
    repo.refs.create_branch('feature/login', None)
    assert 'feature/login' in repo.refs.list_branches()


@pytest.mark.parametrize('name', ['', ' x', 'a b', '..', 'a..b', '-x', '.hidden',
                                  'x.lock', 'HEAD', 'a//b', 'a/', '/a'])
def test_invalid_branch_names(repo, name):
    with pytest.raises(InvalidBranchName):
        repo.refs.create_branch(name, None)


def test_advance_head_on_branch(repo, make_commit):
    commit = make_commit({'a.txt': 'a'})
    repo.refs.advance_head(commit)
    assert repo.refs.read_branch('main') == commit
    assert repo.refs.read_head().is_symbolic


def test_advance_head_detached(repo, make_commit):
    first = make_commit({'a.txt': 'a'})
    second = make_commit({'a.txt': 'b'}, parents=[first])
    repo.refs.set_head(HeadValue.direct(first))

    repo.refs.advance_head(second)

    assert repo.refs.read_head() == HeadValue.direct(second)
    assert repo.refs.read_branch('main') is None


def test_create_branch_under_existing_branch(repo):
    repo.refs.create_branch('feature', None)
    with pytest.raises(AlreadyExists, match="conflicts with existing branch 'feature'"):
        repo.refs.create_branch('feature/x', None)
    assert repo.refs.list_branches() == ['feature', 'main']


def test_create_branch_over_nested_branch(repo):
    repo.refs.create_branch('feature/x', None)
    with pytest.raises(AlreadyExists, match="conflicts with existing branch 'feature/x'"):
        repo.refs.create_branch('feature', None)
    assert repo.refs.list_branches() == ['feature/x', 'main']


def test_sibling_prefix_names_allowed(repo):
    repo.refs.create_branch('feat', None)
    repo.refs.create_branch('feature/x', None)
    assert repo.refs.list_branches() == ['feat', 'feature/x', 'main']
