"""End-to-end workflows through the library API."""

import pytest
from twig.core.index import Index
from twig.core.repository import Repository
from twig.operations.commit import create_branch, create_commit, switch_branch

AUTHOR = "Test User <test@example.com>"


def stage(repo, name, content):
    path = repo.work_tree / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return Index.load(repo).stage(repo, path)


class TestBranchAndMergeWorkflow:
    """init, commit, branch, checkout, commit, checkout, merge."""

    def test_fast_forward_scenario(self, temp_dir):
        repo = Repository(str(temp_dir)).init()

        assert stage(repo, 'a.txt', 'hello') is True
        first = create_commit(repo, 'first', author=AUTHOR)

        create_branch(repo, 'feature')
        switch_branch(repo, 'feature')

        assert stage(repo, 'a.txt', 'world') is True
        second = create_commit(repo, 'second', author=AUTHOR)

        switch_branch(repo, repo.default_branch)
        result = repo.merge.merge('feature')

        tip = repo.refs.read_branch('main')
        assert tip == second
        assert result.conflicts == []
        assert repo.graph.tree_of(tip) == {'a.txt': repo.compute_digest(b'world')}

        history = [entry.digest for entry in repo.graph.history(tip)]
        assert history == [second, first]

    def test_readd_after_commit_is_noop(self, temp_dir, object_counter):
        repo = Repository(str(temp_dir)).init()
        stage(repo, 'a.txt', 'hello')
        create_commit(repo, 'first', author=AUTHOR)
        objects_before = object_counter(repo)

        assert stage(repo, 'a.txt', 'hello') is False

        assert len(Index.load(repo)) == 0
        assert object_counter(repo) == objects_before

    def test_diverged_branches_merge_commit(self, temp_dir):
        repo = Repository(str(temp_dir)).init()
        stage(repo, 'shared.txt', 'v1')
        create_commit(repo, 'base', author=AUTHOR)

        create_branch(repo, 'feature')
        switch_branch(repo, 'feature')
        stage(repo, 'feature.txt', 'feature work')
        create_commit(repo, 'feature work', author=AUTHOR)

        switch_branch(repo, 'main')
        stage(repo, 'main.txt', 'main work')
        create_commit(repo, 'main work', author=AUTHOR)

        result = repo.merge.merge('feature', author=AUTHOR)

        assert result.strategy == 'three_way'
        assert sorted(repo.graph.tree_of(result.commit)) == ['feature.txt', 'main.txt', 'shared.txt']

        history = list(repo.graph.history(result.commit))
        assert [entry.summary for entry in history] == [
            "Merge branch 'feature' into main", 'main work', 'base'
        ]
        assert history[0].branch == 'main'

    def test_reopen_from_subdirectory(self, temp_dir):
        repo = Repository(str(temp_dir)).init()
        stage(repo, 'docs/readme.txt', 'hi')
        tip = create_commit(repo, 'docs', author=AUTHOR)

        reopened = Repository.open(str(temp_dir / 'docs'))

        assert reopened.refs.resolve_current_commit() == tip
        assert reopened.graph.tree_of(tip) == {'docs/readme.txt': repo.compute_digest(b'hi')}

    def test_custom_default_branch(self, temp_dir):
        repo = Repository(str(temp_dir)).init(default_branch='trunk')
        stage(repo, 'a.txt', 'x')
        tip = create_commit(repo, 'first', author=AUTHOR)

        assert repo.refs.read_branch('trunk') == tip
        assert repo.graph.branch_labels() == {tip: 'trunk'}


@pytest.mark.parametrize('count', [50])
def test_long_linear_history(temp_dir, count):
    """Deep histories walk without recursion."""
    repo = Repository(str(temp_dir)).init()
    for i in range(count):
        stage(repo, 'counter.txt', str(i))
        create_commit(repo, f'commit {i}', author=AUTHOR)

    tip = repo.refs.resolve_current_commit()
    assert len(repo.graph.ancestors(tip)) == count
    assert len(list(repo.graph.history(tip))) == count
