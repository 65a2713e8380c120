"""Object model tests."""

import pytest
from twig.core.errors import MalformedObject
from twig.core.hash import hash_object
from twig.core.objects import Blob, Tree, Commit, OBJECT_TYPES


def test_blob_creation():
    blob = Blob(b'hello world')
    assert blob.data == b'hello world'
    assert blob.type == 'blob'


def test_blob_frame_has_kind_header():
    """Stored bytes carry an explicit kind and size."""
    assert Blob(b'hello').frame() == b'blob 5\0hello'


def test_blob_hash_is_hash_of_frame():
    blob = Blob(b'hello')
    assert blob.hash == hash_object(b'blob 5\0hello')


def test_same_bytes_different_kind_differ():
    """A tree and a blob with identical bodies get different digests."""
    tree = Tree()
    tree.add_entry('a' * 40, 'x.txt')
    blob = Blob(tree.serialize())
    assert blob.hash != tree.hash


def test_tree_last_write_wins():
    tree = Tree()
    tree.add_entry('a' * 40, 'file.txt')
    tree.add_entry('b' * 40, 'file.txt')
    assert len(tree) == 1
    assert tree.get('file.txt') == 'b' * 40


def test_tree_serialize_sorted_by_path():
    tree = Tree.from_entries([('b' * 40, 'zeta.txt'), ('a' * 40, 'alpha.txt')])
    assert tree.serialize() == f"{'a' * 40} alpha.txt\n{'b' * 40} zeta.txt".encode()


def test_tree_hash_independent_of_insertion_order():
    t1 = Tree.from_entries([('a' * 40, 'a'), ('b' * 40, 'b')])
    t2 = Tree.from_entries([('b' * 40, 'b'), ('a' * 40, 'a')])
    assert t1.hash == t2.hash


def test_tree_paths_may_contain_spaces_and_slashes():
    tree = Tree()
    tree.add_entry('c' * 40, 'docs/my notes.txt')

    parsed = Tree()
    parsed.deserialize(tree.serialize())
    assert parsed.as_mapping() == {'docs/my notes.txt': 'c' * 40}


def test_tree_rejects_newline_in_path():
    with pytest.raises(ValueError):
        Tree().add_entry('a' * 40, 'bad\nname')


def test_tree_deserialize_rejects_garbage():
    with pytest.raises(MalformedObject):
        Tree().deserialize(b'not-a-digest file.txt')


def test_empty_tree():
    tree = Tree()
    assert tree.serialize() == b''
    parsed = Tree()
    parsed.deserialize(b'')
    assert len(parsed) == 0


def test_commit_serialize_format():
    commit = Commit.create('a' * 40, ['b' * 40], 'Jane', 'Initial', timestamp=42)
    assert commit.serialize().decode() == (
        f"tree {'a' * 40}\n"
        f"parent {'b' * 40}\n"
        "author Jane\n"
        "timestamp 42\n"
        "message Initial"
    )


def test_commit_multiline_message_survives():
    commit = Commit.create('a' * 40, [], 'Jane', 'Subject\n\nBody line\nparent fake', timestamp=1)
    parsed = Commit()
    parsed.deserialize(commit.serialize())
    assert parsed.message == 'Subject\n\nBody line\nparent fake'
    assert parsed.parents == []
    assert parsed.hash == commit.hash


def test_commit_two_parents():
    commit = Commit.create('a' * 40, ['b' * 40, 'c' * 40], 'Jane', 'Merge', timestamp=1)
    parsed = Commit()
    parsed.deserialize(commit.serialize())
    assert parsed.parents == ['b' * 40, 'c' * 40]
    assert parsed.is_merge


def test_commit_rejects_three_parents():
    with pytest.raises(ValueError):
        Commit.create('a' * 40, ['b' * 40] * 3, 'Jane', 'x')


def test_commit_timestamp_optional_when_parsing():
    data = f"tree {'a' * 40}\nauthor Jane\nmessage hi".encode()
    commit = Commit()
    commit.deserialize(data)
    assert commit.timestamp == 0
    assert commit.message == 'hi'


@pytest.mark.parametrize('data', [
    b'',
    f"tree {'a' * 40}\nmessage hi".encode(),
    b"author Jane\nmessage hi",
    f"tree {'a' * 40}\nauthor Jane".encode(),
    f"tree {'a' * 40}\ncolour blue\nauthor Jane\nmessage hi".encode(),
    f"tree {'a' * 40}\nauthor Jane\ntimestamp soon\nmessage hi".encode(),
])
def test_commit_malformed(data):
    with pytest.raises(MalformedObject):
        Commit().deserialize(data)


def test_object_types_table():
    assert set(OBJECT_TYPES) == {'blob', 'tree', 'commit'}
