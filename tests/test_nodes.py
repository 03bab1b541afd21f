"""Tests for flowtree.nodes."""

from flowtree import InMemoryAccessor, Node
from flowtree.content import Chunk


class TestNodeIdentity:
    def test_equal_by_key(self):
        """Two wrappers around the same content identity are equal."""
        assert Node("a", key="k") == Node("b", key="k")

    def test_different_keys_differ(self):
        assert Node("a", key=1) != Node("a", key=2)

    def test_collapse_in_set(self):
        nodes = {Node("x", key=1), Node("y", key=1), Node("z", key=2)}
        assert len(nodes) == 2

    def test_weight_and_active_ignored_for_equality(self):
        assert Node("a", key=1, weight=5.0, active=True) == Node("a", key=1)

    def test_not_equal_to_other_types(self):
        assert Node("a", key=1) != 1
        assert Node("a", key=1) != "a"

    def test_dict_lookup_with_fresh_wrapper(self):
        lookup = {Node("a", key="a"): "value"}
        assert lookup[Node("other", key="a")] == "value"


class TestNodeDefaults:
    def test_defaults(self):
        n = Node("a", key=1)
        assert n.weight == 1.0
        assert n.active is False

    def test_wrap_uses_accessor_identity(self):
        chunk = Chunk(key="c1", type_name="CQuestPhase")
        n = Node.wrap(chunk, InMemoryAccessor(), weight=2.0)
        assert n.key == "c1"
        assert n.content is chunk
        assert n.weight == 2.0


class TestContentTypeNames:
    def test_null_content(self):
        n = Node(None, key=0)
        assert n.content_type_name == "Null"
        assert n.content_type_short_name == "Null"

    def test_chunk_type_name(self):
        n = Node(Chunk(key="c", type_name="quests.CQuestPhase"), key="c")
        assert n.content_type_name == "quests.CQuestPhase"
        assert n.content_type_short_name == "CQuestPhase"

    def test_python_type_fallback(self):
        n = Node(3.5, key=1)
        assert n.content_type_name == "builtins.float"
        assert n.content_type_short_name == "float"

    def test_repr(self):
        assert repr(Node(Chunk(key="c", type_name="CBlock"), key="c")) == "Node('c', CBlock)"
