"""Tests for flowtree.content - in-memory resources and JSON documents."""

import json

import pytest

from flowtree import InMemoryAccessor, ResourceAccessor, ResourceFormatError, build_graph, load_resource, parse_resource
from flowtree.content import Array, Chunk, LabeledTuple, Name, Pointer

SAMPLE_DOCUMENT = {
    "entry": "file",
    "chunks": [
        {"id": "file", "type": "CQuestResource", "properties": {"graph": {"ptr": "graph"}}},
        {
            "id": "graph",
            "type": "CQuestGraph",
            "properties": {"graphBlocks": {"array": [{"ptr": "start"}, {"ptr": "missing"}]}},
        },
        {
            "id": "start",
            "type": "CQuestStartBlock",
            "properties": {
                "cachedConnections": {
                    "array": [
                        {
                            "vector": {
                                "socketId": {"name": "Out"},
                                "blocks": {
                                    "array": [
                                        {"vector": {"ptr": {"ptr": "end"}, "inputName": {"name": "In"}}}
                                    ]
                                },
                            }
                        }
                    ]
                },
                "comment": "plain scalars pass through",
            },
        },
        {"id": "end", "type": "CQuestEndBlock"},
    ],
}


class TestInMemoryAccessor:
    @pytest.fixture
    def acc(self):
        return InMemoryAccessor()

    def test_satisfies_protocol(self, acc):
        assert isinstance(acc, ResourceAccessor)

    def test_named_property(self, acc):
        chunk = Chunk(key="a", properties={"x": 1})
        assert acc.get_named_property(chunk, "x") == 1
        assert acc.get_named_property(chunk, "y") is None
        assert acc.get_named_property("not a chunk", "x") is None

    def test_arrays(self, acc):
        arr = Array((1, 2))
        assert acc.is_array(arr)
        assert list(acc.iterate_array(arr)) == [1, 2]
        assert not acc.is_array([1, 2])
        assert list(acc.iterate_array(None)) == []

    def test_pointers(self, acc):
        target = Chunk(key="t")
        assert acc.is_pointer(Pointer(target))
        assert acc.dereference(Pointer(target)) is target
        assert acc.dereference(Pointer(None)) is None
        assert acc.dereference(target) is None

    def test_labeled_tuples(self, acc):
        vec = LabeledTuple({"a": 1, "b": Name("x")})
        assert acc.is_labeled_tuple(vec)
        assert list(acc.iterate_fields(vec)) == [1, Name("x")]
        assert acc.get_field(vec, "a") == 1
        assert acc.get_field(vec, "zzz") is None
        assert acc.get_field(Array(), "a") is None
        assert list(acc.iterate_fields(Name("x"))) == []

    def test_names(self, acc):
        assert acc.is_name(Name("In"))
        assert acc.name_value(Name("In")) == "In"
        assert acc.name_value("In") is None

    def test_identity(self, acc):
        assert acc.identity_of(Chunk(key="abc")) == "abc"


class TestParseResource:
    def test_sample_document(self):
        resource = parse_resource(SAMPLE_DOCUMENT)

        assert [c.key for c in resource.chunks] == ["file", "graph", "start", "end"]
        assert resource.entry.key == "file"
        start = resource.chunk("start")
        assert start.type_name == "CQuestStartBlock"
        assert start.properties["comment"] == "plain scalars pass through"

    def test_forward_pointers_resolved(self):
        resource = parse_resource(SAMPLE_DOCUMENT)
        graph = resource.chunk("graph")
        blocks = graph.properties["graphBlocks"].items
        assert blocks[0].target is resource.chunk("start")

    def test_dangling_pointer_becomes_null(self):
        resource = parse_resource(SAMPLE_DOCUMENT)
        blocks = resource.chunk("graph").properties["graphBlocks"].items
        assert blocks[1] == Pointer(None)

    def test_entry_defaults_to_first_chunk(self):
        doc = {"chunks": [{"id": "x"}, {"id": "y"}]}
        assert parse_resource(doc).entry.key == "x"

    def test_empty_chunks(self):
        resource = parse_resource({"chunks": []})
        assert resource.entry is None
        assert resource.chunks == ()

    def test_unknown_chunk_raises_key_error(self):
        with pytest.raises(KeyError):
            parse_resource(SAMPLE_DOCUMENT).chunk("nope")

    def test_builds_graph(self):
        resource = parse_resource(SAMPLE_DOCUMENT)
        graph, builder = build_graph(resource.entry, InMemoryAccessor())
        assert [n.key for n in graph] == ["start", "end"]
        assert builder.connections[0].source_socket == "Out"
        assert builder.connections[0].destination_socket == "In"

    @pytest.mark.parametrize(
        "doc, fragment",
        [
            ([], "must be a JSON object"),
            ({}, "'chunks' list"),
            ({"chunks": ["x"]}, "'id'"),
            ({"chunks": [{"id": "a"}, {"id": "a"}]}, "Duplicate chunk id"),
            ({"chunks": [{"id": "a", "properties": []}]}, "'properties' must be an object"),
            ({"chunks": [{"id": "a", "properties": {"p": {"bogus": 1}}}]}, "exactly one of"),
            ({"chunks": [{"id": "a", "properties": {"p": {"ptr": "a", "name": "x"}}}]}, "exactly one of"),
            ({"chunks": [{"id": "a", "properties": {"p": {"array": 3}}}]}, "'array' payload"),
            ({"chunks": [{"id": "a", "properties": {"p": {"vector": []}}}]}, "'vector' payload"),
            ({"chunks": [{"id": "a", "properties": {"p": {"name": 3}}}]}, "'name' payload"),
            ({"entry": "zzz", "chunks": [{"id": "a"}]}, "Entry chunk 'zzz' not found"),
        ],
    )
    def test_malformed_documents(self, doc, fragment):
        with pytest.raises(ResourceFormatError, match=fragment):
            parse_resource(doc)

    def test_error_location(self):
        doc = {"chunks": [{"id": "a", "properties": {"p": {"array": [{"name": 1}]}}}]}
        with pytest.raises(ResourceFormatError) as exc_info:
            parse_resource(doc)
        assert exc_info.value.location == "chunks[0].p[0]"


class TestLoadResource:
    def test_load_from_file(self, tmp_path):
        path = tmp_path / "quest.json"
        path.write_text(json.dumps(SAMPLE_DOCUMENT))
        resource = load_resource(path)
        assert resource.entry.key == "file"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ResourceFormatError, match="Invalid JSON"):
            load_resource(path)
