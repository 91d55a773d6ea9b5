"""Tests for the node registry and descendant resolution."""

from catalog_export.catalog.registry import NodeRegistry, descendants_of

from conftest import community


def ids(nodes):
    return [n.id for n in nodes]


class TestDescendants:
    def test_depth_first_pre_order(self):
        nodes = [
            community("root", "Root"),
            community("a", "A", parent="root"),
            community("b", "B", parent="root"),
            community("a1", "A1", parent="a"),
            community("a2", "A2", parent="a"),
            community("b1", "B1", parent="b"),
        ]

        assert ids(descendants_of("root", nodes)) == ["a", "a1", "a2", "b", "b1"]

    def test_root_is_never_included(self):
        nodes = [community("root", "Root"), community("a", "A", parent="root")]

        assert "root" not in ids(descendants_of("root", nodes))

    def test_no_children(self):
        assert descendants_of("x", [community("x", "X"), community("y", "Y")]) == []

    def test_unknown_root(self):
        assert descendants_of("missing", [community("x", "X")]) == []

    def test_duplicate_ids_appear_once(self):
        nodes = [
            community("root", "Root"),
            community("a", "A", parent="root"),
            community("a", "A again", parent="root"),
            community("a1", "A1", parent="a"),
        ]

        result = descendants_of("root", nodes)

        assert ids(result) == ["a", "a1"]
        assert result[0].name == "A"

    def test_cycle_terminates(self):
        nodes = [
            community("root", "Root", parent="b"),
            community("a", "A", parent="root"),
            community("b", "B", parent="a"),
        ]

        assert ids(descendants_of("root", nodes)) == ["a", "b"]

    def test_dangling_parent_is_ignored(self):
        nodes = [
            community("root", "Root"),
            community("a", "A", parent="root"),
            community("orphan", "Orphan", parent="gone"),
        ]

        assert ids(descendants_of("root", nodes)) == ["a"]

    def test_ancestor_chain_ends_at_root(self):
        nodes = [
            community("root", "Root"),
            community("a", "A", parent="root"),
            community("a1", "A1", parent="a"),
            community("a1x", "A1X", parent="a1"),
        ]
        registry = NodeRegistry(nodes)

        for node in registry.descendants_of("root"):
            assert registry.ancestors_of(node.id)[-1].id == "root"


class TestNodeRegistry:
    def test_register_reports_duplicates(self):
        registry = NodeRegistry()

        assert registry.register(community("a", "A")) is True
        assert registry.register(community("a", "B")) is False
        assert len(registry) == 1
        assert registry.get("a").name == "A"

    def test_roots_include_dangling_parents(self):
        registry = NodeRegistry([
            community("r", "R"),
            community("c", "C", parent="r"),
            community("o", "O", parent="gone"),
        ])

        assert ids(registry.roots()) == ["r", "o"]

    def test_children_keep_listing_order(self):
        registry = NodeRegistry([
            community("r", "R"),
            community("z", "Z", parent="r"),
            community("a", "A", parent="r"),
        ])

        assert ids(registry.children_of("r")) == ["z", "a"]

    def test_ancestors_stop_at_cycle(self):
        registry = NodeRegistry([
            community("a", "A", parent="b"),
            community("b", "B", parent="a"),
        ])

        assert ids(registry.ancestors_of("a")) == ["b"]

    def test_find_by_name(self):
        registry = NodeRegistry([community("a", "A"), community("b", "B")])

        assert registry.find_by_name("B").id == "b"
        assert registry.find_by_name("C") is None
        assert "a" in registry
