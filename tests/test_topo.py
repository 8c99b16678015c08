import pytest

from yay.topo import (
    CircularDependencyError,
    Graph,
    NodeInfo,
    SelfReferentialError,
)


def _chain():
    graph = Graph()
    graph.depend_on("a", "b")
    graph.depend_on("b", "c")
    return graph


def test_depend_on_records_edges():
    graph = Graph()
    graph.depend_on("app", "lib")
    assert len(graph) == 2
    assert graph.exists("app") and graph.exists("lib")
    assert graph.depends_on("app", "lib")
    assert graph.has_dependent("lib", "app")
    assert not graph.depends_on("lib", "app")
    assert graph.immediate_dependencies("app") == {"lib"}


def test_self_reference_is_rejected():
    graph = Graph()
    with pytest.raises(SelfReferentialError):
        graph.depend_on("a", "a")
    assert len(graph) == 0


def test_cycle_is_rejected():
    graph = Graph()
    graph.depend_on("app", "lib")
    with pytest.raises(CircularDependencyError):
        graph.depend_on("lib", "app")


def test_transitive_sets():
    graph = _chain()
    assert graph.dependencies("a") == {"b", "c"}
    assert graph.dependents("c") == {"a", "b"}
    assert graph.dependencies("missing") == set()


def test_layers_go_from_leaves_up():
    graph = _chain()
    for node, value in (("a", 1), ("b", 2), ("c", 3)):
        graph.set_node_info(node, NodeInfo(value=value))
    layers = graph.topo_sorted_layer_map(None)
    assert layers == [{"c": 3}, {"b": 2}, {"a": 1}]
    assert len(graph) == 3
    assert graph.dependencies("a") == {"b", "c"}


def test_layers_empty_when_check_fails():
    graph = _chain()

    def check(node, value):
        if node == "b":
            raise ValueError(node)

    assert graph.topo_sorted_layer_map(check) == []


def test_prune_removes_dependents_and_unused_dependencies():
    graph = Graph()
    graph.depend_on("app", "lib")
    graph.add_node("other")
    pruned = graph.prune("lib")
    assert sorted(pruned) == ["app", "lib"]
    assert not graph.exists("app")
    assert graph.exists("other")
    assert len(graph) == 1


def test_prune_leaf_drops_unused_dependency():
    graph = Graph()
    graph.depend_on("app", "lib")
    assert graph.prune("app") == ["app", "lib"]
    assert len(graph) == 0


def test_provides_lookup():
    graph = Graph()
    graph.provides("sh", {"name": "sh"}, "bash")
    assert graph.provides_exists("sh")
    assert graph.get_provider_node("sh").provider == "bash"
    assert graph.get_provider_node("zsh") is None


def test_for_each_visits_every_node_and_propagates_errors():
    graph = _chain()
    graph.set_node_info("a", NodeInfo(value="x"))
    seen = {}
    graph.for_each(lambda node, value: seen.__setitem__(node, value))
    assert seen == {"a": "x", "b": None, "c": None}

    def fail(node, value):
        raise RuntimeError("stop")

    with pytest.raises(RuntimeError):
        graph.for_each(fail)


def test_dot_output():
    graph = Graph()
    graph.depend_on("a", "b")
    graph.set_node_info("a", NodeInfo(color="red", background="blue"))
    rendered = str(graph)
    assert rendered.startswith("digraph {\n")
    assert rendered.endswith("}")
    assert '\t"a" -> "b";\n' in rendered
    assert '\t"a"[color = red, style = filled, fillcolor = blue];\n' in rendered