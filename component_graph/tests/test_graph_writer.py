from pathlib import Path

import pytest
from neo4j.exceptions import ServiceUnavailable

from component_graph.context import RunContext
from component_graph.exceptions import GraphStateError
from component_graph.graph.graph_writer import GraphWriter, WriterState
from component_graph.graph.json_graph_client import JsonGraphClient
from component_graph.pipeline import GraphBuilder
from component_graph.types import (
    Component,
    ComponentType,
    ComponentUsage,
    DeclarationKind,
    FileAnalysis,
    HookUsage,
    ImportRecord,
    SourceFile,
)


def source_file(path: str) -> SourceFile:
    return SourceFile(path=path, absolute_path=f"/project/{path}", name=Path(path).name,
                      extension=Path(path).suffix, size=10, last_modified="2024-01-01T00:00:00Z")


def component(name: str, path: str, hooks=None) -> Component:
    return Component(id=f"{name}:{path}", name=name, file=path,
                     component_type=ComponentType.COMPONENT, kind=DeclarationKind.FUNCTION,
                     hooks=list(hooks or []))


@pytest.fixture
def context() -> RunContext:
    ctx = RunContext(project_root=Path("/project"), source_root=Path("/project/src"))
    ctx.add_analysis(FileAnalysis(
        file=source_file("src/Foo.js"),
        components=[component("Foo", "src/Foo.js", hooks=["useState"])],
        imports=[
            ImportRecord(name="React", imported="default", source="react", resolved_path="react"),
            ImportRecord(name="Bar", imported="default", source="./Bar", resolved_path="src/Bar.js"),
            ImportRecord(name="Gone", imported="Gone", source="./Gone", resolved_path="src/Gone"),
        ],
        component_usages=[ComponentUsage("Bar", "src/Foo.js"), ComponentUsage("Bar", "src/Foo.js"),
                          ComponentUsage("Foo", "src/Foo.js")],
        hook_usages=[HookUsage("useState", "src/Foo.js"), HookUsage("useRef", "src/Foo.js")],
    ))
    ctx.add_analysis(FileAnalysis(
        file=source_file("src/Bar.js"),
        components=[component("Bar", "src/Bar.js")],
    ))
    return ctx


def run_all(writer: GraphWriter):
    writer.prepare()
    writer.load_nodes()
    writer.load_relationships()
    writer.finish()


class TestGraphWriter:
    """Test the two-pass persistence of a run."""

    def test_states_must_run_in_order(self, json_client, context):
        writer = GraphWriter(json_client, context)

        with pytest.raises(GraphStateError):
            writer.load_nodes()
        with pytest.raises(GraphStateError):
            writer.load_relationships()

        writer.prepare()
        with pytest.raises(GraphStateError):
            writer.prepare()
        with pytest.raises(GraphStateError):
            writer.finish()

    def test_full_run(self, json_client, context):
        writer = GraphWriter(json_client, context)

        run_all(writer)

        assert writer.state is WriterState.DONE
        assert {n.id for n in json_client.get_nodes("File")} == {"src/Foo.js", "src/Bar.js"}
        assert {n.id for n in json_client.get_nodes("Component")} == {"Foo:src/Foo.js", "Bar:src/Bar.js"}
        assert {n.id for n in json_client.get_nodes("Hook")} == {"useState", "useRef"}
        assert len(json_client.get_edges("CONTAINS")) == 2
        assert context.summary()["relationships"] == 3

    def test_imports_only_between_stored_files(self, json_client, context):
        run_all(GraphWriter(json_client, context))

        imports = json_client.get_edges("IMPORTS")

        assert [(e.source_id, e.target_id, e.properties) for e in imports] == [
            ("src/Foo.js", "src/Bar.js", {"name": "Bar", "type": "default"}),
        ]

    def test_renders_deduplicated_and_never_self_referencing(self, json_client, context):
        run_all(GraphWriter(json_client, context))

        renders = json_client.get_edges("RENDERS")

        assert [(e.source_id, e.target_id) for e in renders] == [("Foo:src/Foo.js", "Bar:src/Bar.js")]

    def test_uses_hook_requires_component_reference(self, json_client, context):
        run_all(GraphWriter(json_client, context))

        uses = json_client.get_edges("USES_HOOK")

        assert [(e.source_id, e.target_id) for e in uses] == [("Foo:src/Foo.js", "useState")]

    def test_failed_writes_are_counted_and_skipped(self, tmp_path, context):
        class FlakyClient(JsonGraphClient):
            def upsert_component_node(self, properties):
                if properties["name"] == "Bar":
                    raise RuntimeError("write refused")
                return super().upsert_component_node(properties)

        client = FlakyClient(str(tmp_path / "flaky.json"))
        run_all(GraphWriter(client, context))

        assert context.counters.failed_writes == 1
        assert "Bar:src/Bar.js" not in context.components
        assert client.get_edges("RENDERS") == []
        # the file itself was still stored, so the import survives
        assert len(client.get_edges("IMPORTS")) == 1

    def test_prepare_clears_previous_graph(self, json_client, context):
        json_client.upsert_hook_node("useStale")

        run_all(GraphWriter(json_client, context))

        assert "useStale" not in {n.id for n in json_client.get_nodes("Hook")}


class DisconnectedClient(JsonGraphClient):
    """Storage whose connection drops once node loading starts."""

    def upsert_file_node(self, properties):
        raise ServiceUnavailable("Connection to database lost")


def test_lost_connection_aborts_the_run(tmp_path, context):
    client = DisconnectedClient(str(tmp_path / "graph.json"))
    writer = GraphWriter(client, context)
    writer.prepare()

    with pytest.raises(ServiceUnavailable):
        writer.load_nodes()

    assert context.counters.failed_writes == 0
    assert writer.state is WriterState.SCHEMA_READY


def test_lost_connection_aborts_a_build(tmp_path, sample_project):
    client = DisconnectedClient(str(tmp_path / "graph.json"))

    with pytest.raises(ServiceUnavailable):
        GraphBuilder(client, project_root=str(sample_project), source_dir="src").build()
