import json

import pytest

from component_graph.exceptions import GraphWriteError
from component_graph.graph.json_graph_client import JsonGraphClient


FILE_PROPS = {"path": "src/Foo.js", "name": "Foo.js", "extension": ".js", "size": 12,
              "lastModified": "2024-01-01T00:00:00Z"}
COMPONENT_PROPS = {"id": "Foo:src/Foo.js", "name": "Foo", "file": "src/Foo.js",
                   "componentType": "component", "props": ["a"], "hooks": [], "loc": 3,
                   "complexity": 1, "lastModified": "2024-01-01T00:00:00Z"}


class TestJsonGraphClient:
    """Test JSON graph storage."""

    def test_upserts_merge_by_identity(self, json_client):
        json_client.upsert_file_node(FILE_PROPS)
        json_client.upsert_file_node(dict(FILE_PROPS, size=99))

        files = json_client.get_nodes("File")

        assert len(files) == 1
        assert files[0].properties["size"] == 99

    def test_relationships_merge(self, json_client):
        json_client.upsert_file_node(FILE_PROPS)
        json_client.upsert_component_node(COMPONENT_PROPS)

        json_client.create_contains_relationship("src/Foo.js", "Foo:src/Foo.js")
        json_client.create_contains_relationship("src/Foo.js", "Foo:src/Foo.js")

        assert len(json_client.get_edges("CONTAINS")) == 1

    def test_imports_are_distinct_per_binding(self, json_client):
        json_client.upsert_file_node(FILE_PROPS)
        json_client.upsert_file_node(dict(FILE_PROPS, path="src/util.js", name="util.js"))

        json_client.create_imports_relationship("src/Foo.js", "src/util.js", "a", "a")
        json_client.create_imports_relationship("src/Foo.js", "src/util.js", "b", "b")
        json_client.create_imports_relationship("src/Foo.js", "src/util.js", "a", "a")

        assert [e.properties["name"] for e in json_client.get_edges("IMPORTS")] == ["a", "b"]

    def test_relationship_requires_both_endpoints(self, json_client):
        json_client.upsert_component_node(COMPONENT_PROPS)

        with pytest.raises(GraphWriteError):
            json_client.create_uses_hook_relationship("Foo:src/Foo.js", "useState")

    def test_labels_keep_identities_apart(self, json_client):
        json_client.upsert_hook_node("useState")
        json_client.upsert_file_node(dict(FILE_PROPS, path="useState"))

        assert len(json_client.get_nodes()) == 2

    def test_flush_persists_and_reloads(self, tmp_path):
        path = tmp_path / "graph.json"
        client = JsonGraphClient(str(path))
        client.upsert_hook_node("useState")
        client.upsert_component_node(COMPONENT_PROPS)
        client.create_uses_hook_relationship("Foo:src/Foo.js", "useState")
        client.flush()

        saved = json.loads(path.read_text(encoding="utf-8"))
        reloaded = JsonGraphClient(str(path))
        reloaded.create_uses_hook_relationship("Foo:src/Foo.js", "useState")

        assert saved["metadata"]["created_at"]
        assert "Hook:useState" in saved["nodes"]
        assert len(reloaded.get_edges("USES_HOOK")) == 1

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text("{not json", encoding="utf-8")

        client = JsonGraphClient(str(path))

        assert client.get_nodes() == []

    def test_clear_and_stats(self, json_client):
        json_client.upsert_file_node(FILE_PROPS)
        json_client.upsert_component_node(COMPONENT_PROPS)
        json_client.upsert_hook_node("useState")
        json_client.create_contains_relationship("src/Foo.js", "Foo:src/Foo.js")

        stats = json_client.get_database_stats()
        json_client.clear_database()

        assert stats == {"nodes": {"File": 1, "Component": 1, "Hook": 1},
                         "relationships": {"CONTAINS": 1}}
        assert json_client.get_database_stats() == {"nodes": {}, "relationships": {}}

    def test_schema_operations_are_noops(self, json_client):
        assert json_client.ping()
        assert json_client.ensure_constraints() == 0
        assert json_client.ensure_indexes() == 0
