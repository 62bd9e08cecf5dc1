from typing import List, Dict, Any, Optional
import datetime
import json
from collections import Counter
from pathlib import Path

from ..config import settings
from ..exceptions import GraphWriteError
from ..types import GraphNode, GraphEdge
from ..utils.logger import get_logger


class JsonGraphClient:
    """JSON-based graph storage client.

    Mirrors the write interface of ``Neo4jClient`` with the same MERGE
    semantics: nodes are keyed by label and identity property, edges by both
    endpoints, type and the properties that are part of the edge pattern.
    Writes are buffered in memory until ``flush`` or ``close``.
    """

    def __init__(self, storage_path: Optional[str] = None):
        self.logger = get_logger("json_graph_client")
        self.storage_path = Path(storage_path or settings.json_graph_path)
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        self.data = self._initialize_data()

        # Load existing data if file exists
        self._load_data()

    def _load_data(self):
        """Load data from JSON file."""
        if not self.storage_path.exists():
            return
        try:
            with open(self.storage_path, 'r', encoding='utf-8') as f:
                self.data = json.load(f)
            self.logger.info(f"Loaded graph data from {self.storage_path}")
        except (OSError, ValueError, KeyError, TypeError) as e:
            self.logger.error(f"Error loading graph data: {e}")
            self.data = self._initialize_data()

    def _initialize_data(self) -> Dict[str, Any]:
        """Initialize empty data structure."""
        return {
            "nodes": {},
            "edges": [],
            "metadata": {
                "version": "1.0",
                "created_at": None,
                "updated_at": None
            }
        }

    def _save_data(self):
        """Save data to JSON file."""
        now = datetime.datetime.now().isoformat()
        self.data["metadata"]["updated_at"] = now
        if not self.data["metadata"]["created_at"]:
            self.data["metadata"]["created_at"] = now

        with open(self.storage_path, 'w', encoding='utf-8') as f:
            json.dump(self.data, f, indent=2, ensure_ascii=False)
        self.logger.debug(f"Saved graph data to {self.storage_path}")

    @staticmethod
    def _node_key(label: str, identity: str) -> str:
        return f"{label}:{identity}"

    @staticmethod
    def _edge_key(source_key: str, target_key: str, relationship_type: str,
                  properties: Dict[str, Any]):
        return (source_key, target_key, relationship_type, json.dumps(properties, sort_keys=True))

    @property
    def data(self) -> Dict[str, Any]:
        return self._data

    @data.setter
    def data(self, value: Dict[str, Any]):
        self._data = value
        self._edge_keys = {
            self._edge_key(edge["source"], edge["target"], edge["relationship_type"], edge["properties"])
            for edge in value["edges"]
        }

    def _merge_node(self, label: str, identity: str, properties: Dict[str, Any]) -> GraphNode:
        key = self._node_key(label, identity)
        node = self.data["nodes"].setdefault(key, {"id": identity, "type": label, "properties": {}})
        node["properties"].update(properties)
        return GraphNode(id=identity, type=label, properties=dict(node["properties"]))

    def _merge_relationship(self, source_label: str, source_id: str, target_label: str,
                            target_id: str, relationship_type: str,
                            properties: Optional[Dict[str, Any]] = None) -> GraphEdge:
        if properties is None:
            properties = {}

        source_key = self._node_key(source_label, source_id)
        target_key = self._node_key(target_label, target_id)
        if source_key not in self.data["nodes"] or target_key not in self.data["nodes"]:
            raise GraphWriteError(
                f"Failed to create relationship: {source_id} -[{relationship_type}]-> {target_id}"
            )

        edge_key = self._edge_key(source_key, target_key, relationship_type, properties)
        if edge_key not in self._edge_keys:
            self._edge_keys.add(edge_key)
            self.data["edges"].append({
                "source": source_key,
                "target": target_key,
                "relationship_type": relationship_type,
                "properties": dict(properties),
            })

        return GraphEdge(
            source_id=source_id,
            target_id=target_id,
            relationship_type=relationship_type,
            properties=dict(properties),
        )

    def ping(self) -> bool:
        return True

    def ensure_constraints(self) -> int:
        """Uniqueness is enforced by the node keys."""
        self.logger.debug("Constraints are implicit in JSON storage")
        return 0

    def ensure_indexes(self) -> int:
        self.logger.debug("Indexes are not used by JSON storage")
        return 0

    def upsert_file_node(self, properties: Dict[str, Any]) -> GraphNode:
        """Create or update a file node."""
        return self._merge_node("File", properties["path"], properties)

    def upsert_component_node(self, properties: Dict[str, Any]) -> GraphNode:
        """Create or update a component node."""
        return self._merge_node("Component", properties["id"], properties)

    def upsert_hook_node(self, name: str) -> GraphNode:
        """Create a hook node if it doesn't exist."""
        return self._merge_node("Hook", name, {"name": name})

    def create_contains_relationship(self, file_path: str, component_id: str) -> GraphEdge:
        return self._merge_relationship("File", file_path, "Component", component_id, "CONTAINS")

    def create_imports_relationship(self, from_path: str, to_path: str,
                                    name: str, import_type: str) -> GraphEdge:
        return self._merge_relationship(
            "File", from_path, "File", to_path, "IMPORTS", {"name": name, "type": import_type}
        )

    def create_renders_relationship(self, from_id: str, to_id: str) -> GraphEdge:
        return self._merge_relationship("Component", from_id, "Component", to_id, "RENDERS")

    def create_uses_hook_relationship(self, component_id: str, hook_name: str) -> GraphEdge:
        return self._merge_relationship("Component", component_id, "Hook", hook_name, "USES_HOOK")

    def get_nodes(self, label: Optional[str] = None) -> List[GraphNode]:
        """All stored nodes, optionally restricted to one label."""
        return [
            GraphNode(id=node["id"], type=node["type"], properties=dict(node["properties"]))
            for node in self.data["nodes"].values()
            if label is None or node["type"] == label
        ]

    def get_edges(self, relationship_type: Optional[str] = None) -> List[GraphEdge]:
        """All stored edges, optionally restricted to one type."""
        edges = []
        for edge in self.data["edges"]:
            if relationship_type is not None and edge["relationship_type"] != relationship_type:
                continue
            edges.append(GraphEdge(
                source_id=edge["source"].split(":", 1)[1],
                target_id=edge["target"].split(":", 1)[1],
                relationship_type=edge["relationship_type"],
                properties=dict(edge["properties"]),
            ))
        return edges

    def clear_database(self):
        """Clear all data from the database."""
        self.data = self._initialize_data()
        self.logger.info("Cleared all data from JSON graph storage")

    def flush(self):
        self._save_data()

    def close(self):
        self.flush()

    def get_database_stats(self) -> Dict[str, Any]:
        """Get database statistics."""
        return {
            "nodes": dict(Counter(node["type"] for node in self.data["nodes"].values())),
            "relationships": dict(Counter(edge["relationship_type"] for edge in self.data["edges"])),
        }
