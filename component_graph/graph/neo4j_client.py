from typing import List, Dict, Any, Optional
from neo4j import GraphDatabase
from neo4j.exceptions import Neo4jError

from ..config import settings
from ..exceptions import GraphWriteError
from ..types import GraphNode, GraphEdge
from ..utils.logger import get_logger


CONSTRAINTS = [
    "CREATE CONSTRAINT component_unique IF NOT EXISTS FOR (c:Component) REQUIRE c.id IS UNIQUE",
    "CREATE CONSTRAINT file_unique IF NOT EXISTS FOR (f:File) REQUIRE f.path IS UNIQUE",
]

INDEXES = [
    "CREATE INDEX component_name IF NOT EXISTS FOR (c:Component) ON (c.name)",
    "CREATE INDEX component_type IF NOT EXISTS FOR (c:Component) ON (c.componentType)",
    "CREATE INDEX component_complexity IF NOT EXISTS FOR (c:Component) ON (c.complexity)",
    "CREATE INDEX file_extension IF NOT EXISTS FOR (f:File) ON (f.extension)",
]


class Neo4jClient:
    """Neo4j client for component graph operations."""

    def __init__(self, uri: Optional[str] = None, username: Optional[str] = None,
                 password: Optional[str] = None, database: Optional[str] = None,
                 connection_timeout: Optional[float] = None):
        self.logger = get_logger("neo4j_client")
        self.uri = uri or settings.neo4j_uri
        self.username = username or settings.neo4j_username
        self.password = password or settings.neo4j_password
        self.database = database or settings.neo4j_database
        self.connection_timeout = connection_timeout or settings.neo4j_connection_timeout
        self.driver = None
        self._connect()

    def _connect(self):
        """Connect to Neo4j server and verify the connection."""
        try:
            self.driver = GraphDatabase.driver(
                self.uri,
                auth=(self.username, self.password),
                connection_timeout=self.connection_timeout,
            )
            self.driver.verify_connectivity()
            self.logger.info(f"Connected to Neo4j at {self.uri}")
        except Exception as e:
            self.logger.error(f"Failed to connect to Neo4j: {e}")
            if self.driver:
                self.driver.close()
                self.driver = None
            raise

    def _session(self):
        return self.driver.session(database=self.database)

    def _single(self, query: str, params: Optional[Dict[str, Any]] = None):
        with self._session() as session:
            return session.run(query, params or {}).single()

    def close(self):
        """Close connection to Neo4j."""
        if self.driver:
            self.driver.close()
            self.driver = None
            self.logger.info("Disconnected from Neo4j")

    def ping(self) -> bool:
        record = self._single("RETURN 1 AS ok")
        return bool(record and record["ok"] == 1)

    def _run_schema_statements(self, statements: List[str], kind: str) -> int:
        applied = 0
        with self._session() as session:
            for statement in statements:
                try:
                    session.run(statement).consume()
                    applied += 1
                    self.logger.debug(f"{kind} created/verified: {statement}")
                except Neo4jError as e:
                    if "already exists" in str(e).lower():
                        applied += 1
                        continue
                    self.logger.warning(f"{kind} issue: {e}")
                except Exception as e:
                    self.logger.warning(f"{kind} issue: {e}")
        return applied

    def ensure_constraints(self) -> int:
        """Ensure uniqueness constraints exist."""
        return self._run_schema_statements(CONSTRAINTS, "Constraint")

    def ensure_indexes(self) -> int:
        """Ensure lookup indexes exist."""
        return self._run_schema_statements(INDEXES, "Index")

    def upsert_file_node(self, properties: Dict[str, Any]) -> GraphNode:
        """Create or update a file node."""
        query = """
        MERGE (f:File {path: $path})
        SET f.name = $name,
            f.extension = $extension,
            f.size = $size,
            f.lastModified = $lastModified
        RETURN f
        """
        record = self._single(query, properties)
        if record:
            return GraphNode(id=properties["path"], type="File", properties=dict(record["f"]))

        raise GraphWriteError(f"Failed to create file node: {properties['path']}")

    def upsert_component_node(self, properties: Dict[str, Any]) -> GraphNode:
        """Create or update a component node."""
        query = """
        MERGE (c:Component {id: $id})
        SET c.name = $name,
            c.file = $file,
            c.componentType = $componentType,
            c.props = $props,
            c.hooks = $hooks,
            c.loc = $loc,
            c.complexity = $complexity,
            c.lastModified = $lastModified
        RETURN c
        """
        record = self._single(query, properties)
        if record:
            return GraphNode(id=properties["id"], type="Component", properties=dict(record["c"]))

        raise GraphWriteError(f"Failed to create component node: {properties['id']}")

    def upsert_hook_node(self, name: str) -> GraphNode:
        """Create a hook node if it doesn't exist."""
        record = self._single("MERGE (h:Hook {name: $name}) RETURN h", {"name": name})
        if record:
            return GraphNode(id=name, type="Hook", properties=dict(record["h"]))

        raise GraphWriteError(f"Failed to create hook node: {name}")

    def _merge_relationship(self, match: str, relationship: str, description: str, **params) -> GraphEdge:
        query = f"""
        {match}
        MERGE (source)-[r:{relationship}]->(target)
        RETURN r
        """
        record = self._single(query, params)
        if record:
            return GraphEdge(
                source_id=params["source_id"],
                target_id=params["target_id"],
                relationship_type=record["r"].type,
                properties=dict(record["r"]),
            )

        raise GraphWriteError(f"Failed to create relationship: {description}")

    def create_contains_relationship(self, file_path: str, component_id: str) -> GraphEdge:
        """Link a file to a component it declares."""
        return self._merge_relationship(
            "MATCH (source:File {path: $source_id}) MATCH (target:Component {id: $target_id})",
            "CONTAINS",
            f"{file_path} -[CONTAINS]-> {component_id}",
            source_id=file_path,
            target_id=component_id,
        )

    def create_imports_relationship(self, from_path: str, to_path: str,
                                    name: str, import_type: str) -> GraphEdge:
        """Link two files by an imported binding."""
        return self._merge_relationship(
            "MATCH (source:File {path: $source_id}) MATCH (target:File {path: $target_id})",
            "IMPORTS {name: $name, type: $import_type}",
            f"{from_path} -[IMPORTS {name}]-> {to_path}",
            source_id=from_path,
            target_id=to_path,
            name=name,
            import_type=import_type,
        )

    def create_renders_relationship(self, from_id: str, to_id: str) -> GraphEdge:
        """Link a component to a component it renders."""
        return self._merge_relationship(
            "MATCH (source:Component {id: $source_id}) MATCH (target:Component {id: $target_id})",
            "RENDERS",
            f"{from_id} -[RENDERS]-> {to_id}",
            source_id=from_id,
            target_id=to_id,
        )

    def create_uses_hook_relationship(self, component_id: str, hook_name: str) -> GraphEdge:
        """Link a component to a hook it uses."""
        return self._merge_relationship(
            "MATCH (source:Component {id: $source_id}) MATCH (target:Hook {name: $target_id})",
            "USES_HOOK",
            f"{component_id} -[USES_HOOK]-> {hook_name}",
            source_id=component_id,
            target_id=hook_name,
        )

    def clear_database(self):
        """Clear all data from the database."""
        with self._session() as session:
            session.run("MATCH (n) DETACH DELETE n").consume()
        self.logger.info("Cleared all data from Neo4j database")

    def flush(self):
        """Writes are committed per statement; nothing is buffered."""

    def get_database_stats(self) -> Dict[str, Any]:
        """Get database statistics."""
        stats = {}

        # Count nodes by type
        node_counts = """
        MATCH (n)
        RETURN labels(n)[0] as label, count(n) as count
        """

        with self._session() as session:
            result = session.run(node_counts)
            stats["nodes"] = {record["label"]: record["count"] for record in result}

        # Count relationships by type
        rel_counts = """
        MATCH ()-[r]->()
        RETURN type(r) as type, count(r) as count
        """

        with self._session() as session:
            result = session.run(rel_counts)
            stats["relationships"] = {record["type"]: record["count"] for record in result}

        return stats
