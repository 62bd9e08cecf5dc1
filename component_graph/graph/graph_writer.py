"""Two-pass persistence of the analyzed model into a graph client.

The writer walks a fixed sequence of states::

    uninitialized -> schema-ready -> nodes-loaded -> relationships-loaded -> done

Every node is written before any edge because edge statements MATCH their
endpoints. Individual write failures are logged and skipped; the rebuild is
full-refresh so the next run reproduces anything that was dropped. Losing
the database connection aborts the run.
"""

from enum import Enum
from typing import Any, Callable

from neo4j.exceptions import AuthError, ServiceUnavailable, SessionExpired

from ..context import RunContext
from ..exceptions import GraphStateError
from ..utils.logger import get_logger


# A lost or refused connection aborts the run instead of dropping writes
CONNECTION_ERRORS = (ServiceUnavailable, SessionExpired, AuthError)


class WriterState(Enum):
    UNINITIALIZED = "uninitialized"
    SCHEMA_READY = "schema-ready"
    NODES_LOADED = "nodes-loaded"
    RELATIONSHIPS_LOADED = "relationships-loaded"
    DONE = "done"


class GraphWriter:
    """Persists a ``RunContext`` through a Neo4j or JSON graph client."""

    def __init__(self, client: Any, context: RunContext):
        self.client = client
        self.context = context
        self.state = WriterState.UNINITIALIZED
        self.logger = get_logger("graph_writer")

    def _require(self, expected: WriterState, step: str):
        if self.state is not expected:
            raise GraphStateError(
                f"Cannot {step} in state '{self.state.value}', expected '{expected.value}'"
            )

    def _attempt(self, description: str, write: Callable[[], Any]) -> bool:
        try:
            write()
            return True
        except CONNECTION_ERRORS:
            raise
        except Exception as e:
            self.context.counters.failed_writes += 1
            self.logger.warning(f"Could not create {description}: {e}")
            return False

    def prepare(self):
        """Clear the graph and ensure constraints and indexes."""
        self._require(WriterState.UNINITIALIZED, "prepare the schema")

        self.logger.info("Clearing existing database...")
        self.client.clear_database()

        self.logger.info("Setting up database constraints and indexes...")
        self.client.ensure_constraints()
        self.client.ensure_indexes()

        self.state = WriterState.SCHEMA_READY

    def load_nodes(self):
        """Upsert File nodes, Component nodes and CONTAINS edges."""
        self._require(WriterState.SCHEMA_READY, "load nodes")
        self.logger.info("Creating file nodes...")

        for analysis in self.context.analyses:
            source_file = analysis.file
            if not self._attempt(f"file {source_file.path}",
                                 lambda: self.client.upsert_file_node(source_file.to_dict())):
                continue
            self.context.files[source_file.path] = source_file

            for component in analysis.components:
                def write_component():
                    self.client.upsert_component_node(component.to_dict())
                    self.context.components[component.id] = component
                    self.client.create_contains_relationship(component.file, component.id)

                self._attempt(f"component {component.name}", write_component)

        self.logger.info(
            f"Created {len(self.context.files)} files and {len(self.context.components)} components"
        )
        self.state = WriterState.NODES_LOADED

    def load_relationships(self):
        """Upsert IMPORTS, RENDERS and USES_HOOK edges."""
        self._require(WriterState.NODES_LOADED, "load relationships")
        self.logger.info("Creating relationships...")

        by_name = self.context.components_by_name()
        for analysis in self.context.analyses:
            if analysis.file.path not in self.context.files:
                continue
            self._load_imports(analysis)
            self._load_renders(analysis, by_name)
            self._load_hooks(analysis)

        self.logger.info(f"Created {len(self.context.relationships)} relationships")
        self.state = WriterState.RELATIONSHIPS_LOADED

    def _record(self, fact, description: str, write: Callable[[], Any]):
        if fact in self.context.relationships:
            return
        if self._attempt(description, write):
            self.context.relationships.add(fact)

    def _load_imports(self, analysis):
        from_path = analysis.file.path
        for imp in analysis.imports:
            # External packages and paths outside the scanned tree
            if imp.resolved_path not in self.context.files:
                continue
            self._record(
                ("IMPORTS", from_path, imp.resolved_path, imp.name, imp.imported),
                f"import {imp.name} from {imp.source} in {from_path}",
                lambda imp=imp: self.client.create_imports_relationship(
                    from_path, imp.resolved_path, imp.name, imp.imported
                ),
            )

    def _load_renders(self, analysis, by_name):
        sources = [c for c in analysis.components if c.id in self.context.components]
        for usage in analysis.component_usages:
            for target in by_name.get(usage.component, []):
                for source in sources:
                    if source.name == target.name:
                        continue
                    self._record(
                        ("RENDERS", source.id, target.id),
                        f"render {source.name} -> {target.name}",
                        lambda s=source, t=target: self.client.create_renders_relationship(s.id, t.id),
                    )

    def _load_hooks(self, analysis):
        components = [c for c in analysis.components if c.id in self.context.components]
        for hook_usage in analysis.hook_usages:
            hook = hook_usage.hook
            if not self._attempt(f"hook {hook}", lambda: self.client.upsert_hook_node(hook)):
                continue
            for component in components:
                if hook in component.hooks:
                    self._record(
                        ("USES_HOOK", component.id, hook),
                        f"hook usage {component.name} -> {hook}",
                        lambda c=component: self.client.create_uses_hook_relationship(c.id, hook),
                    )

    def finish(self):
        self._require(WriterState.RELATIONSHIPS_LOADED, "finish")
        self.client.flush()
        self.state = WriterState.DONE
