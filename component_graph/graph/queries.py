from pathlib import Path

from ..utils.logger import get_logger


SAMPLE_QUERIES = """// Component Knowledge Graph - Sample Queries
// Paste into Neo4j Browser or cypher-shell

// 1. All components with their props and hooks
MATCH (c:Component)
RETURN c.name, c.file, c.componentType, c.props, c.hooks
ORDER BY c.name;

// 2. File structure overview
MATCH (f:File)-[:CONTAINS]->(c:Component)
RETURN f.path, collect(c.name) AS components
ORDER BY f.path;

// 3. Components that use hooks, most first
MATCH (c:Component)-[:USES_HOOK]->(h:Hook)
RETURN c.name, c.file, collect(h.name) AS hooks
ORDER BY size(hooks) DESC;

// 4. Render tree from root components
MATCH path = (root:Component)-[:RENDERS*1..3]->(leaf:Component)
WHERE NOT (root)<-[:RENDERS]-()
RETURN path
LIMIT 10;

// 5. Components rendering the most other components
MATCH (c:Component)
OPTIONAL MATCH (c)-[:RENDERS]->(child:Component)
RETURN c.name, c.file, count(child) AS renders
ORDER BY renders DESC
LIMIT 10;

// 6. Components never rendered anywhere (cleanup candidates)
MATCH (c:Component)
WHERE NOT (c)<-[:RENDERS]-()
RETURN c.name, c.file;

// 7. Most imported files
MATCH (f:File)<-[i:IMPORTS]-()
RETURN f.path, count(i) AS importers
ORDER BY importers DESC
LIMIT 10;

// 8. Most complex components
MATCH (c:Component)
RETURN c.name, c.file, c.complexity, c.loc
ORDER BY c.complexity DESC
LIMIT 10;

// 9. Hook popularity
MATCH (h:Hook)<-[:USES_HOOK]-(c:Component)
RETURN h.name, count(c) AS users
ORDER BY users DESC;

// 10. Full graph sample (use with caution on large datasets)
MATCH (n)-[r]-(m)
RETURN n, r, m
LIMIT 100;
"""


def write_sample_queries(path: str = "neo4j-sample-queries.cypher") -> Path:
    """Write the sample Cypher queries next to the project."""
    target = Path(path)
    target.write_text(SAMPLE_QUERIES, encoding="utf-8")
    get_logger("queries").info(f"Sample queries saved to: {target}")
    return target
