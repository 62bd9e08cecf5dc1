import pytest
from pathlib import Path
from typing import Callable, Dict, Generator

from component_graph.config import settings
from component_graph.graph.json_graph_client import JsonGraphClient
from component_graph.graph.neo4j_client import Neo4jClient
from component_graph.parser.tree_parser import TreeParser
from component_graph.scanner.source_walker import SourceWalker


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create files below ``root`` from a {relative path: content} map."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def tree_parser() -> TreeParser:
    return TreeParser()


@pytest.fixture
def parse(tree_parser) -> Callable:
    """Parse a snippet and return the root node."""
    def _parse(code: str, language: str = "javascript"):
        result = tree_parser.parse_source(code, language)
        assert result.ok, result.error
        return result.tree.root_node
    return _parse


@pytest.fixture
def make_project(tmp_path) -> Callable:
    """Create a project directory with the given source files."""
    def _make(files: Dict[str, str]) -> Path:
        return write_tree(tmp_path / "project", files)
    return _make


@pytest.fixture
def describe(tmp_path) -> Callable:
    """SourceFile for a path inside a project made by ``make_project``."""
    def _describe(path: Path):
        walker = SourceWalker(root_path=str(tmp_path / "project"), project_root=str(tmp_path / "project"))
        return walker.describe(path)
    return _describe


@pytest.fixture
def json_client(tmp_path) -> Generator[JsonGraphClient, None, None]:
    """JSON graph client writing into the test's temp directory."""
    client = JsonGraphClient(str(tmp_path / "graph_data.json"))
    yield client
    client.close()


@pytest.fixture
def neo4j_client() -> Generator[Neo4jClient, None, None]:
    """Live Neo4j client; tests using it skip when no server is reachable."""
    try:
        client = Neo4jClient(connection_timeout=3)
    except Exception as e:
        pytest.skip(f"Neo4j not available at {settings.neo4j_uri}: {e}")

    client.clear_database()
    yield client

    # Cleanup: Clear test data
    try:
        client.clear_database()
    finally:
        client.close()


@pytest.fixture
def sample_project(make_project) -> Path:
    """A small React app exercising every relationship kind."""
    return make_project({
        "src/App.js": """
import React, { useState } from 'react';
import Header from './components/Header';
import { formatTitle } from './utils/format';

export default function App() {
  const [open, setOpen] = useState(false);
  return (
    <div>
      <Header title={formatTitle('home')} />
      {open && <span>open</span>}
    </div>
  );
}
""",
        "src/components/Header.jsx": """
import { useTheme } from '../hooks/useTheme';

const Header = ({ title, subtitle = '' }) => {
  const theme = useTheme();
  return <h1 className={theme}>{title}{subtitle}</h1>;
};

export default Header;
""",
        "src/hooks/useTheme.js": """
import { useContext } from 'react';
import { ThemeContext } from '../contexts/ThemeContext';

export function useTheme() {
  return useContext(ThemeContext);
}
""",
        "src/contexts/ThemeContext.js": """
import React from 'react';

export const ThemeContext = React.createContext('light');
""",
        "src/utils/format.js": """
export function formatTitle(value) {
  return value.toUpperCase();
}
""",
        "src/App.test.js": """
import App from './App';
test('renders', () => { expect(<App />).toBeTruthy(); });
""",
        "src/node_modules/lib/index.js": "export default function Lib() { return <div />; }\n",
    })
