import json

import pytest
from neo4j.exceptions import ServiceUnavailable

from component_graph import cli
from component_graph.cli import build_parser, main
from component_graph.config import settings
from component_graph.graph.json_graph_client import JsonGraphClient


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "log_file", str(tmp_path / "logs" / "app.log"))


def json_args(path):
    return ["--log-level", "WARNING", "--backend", "json", "--json-path", str(path)]


class TestCli:
    """Test the command line entry point."""

    def test_parser_defaults(self):
        args = build_parser().parse_args(["build"])

        assert args.backend == settings.graph_backend
        assert args.source_dir == settings.source_dir
        assert args.workers == settings.max_workers

    def test_build_with_json_backend(self, tmp_path, sample_project):
        output = tmp_path / "out" / "graph.json"

        main(json_args(output) + ["build", "--root", str(sample_project), "--source-dir", "src",
                                  "--workers", "2"])

        data = json.loads(output.read_text(encoding="utf-8"))
        labels = sorted(node["type"] for node in data["nodes"].values())
        assert labels.count("File") == 5
        assert labels.count("Component") == 2

    def test_build_is_the_default_command(self, tmp_path, sample_project, monkeypatch):
        monkeypatch.chdir(sample_project)
        output = tmp_path / "graph.json"

        main(json_args(output))

        assert output.exists()

    def test_stats_and_setup(self, tmp_path, sample_project):
        output = tmp_path / "graph.json"
        queries = tmp_path / "queries.cypher"
        main(json_args(output) + ["build", "--root", str(sample_project)])

        main(json_args(output) + ["stats"])
        main(json_args(output) + ["setup", "--queries-file", str(queries)])

        assert "MATCH (c:Component)" in queries.read_text(encoding="utf-8")

    def test_unreachable_neo4j_exits_with_error(self, monkeypatch):
        monkeypatch.setattr(settings, "neo4j_uri", "bolt://127.0.0.1:1")
        monkeypatch.setattr(settings, "neo4j_connection_timeout", 1.0)

        with pytest.raises(SystemExit) as exc_info:
            main(["--log-level", "WARNING", "--backend", "neo4j", "stats"])

        assert exc_info.value.code == 1

    def test_connection_lost_during_build_exits_with_error(self, tmp_path, sample_project, monkeypatch):
        class DroppedClient(JsonGraphClient):
            def upsert_component_node(self, properties):
                raise ServiceUnavailable("Connection to database lost")

        client = DroppedClient(str(tmp_path / "graph.json"))
        monkeypatch.setattr(cli, "create_client", lambda backend, json_path=None: client)

        with pytest.raises(SystemExit) as exc_info:
            main(json_args(tmp_path / "graph.json") + ["build", "--root", str(sample_project)])

        assert exc_info.value.code == 1
