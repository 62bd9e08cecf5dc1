from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional

from .analysis.classifier import ComponentClassifier, iter_declarations
from .analysis.enricher import MetadataEnricher
from .analysis.extractor import RelationshipExtractor
from .analysis.import_resolver import ImportResolver
from .config import settings
from .context import RunContext
from .graph.graph_writer import GraphWriter
from .parser.tree_parser import TreeParser, serialize_node
from .scanner.source_walker import SourceWalker
from .types import Component, FileAnalysis
from .utils.logger import get_logger


class FileAnalyzer:
    """Parses, classifies, enriches and extracts one file."""

    def __init__(self, walker: SourceWalker, resolver: ImportResolver):
        self.walker = walker
        self.parser = TreeParser()
        self.classifier = ComponentClassifier()
        self.enricher = MetadataEnricher()
        self.extractor = RelationshipExtractor(resolver)
        self.logger = get_logger("analyzer")

    def analyze(self, path: Path) -> Optional[FileAnalysis]:
        """Analyze one file. Per-file failures are returned, never raised."""
        try:
            source_file = self.walker.describe(path)
        except OSError as e:
            self.logger.warning(f"Could not stat {path}: {e}")
            return None

        try:
            parsed = self.parser.parse_file(source_file)
            if parsed.skipped:
                return FileAnalysis(file=source_file, skipped=True)
            if not parsed.ok:
                return FileAnalysis(file=source_file, error=parsed.error)

            root = parsed.tree.root_node
            return FileAnalysis(
                file=source_file,
                components=self._components(root, source_file),
                imports=self.extractor.extract_imports(root, source_file),
                component_usages=self.extractor.extract_usages(root, source_file),
                hook_usages=self.extractor.extract_hook_calls(root, source_file),
            )
        except Exception as e:
            self.logger.warning(f"Parse error in {source_file.path}: {e}")
            return FileAnalysis(file=source_file, error=str(e))

    def _components(self, root, source_file) -> List[Component]:
        components = []
        for declaration in iter_declarations(root):
            try:
                serialized = serialize_node(declaration.node)
                if self.classifier.classify(declaration, source_file.path, serialized):
                    components.append(self.enricher.enrich(declaration, source_file, serialized))
            except Exception as e:
                self.logger.warning(
                    f"Component processing error for {declaration.name} in {source_file.path}: {e}"
                )
        return components


class GraphBuilder:
    """Runs a full-refresh build of the component graph."""

    def __init__(self, client: Any, project_root: Optional[str] = None,
                 source_dir: Optional[str] = None, max_workers: Optional[int] = None):
        project = Path(project_root).resolve() if project_root else settings.project_root_path
        source_root = (project / (source_dir or settings.source_dir)).resolve()

        self.client = client
        self.context = RunContext(
            project_root=project,
            source_root=source_root,
            max_workers=max_workers or settings.max_workers,
        )
        self.walker = SourceWalker(root_path=str(source_root), project_root=str(project))
        self.analyzer = FileAnalyzer(self.walker, ImportResolver(str(project)))
        self.writer = GraphWriter(client, self.context)
        self.logger = get_logger("graph_builder")

    def analyze(self):
        """Build the in-memory model for every discovered file."""
        paths = list(self.walker.walk())
        counters = self.context.counters
        counters.total_files = len(paths)
        self.logger.info(f"Found {counters.total_files} files to process")

        with ThreadPoolExecutor(max_workers=self.context.max_workers) as executor:
            # map() keeps walker order so the model is deterministic
            for analysis in executor.map(self.analyzer.analyze, paths):
                if analysis is None or not analysis.ok:
                    counters.skipped_files += 1
                    if analysis is not None and analysis.error:
                        self.logger.info(f"Skipped: {analysis.file.path}")
                    continue

                self.context.add_analysis(analysis)
                counters.processed_files += 1
                progress = round(counters.processed_files / counters.total_files * 100)
                self.logger.info(
                    f"Parsed ({progress}%) {analysis.file.path}: "
                    f"{len(analysis.components)} components, {len(analysis.imports)} imports"
                )

    def build(self) -> Dict[str, int]:
        self.logger.info("Building component knowledge graph...")

        self.writer.prepare()
        self.analyze()
        self.writer.load_nodes()
        self.writer.load_relationships()
        self.writer.finish()

        summary = self.context.summary()
        self.logger.info("Knowledge graph created successfully")
        self.logger.info(f"  - Files processed: {summary['files_processed']}/{summary['files_total']}")
        self.logger.info(f"  - Components found: {summary['components']}")
        self.logger.info(f"  - Files stored: {summary['files_stored']}")
        self.logger.info(f"  - Relationships: {summary['relationships']}")
        return summary
