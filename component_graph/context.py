from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Set, Tuple

from .types import Component, FileAnalysis, SourceFile


@dataclass
class RunCounters:
    """Counters reported at the end of a run."""
    total_files: int = 0
    processed_files: int = 0
    skipped_files: int = 0
    failed_writes: int = 0


@dataclass
class RunContext:
    """State owned by a single pipeline run.

    Holds the in-memory model built from every file before anything is
    persisted, plus the facts that were actually written.
    """
    project_root: Path
    source_root: Path
    max_workers: int = 4
    counters: RunCounters = field(default_factory=RunCounters)
    analyses: List[FileAnalysis] = field(default_factory=list)
    files: Dict[str, SourceFile] = field(default_factory=dict)
    components: Dict[str, Component] = field(default_factory=dict)
    relationships: Set[Tuple] = field(default_factory=set)

    def add_analysis(self, analysis: FileAnalysis):
        self.analyses.append(analysis)

    def components_by_name(self) -> Dict[str, List[Component]]:
        """Global name index used to resolve RENDERS targets."""
        index: Dict[str, List[Component]] = defaultdict(list)
        for component in self.components.values():
            index[component.name].append(component)
        return index

    def summary(self) -> Dict[str, int]:
        return {
            "files_processed": self.counters.processed_files,
            "files_total": self.counters.total_files,
            "files_skipped": self.counters.skipped_files,
            "components": len(self.components),
            "files_stored": len(self.files),
            "relationships": len(self.relationships),
            "failed_writes": self.counters.failed_writes,
        }
