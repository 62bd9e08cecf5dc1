from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from enum import Enum


class ComponentType(Enum):
    """Component category inferred from path and name patterns."""
    PAGE = "page"
    APP = "app"
    HOOK = "hook"
    CONTEXT = "context"
    COMMON = "common"
    COMPONENT = "component"


class DeclarationKind(Enum):
    """Syntactic form a candidate component was declared with."""
    FUNCTION = "function"
    ARROW = "arrow"
    CLASS = "class"


@dataclass
class SourceFile:
    """Represents a scanned source file."""
    path: str
    absolute_path: str
    name: str
    extension: str
    size: int = 0
    last_modified: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the property map stored on File nodes."""
        return {
            "path": self.path,
            "name": self.name,
            "extension": self.extension,
            "size": self.size,
            "lastModified": self.last_modified,
        }


@dataclass
class Component:
    """Represents a detected UI component declaration."""
    id: str
    name: str
    file: str
    component_type: ComponentType
    kind: DeclarationKind
    props: List[str] = field(default_factory=list)
    hooks: List[str] = field(default_factory=list)
    loc: int = 0
    complexity: int = 1
    last_modified: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the property map stored on Component nodes."""
        return {
            "id": self.id,
            "name": self.name,
            "file": self.file,
            "componentType": self.component_type.value,
            "props": list(self.props),
            "hooks": list(self.hooks),
            "loc": self.loc,
            "complexity": self.complexity,
            "lastModified": self.last_modified,
        }


@dataclass
class ImportRecord:
    """One imported binding of an import statement."""
    name: str
    imported: str
    source: str
    resolved_path: str


@dataclass
class ComponentUsage:
    """A capitalized JSX tag seen in a file."""
    component: str
    file: str


@dataclass
class HookUsage:
    """A call to a hook-named function seen in a file."""
    hook: str
    file: str


@dataclass
class ParseResult:
    """Outcome of parsing one file: a tree, a skip, or an error."""
    tree: Any = None
    language: Optional[str] = None
    error: Optional[str] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.tree is not None and self.error is None


@dataclass
class ClassifyResult:
    """Outcome of component classification for one declaration."""
    is_component: bool
    reason: str

    def __bool__(self) -> bool:
        return self.is_component


@dataclass
class FileAnalysis:
    """Everything extracted from one source file."""
    file: SourceFile
    components: List[Component] = field(default_factory=list)
    imports: List[ImportRecord] = field(default_factory=list)
    component_usages: List[ComponentUsage] = field(default_factory=list)
    hook_usages: List[HookUsage] = field(default_factory=list)
    error: Optional[str] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.skipped


@dataclass
class GraphNode:
    """Represents a node in the component graph."""
    id: str
    type: str
    properties: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "type": self.type,
            "properties": self.properties,
        }


@dataclass
class GraphEdge:
    """Represents an edge in the component graph."""
    source_id: str
    target_id: str
    relationship_type: str
    properties: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source_id": self.source_id,
            "target_id": self.target_id,
            "relationship_type": self.relationship_type,
            "properties": self.properties,
        }
