import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, Optional

from ..config import settings
from ..types import SourceFile
from ..utils.logger import get_logger


IGNORED_DIRS = {"node_modules", ".git", ".svn", ".hg", "build", "dist"}

# Bundles that are vendored into the tree rather than written by hand
VENDORED_NAME_MARKERS = (".min.", "three.", "webamp")

DEPENDENCY_SEGMENT = "node_modules"


def to_posix_relative(path: Path, base: Path) -> str:
    """Relative path with '/' separators, using '..' for paths outside base."""
    return Path(os.path.relpath(path, base)).as_posix()


def isoformat_mtime(mtime: float) -> str:
    return datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat().replace("+00:00", "Z")


class SourceWalker:
    """Enumerates candidate source files below a root directory."""

    def __init__(
        self,
        root_path: Optional[str] = None,
        project_root: Optional[str] = None,
        extensions: Optional[Iterable[str]] = None,
    ):
        self.project_root = Path(project_root).resolve() if project_root else settings.project_root_path
        self.root_path = Path(root_path).resolve() if root_path else settings.source_root_path
        self.extensions = {
            ext.lower() for ext in (extensions or settings.supported_extensions_list)
        }
        self.logger = get_logger("walker")

    def walk(self) -> Iterator[Path]:
        """Yield candidate files lazily. Each call re-walks the tree."""
        self.logger.info(f"Scanning directory: {self.root_path}")

        for root, dirs, files in os.walk(self.root_path, onerror=self._on_walk_error):
            dirs[:] = sorted(d for d in dirs if d not in IGNORED_DIRS)

            for file_name in sorted(files):
                file_path = Path(root) / file_name
                try:
                    if self._should_include_file(file_path):
                        yield file_path
                except OSError as e:
                    self.logger.warning(f"Could not inspect {file_path}: {e}")

    def _on_walk_error(self, error: OSError):
        self.logger.warning(f"Could not read directory {error.filename}: {error.strerror}")

    def _should_include_file(self, file_path: Path) -> bool:
        """Check if file should be included in scan."""
        name = file_path.name
        if file_path.suffix.lower() not in self.extensions:
            return False

        if any(marker in name for marker in VENDORED_NAME_MARKERS):
            return False

        # Symlinked or nested dependency trees. realpath stops at symlink loops.
        if DEPENDENCY_SEGMENT in Path(os.path.realpath(file_path)).parts:
            return False

        return file_path.is_file()

    def describe(self, file_path: Path) -> SourceFile:
        """Build the File record from filesystem metadata."""
        stat = file_path.stat()
        return SourceFile(
            path=to_posix_relative(file_path, self.project_root),
            absolute_path=str(file_path),
            name=file_path.name,
            extension=file_path.suffix,
            size=stat.st_size,
            last_modified=isoformat_mtime(stat.st_mtime),
        )
