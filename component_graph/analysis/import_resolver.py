import os
from pathlib import Path
from typing import Optional

from ..config import settings


# Probed in order when the specifier does not name a file directly
RESOLUTION_SUFFIXES = (".js", ".jsx", ".ts", ".tsx", "/index.js", "/index.jsx")


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith(".")


class ImportResolver:
    """Maps relative import specifiers to project-relative file paths.

    Bare package names and aliases are returned unchanged; the persistence
    layer treats anything that is not a scanned file as external.
    """

    def __init__(self, project_root: Optional[str] = None):
        self.project_root = Path(project_root).resolve() if project_root else settings.project_root_path

    def _relative(self, absolute: str) -> str:
        return Path(os.path.relpath(absolute, self.project_root)).as_posix()

    def resolve(self, specifier: str, importer: str) -> str:
        """Resolve ``specifier`` as written in the file at ``importer``.

        ``importer`` may be absolute or relative to the project root.
        """
        if not is_relative_specifier(specifier):
            return specifier

        importer_path = Path(importer)
        if not importer_path.is_absolute():
            importer_path = self.project_root / importer_path

        target = os.path.normpath(os.path.join(str(importer_path.parent), specifier))
        if os.path.isfile(target):
            return self._relative(target)

        for suffix in RESOLUTION_SUFFIXES:
            candidate = target + suffix
            if os.path.isfile(candidate):
                return self._relative(candidate)

        return self._relative(target)
