"""File discovery shared by the built-in checks."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from qualitygate.config.settings import DEFAULT_EXCLUDE_DIRS, DEFAULT_EXTENSIONS, GateSettings


@dataclass
class SourceTree:
    """The set of files a check looks at.

    Attributes:
        base: Directory paths are reported relative to
        roots: Directories to walk
        extensions: File suffixes to include (lowercase, with dot)
        exclude_dirs: Directory names never descended into
    """

    base: Path
    roots: list[Path]
    extensions: set[str] = field(default_factory=lambda: set(DEFAULT_EXTENSIONS))
    exclude_dirs: set[str] = field(default_factory=lambda: set(DEFAULT_EXCLUDE_DIRS))

    @classmethod
    def from_settings(cls, settings: GateSettings) -> "SourceTree":
        return cls(
            base=settings.root,
            roots=settings.scan_roots(),
            extensions={e.lower() for e in settings.extensions},
            exclude_dirs=set(settings.exclude_dirs),
        )

    def files(self) -> list[Path]:
        """All matching files, sorted, without duplicates."""
        found: set[Path] = set()
        for root in self.roots:
            found.update(self._walk(root))
        return sorted(found)

    def _walk(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            # Prune in place so os.walk skips them
            dirnames[:] = [
                d for d in dirnames if not d.startswith(".") and d not in self.exclude_dirs
            ]
            for name in filenames:
                path = Path(dirpath) / name
                # is_file() follows symlinks; dangling links and sockets drop out here
                if path.suffix.lower() in self.extensions and path.is_file():
                    yield path

    def display(self, path: Path) -> str:
        """Path relative to ``base`` when possible, POSIX separators."""
        try:
            return path.relative_to(self.base).as_posix()
        except ValueError:
            return path.as_posix()


def read_text(path: Path) -> str:
    """Read a source file, keeping line endings as they are on disk."""
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
        return f.read()
