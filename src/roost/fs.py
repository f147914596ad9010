"""Read-only virtual filesystems for view trees.

The resolvers only need two capabilities: enumerate the files matching a
glob pattern, and read a file's bytes.  ``ViewFS`` names that contract;
``DirectoryFS`` and ``MemoryFS`` are the two bundled implementations.

Pattern semantics follow POSIX shell globbing per path segment: ``*``,
``?`` and ``[...]`` never cross a ``/``.  Both implementations return
matches sorted, so enumeration order inside one pattern is stable.
"""

from __future__ import annotations

from collections.abc import Mapping
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import Protocol


class ViewFS(Protocol):
    """A hierarchical read-only store supporting pattern enumeration."""

    def glob(self, pattern: str) -> list[str]:
        """Return the POSIX paths of all files matching *pattern*."""
        ...

    def read_bytes(self, path: str) -> bytes:
        """Return the contents of *path*.  Raises ``FileNotFoundError``."""
        ...


class DirectoryFS:
    """A view tree rooted at a directory on disk.

    Paths handed in and out are POSIX paths relative to *root*.  Paths
    that would escape the root are treated as missing.
    """

    __slots__ = ("root",)

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def glob(self, pattern: str) -> list[str]:
        if not pattern:
            return []
        return sorted(
            p.relative_to(self.root).as_posix() for p in self.root.glob(pattern) if p.is_file()
        )

    def read_bytes(self, path: str) -> bytes:
        target = (self.root / path).resolve()
        if not target.is_relative_to(self.root):
            raise FileNotFoundError(f"{path!r} is outside {self.root}")
        return target.read_bytes()

    def __repr__(self) -> str:
        return f"DirectoryFS({str(self.root)!r})"


class MemoryFS:
    """An in-memory view tree, handy for tests and embedded views.

    Usage::

        fs = MemoryFS({
            "application/index.html.tpl": "<h1>{{ title }}</h1>",
            "layouts/application.html.tpl": "<body>{{ Content }}</body>",
        })
    """

    __slots__ = ("_files",)

    def __init__(self, files: Mapping[str, bytes | str] | None = None) -> None:
        self._files: dict[str, bytes] = {}
        for path, data in (files or {}).items():
            key = PurePosixPath(path).as_posix().lstrip("/")
            self._files[key] = data.encode() if isinstance(data, str) else bytes(data)

    def glob(self, pattern: str) -> list[str]:
        parts = pattern.split("/")
        return sorted(path for path in self._files if _match_segments(path.split("/"), parts))

    def read_bytes(self, path: str) -> bytes:
        try:
            return self._files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"MemoryFS(<{len(self._files)} files>)"


def _match_segments(names: list[str], patterns: list[str]) -> bool:
    if len(names) != len(patterns):
        return False
    return all(fnmatchcase(name, pat) for name, pat in zip(names, patterns, strict=True))
