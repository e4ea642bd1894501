"""Lua source discovery for directory inputs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".idea",
    ".luarocks",
    "lua_modules",
}

LUA_SUFFIX = ".lua"


@dataclass(frozen=True)
class ExcludeRule:
    """One ``exclude_paths`` glob.

    A trailing ``/`` limits the rule to directories. A glob containing ``/``
    is matched against the path relative to the input root; any other glob is
    matched against the last path component only. Excluded directories are
    pruned during the walk, so nothing below them is visited.
    """

    glob: str
    directories_only: bool = False
    rooted: bool = False

    @classmethod
    def parse(cls, pattern: str) -> Optional["ExcludeRule"]:
        glob = pattern.strip()
        directories_only = glob.endswith("/")
        rooted = "/" in glob.rstrip("/")
        glob = glob.strip("/")
        if not glob:
            return None
        return cls(glob=glob, directories_only=directories_only, rooted=rooted)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directories_only and not is_dir:
            return False
        target = rel_path if self.rooted else rel_path.rsplit("/", 1)[-1]
        return fnmatchcase(target, self.glob)


class LuaFileScanner:
    """Walks an input tree and yields the Lua files to convert, in sorted order."""

    def __init__(
        self,
        exclude_paths: Sequence[str] = (),
        skip_dirs: Sequence[str] = (),
    ) -> None:
        self._rules = [rule for rule in map(ExcludeRule.parse, exclude_paths) if rule is not None]
        self._skip_dirs = set(_EXCLUDED_DIRS) | set(skip_dirs)

    def scan(self, root: Path) -> List[Path]:
        """Return Lua files under ``root`` (or ``root`` itself when it is a file)."""
        root = root.expanduser()
        if not root.exists():
            raise FileNotFoundError(f"Input path not found: {root}")
        if root.is_file():
            return [root]
        return sorted(self._iter_files(root))

    def _iter_files(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept = []
            for name in dirnames:
                if name in self._skip_dirs:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if self._excluded(rel_path, True):
                    continue
                kept.append(name)
            dirnames[:] = kept

            for filename in filenames:
                if not filename.endswith(LUA_SUFFIX):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if self._excluded(rel_path, False):
                    continue
                yield current_dir / filename

    def _excluded(self, rel_path: str, is_dir: bool) -> bool:
        return any(rule.matches(rel_path, is_dir) for rule in self._rules)


__all__ = ["ExcludeRule", "LuaFileScanner", "LUA_SUFFIX"]
