"""Tests for ldocgen.scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from ldocgen.scanner import ExcludeRule, LuaFileScanner


def _write(path: Path, content: str = "return {}\n") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_scan_returns_sorted_lua_files(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "b.lua")
    _write(tmp_path / "src" / "a.lua")
    _write(tmp_path / "init.lua")
    _write(tmp_path / "README.md", "# readme\n")
    _write(tmp_path / ".git" / "hooks" / "hook.lua")
    _write(tmp_path / "lua_modules" / "dep.lua")

    files = LuaFileScanner().scan(tmp_path)

    assert [path.relative_to(tmp_path).as_posix() for path in files] == [
        "init.lua",
        "src/a.lua",
        "src/b.lua",
    ]


def test_scan_honours_exclude_paths_and_skip_dirs(tmp_path: Path) -> None:
    _write(tmp_path / "vendor" / "lib.lua")
    _write(tmp_path / "checks" / "thing_check.lua")
    _write(tmp_path / "checks" / "helper.lua")
    _write(tmp_path / ".ldoc_gen" / "init.lua")
    _write(tmp_path / "main.lua")

    scanner = LuaFileScanner(exclude_paths=["vendor/", "checks/*_check.lua"], skip_dirs=[".ldoc_gen"])
    files = scanner.scan(tmp_path)

    assert [path.relative_to(tmp_path).as_posix() for path in files] == ["checks/helper.lua", "main.lua"]


def test_scan_of_single_file_returns_it(tmp_path: Path) -> None:
    target = tmp_path / "single.lua"
    _write(target)
    assert LuaFileScanner().scan(target) == [target]


def test_scan_missing_path_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        LuaFileScanner().scan(tmp_path / "missing")


def test_exclude_rules_follow_gitignore_shapes() -> None:
    assert ExcludeRule.parse("   ") is None

    unanchored = ExcludeRule.parse("*.gen.lua")
    assert unanchored is not None
    assert unanchored.matches("deep/dir/x.gen.lua", False)

    anchored = ExcludeRule.parse("/build/")
    assert anchored is not None
    assert anchored.matches("build", True)
    assert not anchored.matches("build", False)
    assert not anchored.matches("src/build", True)

    rooted = ExcludeRule.parse("lib/*.lua")
    assert rooted is not None
    assert rooted.matches("lib/a.lua", False)
    assert not rooted.matches("src/lib/a.lua", False)
