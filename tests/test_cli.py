"""CLI parser and entrypoint behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from ldocgen.cli import _build_parser, main
from tests._fixtures.lua_tree import LuaTreeBuilder


def test_cli_defaults() -> None:
    args = _build_parser().parse_args([])
    assert args.path == "."
    assert args.out_dir == "."
    assert args.config is None
    assert args.workers is None
    assert args.nodoc_drops_declaration is None
    assert args.verbose is False


def test_cli_accepts_short_flags() -> None:
    args = _build_parser().parse_args(["-p", "src", "-o", "build", "-c", "cfg.yml", "-j", "4", "-v"])
    assert args.path == "src"
    assert args.out_dir == "build"
    assert args.config == "cfg.yml"
    assert args.workers == 4
    assert args.verbose is True


def test_cli_verbose_and_quiet_are_exclusive() -> None:
    args = _build_parser().parse_args(["-q", "--log-file", "run.log"])
    assert args.quiet is True
    assert args.log_file == "run.log"
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["-v", "-q"])


def test_cli_rejects_non_positive_workers() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["--workers", "0"])


def test_main_converts_tree(lua_tree: LuaTreeBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    lua_tree.write(
        {
            "init.lua": """
                ---@nodoc
                local function hidden()
                end
                return {}
            """,
        }
    )
    out_dir = tmp_path / "out"

    main(["-p", str(lua_tree.path()), "-o", str(out_dir), "--nodoc-drops-declaration"])

    assert (out_dir / ".ldoc_gen" / "init.lua").read_text(encoding="utf-8") == "return {}\n"
    assert "ok    init.lua (0 warnings)" in capsys.readouterr().out


def test_main_exits_for_missing_path(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["-p", str(tmp_path / "missing")])
    assert excinfo.value.code == 1


def test_main_exits_for_bad_config(lua_tree: LuaTreeBuilder) -> None:
    lua_tree.write({"init.lua": "return {}\n"})
    (lua_tree.path() / ".ldocgen.yml").write_text("workers: -2\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["-p", str(lua_tree.path())])
    assert excinfo.value.code == 1


def test_main_reports_failed_files(lua_tree: LuaTreeBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (lua_tree.path() / "bad.lua").write_bytes(b"\xff\n")

    with pytest.raises(SystemExit) as excinfo:
        main(["-p", str(lua_tree.path()), "-o", str(tmp_path / "out")])

    assert excinfo.value.code == 1
    assert "FAIL  bad.lua [io]" in capsys.readouterr().out
