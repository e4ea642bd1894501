from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.lua_tree import LuaTreeBuilder


@pytest.fixture
def lua_tree(tmp_path: Path) -> LuaTreeBuilder:
    """Provide a reusable Lua project builder rooted at the pytest tmp_path."""
    return LuaTreeBuilder(tmp_path)
