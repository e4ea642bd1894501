"""End-to-end tests for the conversion pipeline."""

from __future__ import annotations

import textwrap

from ldocgen.engine import LuaDocConverter, convert_source
from ldocgen.models import DiagnosticKind


def _lua(text: str) -> str:
    return textwrap.dedent(text).lstrip("\n")


def test_param_and_return_scenario() -> None:
    source = _lua(
        """
        ---@param str string The input string
        ---@return integer ret_val The returned number
        function a_function(str)
            -- body
        end
        """
    )
    expected = _lua(
        """
        ---@tparam string str The input string
        ---@treturn integer The returned number
        function a_function(str)

        end
        """
    )

    result = convert_source(source)

    assert result.text == expected
    assert result.diagnostics == []


def test_conversion_is_idempotent() -> None:
    source = _lua(
        """
        --- Does things.
        --- # Example
        --- ```lua
        --- thing(1)
        --- ```
        ---@param n integer
        function thing(n)
          return n * 2
        end
        """
    )
    converter = LuaDocConverter()
    first = converter.convert(source).text

    assert converter.convert(source).text == first
    assert converter.convert(first).text == first


def test_example_block_becomes_usage_after_summary() -> None:
    source = _lua(
        """
        --- Makes a thing.
        --- # Example
        --- ```lua
        --- local t = make(3)
        --- ```
        ---@param n integer Count
        function make(n)
          return n
        end
        """
    )
    expected = _lua(
        """
        --- Makes a thing.
        ---@usage
        --- local t = make(3)
        ---@tparam integer n Count
        function make(n)

        end
        """
    )
    assert convert_source(source).text == expected


def test_plain_code_block_is_indented_in_place() -> None:
    source = _lua(
        """
        --- Before
        --- ```lua
        --- local x = 1
        --- ```
        --- After
        function f()
        end
        """
    )
    expected = _lua(
        """
        --- Before
        ---     local x = 1
        --- After
        function f()

        end
        """
    )
    result = convert_source(source).text
    assert result == expected
    assert "@usage" not in result


def test_nodoc_suppresses_comment_but_keeps_dummy() -> None:
    source = _lua(
        """
        --- Internal helper.
        ---@param x string
        ---@nodoc
        local function hidden(x)
          return x
        end
        """
    )
    assert convert_source(source).text == "local function hidden(x)\n\nend\n"


def test_nodoc_can_drop_declaration() -> None:
    source = _lua(
        """
        ---@nodoc
        local function hidden()
        end
        function shown()
        end
        """
    )
    result = convert_source(source, nodoc_drops_declaration=True)
    assert result.text == "function shown()\n\nend\n"


def test_nested_functions_do_not_leak() -> None:
    source = _lua(
        """
        function outer(a)
          local function inner(b)
            return b
          end
          return inner(a)
        end
        """
    )
    result = convert_source(source).text
    assert result == "function outer(a)\n\nend\n"
    assert "inner" not in result


def test_other_code_and_comments_pass_through() -> None:
    source = _lua(
        """
        -- Module header
        local util = require("util")

        -- plain note
        function f(x)
          return util.go(x)
        end

        print("side effect")
        return f
        """
    )
    expected = _lua(
        """
        -- Module header
        local util = require("util")

        -- plain note
        function f(x)

        end

        print("side effect")
        return f
        """
    )
    assert convert_source(source).text == expected


def test_signature_is_preserved_verbatim() -> None:
    source = "function  a.b.c:method( first,second , ... )\n  return first\nend\n"
    result = convert_source(source)
    assert result.text == "function  a.b.c:method( first,second , ... )\n\nend\n"


def test_unknown_and_malformed_tags_pass_through() -> None:
    source = _lua(
        """
        ---@async
        ---@param broken
        ---@param x string
        function g(x)
        end
        """
    )
    result = convert_source(source)
    assert result.text == _lua(
        """
        ---@async
        ---@param broken
        ---@tparam string x
        function g(x)

        end
        """
    )
    assert [(item.kind, item.line) for item in result.diagnostics] == [(DiagnosticKind.PARSE_MISMATCH, 2)]


def test_class_module_and_members() -> None:
    source = _lua(
        """
        ---@class Widget
        ---@classmod
        local Widget = {}

        --- Creates a widget.
        ---@return Widget
        function Widget.new()
          return setmetatable({}, Widget)
        end
        """
    )
    result = convert_source(source)
    assert result.text == _lua(
        """
        ---@classmod Widget
        local Widget = {}

        --- Creates a widget.
        ---@treturn Widget
        function Widget.new()

        end
        """
    )
    assert [item.class_like for item in result.declarations] == [True, True]


def test_unparseable_source_is_left_untouched() -> None:
    source = "function broken(\n"
    result = convert_source(source)
    assert result.text == source
    assert result.diagnostics[0].kind is DiagnosticKind.UNSUPPORTED_CONSTRUCT


def test_mixed_marker_run_converts_doc_lines() -> None:
    source = "-- Helper note\n---@param x string The x\nfunction f(x)\n  return x\nend\n"
    result = convert_source(source)
    assert result.text == "-- Helper note\n---@tparam string x The x\nfunction f(x)\n\nend\n"


def test_code_lines_are_kept_verbatim() -> None:
    source = _lua(
        """
        --- # Example
        --- ```
        ---run()
        ---  nested()
        --- ```
        function f()
        end
        """
    )
    assert convert_source(source).text == "---@usage\n---run()\n---  nested()\nfunction f()\n\nend\n"


def test_colon_separated_description() -> None:
    result = convert_source("---@param x string: the value\nfunction f(x)\nend\n")
    assert result.text == "---@tparam string x the value\nfunction f(x)\n\nend\n"


def test_nested_table_functions_pass_through_with_warning() -> None:
    source = "local M = {\n  f = function(x)\n    return x\n  end,\n}\n"
    result = convert_source(source)
    assert result.text == source
    assert [item.kind for item in result.diagnostics] == [DiagnosticKind.UNSUPPORTED_CONSTRUCT]
