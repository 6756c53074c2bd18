"""Tests for closing of open blocks."""

import pytest

from shaderdbg.debugger.braces import close_open_braces
from shaderdbg.debugger.errors import ShaderDebugError


class TestCloseOpenBraces:
    """Test brace balancing after truncation."""

    def test_appends_missing_braces(self):
        lines = ["void f() {", "  if (a) {", "    for (;;) {", "      {"]
        assert close_open_braces(lines, 0) == [*lines, "}", "}", "}", "}"]

    def test_idempotent(self):
        once = close_open_braces(["void f() {", "  if (a) {"], 0)
        assert close_open_braces(once, 0) == once

    def test_counts_from_start(self):
        lines = ["{", "void f() {"]
        assert close_open_braces(lines, 1) == [*lines, "}"]

    def test_ignores_braces_in_comments(self):
        lines = ["void f() { // {", "  /* { */"]
        assert close_open_braces(lines, 0) == [*lines, "}"]

    def test_balanced_input_is_copied(self):
        lines = ["void f() {", "}"]
        result = close_open_braces(lines, 0)
        assert result == lines
        assert result is not lines

    def test_negative_start(self):
        with pytest.raises(ShaderDebugError):
            close_open_braces(["{"], -1)
