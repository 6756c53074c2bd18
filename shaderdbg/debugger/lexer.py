"""
Line-oriented lexing of GLSL source.

This module performs the single tokenizing pass shared by every analysis
step: it removes line and block comments, ignores braces inside string
literals, and counts the braces left on each line.
"""

from shaderdbg.debugger.models import SourceLine


def split_lines(source: str) -> list[str]:
    """Split shader source into lines without dropping a trailing empty line.

    Args:
        source: Shader source text

    Returns:
        List of lines, `\\r\\n` endings normalized
    """
    return source.replace("\r\n", "\n").split("\n")


def scan_lines(lines: list[str]) -> list[SourceLine]:
    """Lex every line of a shader.

    Block comments may span several lines; the scanner carries that state
    from one line to the next.

    Args:
        lines: Source lines

    Returns:
        One SourceLine per input line
    """
    scanned: list[SourceLine] = []
    in_block_comment = False

    for text in lines:
        code_chars: list[str] = []
        opens = closes = 0
        in_string = False
        i = 0

        while i < len(text):
            char = text[i]
            pair = text[i : i + 2]

            if in_block_comment:
                if pair == "*/":
                    in_block_comment = False
                    i += 2
                    continue
                i += 1
                continue

            if in_string:
                code_chars.append(char)
                if char == "\\" and i + 1 < len(text):
                    code_chars.append(text[i + 1])
                    i += 2
                    continue
                if char == '"':
                    in_string = False
                i += 1
                continue

            if pair == "//":
                break
            if pair == "/*":
                in_block_comment = True
                # Keep tokens on either side of the comment apart
                code_chars.append(" ")
                i += 2
                continue

            if char == '"':
                in_string = True
            elif char == "{":
                opens += 1
            elif char == "}":
                closes += 1
            code_chars.append(char)
            i += 1

        scanned.append(
            SourceLine(
                text=text,
                code="".join(code_chars).rstrip(),
                opens=opens,
                closes=closes,
            )
        )

    return scanned


def strip_comments(line: str) -> str:
    """Remove comments from a single line, ignoring surrounding context."""
    return scan_lines([line])[0].code


def count_braces(lines: list[SourceLine], start: int = 0) -> int:
    """Net number of unmatched `{` from `start` to the end of `lines`."""
    return sum(line.net_braces for line in lines[max(start, 0) :])
