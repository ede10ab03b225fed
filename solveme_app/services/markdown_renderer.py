from __future__ import annotations
import re

# One alternation so a single left-to-right pass picks non-overlapping matches.
_MATH = re.compile(r"\\\[(?P<block>.*?)\\\]|\\\((?P<inline>.*?)\\\)", re.DOTALL)
_INLINE_DELIMITERS = re.compile(r"\\[()]")


def _replace(match: re.Match) -> str:
    block = match.group("block")
    if block is not None:
        # inline delimiters are meaningless inside display math
        return "$$" + _INLINE_DELIMITERS.sub("", block) + "$$"
    return "$" + match.group("inline") + "$"


def convert_math_syntax(markdown: str) -> str:
    r"""Rewrite ``\[...\]`` as ``$$...$$`` and ``\(...\)`` as ``$...$``.

    Text already using dollar delimiters passes through unchanged, so the
    conversion is idempotent.
    """
    return _MATH.sub(_replace, markdown)


def render_result(raw: str) -> str:
    return convert_math_syntax(raw)
