from __future__ import annotations

import re
from dataclasses import dataclass


class PatternSyntaxError(ValueError):
    """Raised when a glob cannot be translated into a matcher."""

    def __init__(self, message: str, glob: str = "") -> None:
        super().__init__(message)
        self.glob = glob


GLOBSTAR = "**"

POSIX_CLASSES = {
    "alnum": "a-zA-Z0-9",
    "alpha": "a-zA-Z",
    "blank": " \\t",
    "cntrl": "\\x00-\\x1f\\x7f",
    "digit": "0-9",
    "graph": "\\x21-\\x7e",
    "lower": "a-z",
    "print": "\\x20-\\x7e",
    "punct": re.escape("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"),
    "space": " \\t\\n\\r\\f\\v",
    "upper": "A-Z",
    "xdigit": "0-9a-fA-F",
}


def split_segments(glob: str) -> list[str]:
    """Split on unescaped separators, dropping empty segments."""
    segments: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(glob):
        char = glob[i]
        if char == "\\" and i + 1 < len(glob):
            current.append(glob[i : i + 2])
            i += 2
            continue
        if char == "/":
            if current:
                segments.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1
    if current:
        segments.append("".join(current))
    return segments


def _translate_class(glob: str, start: int) -> tuple[str, int]:
    i = start + 1
    negated = False
    if i < len(glob) and glob[i] in "!^":
        negated = True
        i += 1
    parts: list[str] = []
    first = True
    while i < len(glob):
        char = glob[i]
        if char == "]" and not first:
            body = "".join(parts)
            return (f"[^{body}]" if negated else f"[{body}]"), i + 1
        first = False
        if char == "\\":
            if i + 1 >= len(glob):
                break
            parts.append(re.escape(glob[i + 1]))
            i += 2
            continue
        if char == "[" and glob.startswith("[:", i):
            end = glob.find(":]", i + 2)
            if end != -1:
                name = glob[i + 2 : end]
                if name not in POSIX_CLASSES:
                    raise PatternSyntaxError(f"unknown character class [:{name}:]", glob)
                parts.append(POSIX_CLASSES[name])
                i = end + 2
                continue
        if char == "-" and parts and i + 1 < len(glob) and glob[i + 1] != "]":
            parts.append("-")
        else:
            parts.append(re.escape(char))
        i += 1
    raise PatternSyntaxError(f"unterminated character class at offset {start}", glob)


def translate_segment(segment: str) -> str:
    parts: list[str] = []
    i = 0
    while i < len(segment):
        char = segment[i]
        if char == "\\":
            if i + 1 >= len(segment):
                raise PatternSyntaxError("pattern ends with a lone backslash", segment)
            parts.append(re.escape(segment[i + 1]))
            i += 2
        elif char == "*":
            while i < len(segment) and segment[i] == "*":
                i += 1
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
            i += 1
        elif char == "[":
            translated, i = _translate_class(segment, i)
            parts.append(translated)
        else:
            parts.append(re.escape(char))
            i += 1
    return "".join(parts)


@dataclass(frozen=True)
class Wildmatch:
    glob: str
    tokens: tuple[re.Pattern[str] | None, ...]

    def matches(self, segments: tuple[str, ...]) -> bool:
        # None tokens are globstars; track every segment offset still reachable.
        if not segments:
            return False
        count = len(segments)
        positions = {0}
        last = len(self.tokens) - 1
        for idx, token in enumerate(self.tokens):
            if token is None:
                start = min(positions)
                if idx == last:
                    return start < count
                positions = set(range(start, count + 1))
                continue
            positions = {p + 1 for p in positions if p < count and token.fullmatch(segments[p])}
            if not positions:
                return False
        return count in positions


def compile_glob(glob: str, anchored: bool, ignore_case: bool = False) -> Wildmatch:
    flags = re.IGNORECASE if ignore_case else 0
    segments = split_segments(glob)
    if not segments:
        raise PatternSyntaxError("empty pattern", glob)
    tokens: list[re.Pattern[str] | None] = [] if anchored else [None]
    for segment in segments:
        if segment == GLOBSTAR:
            tokens.append(None)
            continue
        try:
            tokens.append(re.compile(translate_segment(segment), flags))
        except re.error as exc:
            raise PatternSyntaxError(f"invalid pattern {segment!r}: {exc}", glob) from exc
    return Wildmatch(glob=glob, tokens=tuple(tokens))
