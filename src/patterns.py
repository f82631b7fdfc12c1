from __future__ import annotations

from dataclasses import dataclass

from wildmatch import PatternSyntaxError, Wildmatch, compile_glob

__all__ = [
    "CompiledPattern",
    "PatternSyntaxError",
    "RawRule",
    "compile_pattern",
    "compile_rule",
    "escape_pattern",
]

GLOB_SPECIALS = "*?[\\"


@dataclass(frozen=True)
class RawRule:
    text: str
    source: str = ""
    line_number: int = 0
    base: tuple[str, ...] = ()
    rank: int = 0


@dataclass(frozen=True)
class CompiledPattern:
    negated: bool
    directory_only: bool
    anchored: bool
    source_text: str
    matcher: Wildmatch
    base: tuple[str, ...] = ()
    source: str = ""
    line_number: int = 0

    def applies_to(self, segments: tuple[str, ...]) -> bool:
        depth = len(self.base)
        return len(segments) > depth and segments[:depth] == self.base

    def matches(self, segments: tuple[str, ...], is_directory: bool) -> bool:
        if self.directory_only and not is_directory:
            return False
        if not self.applies_to(segments):
            return False
        return self.matcher.matches(segments[len(self.base) :])

    def location(self) -> str:
        return f"{self.source}:{self.line_number}" if self.source else str(self.line_number)

    def __str__(self) -> str:
        return self.source_text


def _escaped(text: str, index: int) -> bool:
    backslashes = 0
    while index > 0 and text[index - 1] == "\\":
        backslashes += 1
        index -= 1
    return backslashes % 2 == 1


def _trim_trailing(text: str) -> str:
    end = len(text)
    while end > 0 and text[end - 1] in " \t" and not _escaped(text, end - 1):
        end -= 1
    return text[:end]


def compile_pattern(
    text: str,
    base: tuple[str, ...] = (),
    source: str = "",
    line_number: int = 0,
    ignore_case: bool = False,
) -> CompiledPattern | None:
    """Compile one rule line, or return None for blanks and comments.

    Raises PatternSyntaxError when the glob part cannot be translated.
    """
    body = _trim_trailing(text.rstrip("\r\n"))
    if not body or body.startswith("#"):
        return None
    negated = body.startswith("!")
    if negated:
        body = body[1:]
    directory_only = False
    while body.endswith("/") and not _escaped(body, len(body) - 1):
        directory_only = True
        body = body[:-1]
    anchored = body.startswith("/")
    if anchored:
        body = body.lstrip("/")
    if not body:
        return None
    anchored = anchored or "/" in body
    matcher = compile_glob(body, anchored=anchored, ignore_case=ignore_case)
    return CompiledPattern(
        negated=negated,
        directory_only=directory_only,
        anchored=anchored,
        source_text=text.rstrip("\r\n"),
        matcher=matcher,
        base=base,
        source=source,
        line_number=line_number,
    )


def compile_rule(rule: RawRule, ignore_case: bool = False) -> CompiledPattern | None:
    return compile_pattern(
        rule.text,
        base=rule.base,
        source=rule.source,
        line_number=rule.line_number,
        ignore_case=ignore_case,
    )


def escape_pattern(path: str, is_directory: bool = False) -> str:
    """Build an anchored pattern that matches exactly ``path``."""
    rel = path.strip("/")
    escaped = "".join(f"\\{char}" if char in GLOB_SPECIALS else char for char in rel)
    stripped = escaped.rstrip(" ")
    escaped = stripped + "\\ " * (len(escaped) - len(stripped))
    suffix = "/" if is_directory else ""
    return f"/{escaped}{suffix}"
