from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import PurePath

from pathnorm import NormalizedPath, normalize
from patterns import CompiledPattern, PatternSyntaxError, RawRule, compile_rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    source: str
    line_number: int
    text: str
    message: str
    severity: str = "error"

    def __str__(self) -> str:
        where = f"{self.source}:{self.line_number}" if self.source else f"line {self.line_number}"
        return f"{where}: {self.severity}: {self.message} ({self.text!r})"


@dataclass(frozen=True)
class MatchResult:
    ignored: bool
    matched_by: CompiledPattern | None = None


NOT_MATCHED = MatchResult(ignored=False)


@dataclass(frozen=True)
class RuleSet:
    patterns: tuple[CompiledPattern, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    @classmethod
    def from_rules(cls, rules: Iterable[RawRule], ignore_case: bool = False) -> RuleSet:
        patterns: list[CompiledPattern] = []
        diagnostics: list[Diagnostic] = []
        for rule in sorted(rules, key=lambda item: item.rank):
            try:
                compiled = compile_rule(rule, ignore_case=ignore_case)
            except PatternSyntaxError as exc:
                logger.warning("skipping rule %r at %s:%d: %s", rule.text, rule.source, rule.line_number, exc)
                diagnostics.append(Diagnostic(rule.source, rule.line_number, rule.text, str(exc)))
                continue
            if compiled is not None:
                patterns.append(compiled)
        return cls(patterns=tuple(patterns), diagnostics=tuple(diagnostics))

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        source: str = "",
        base: tuple[str, ...] = (),
        ignore_case: bool = False,
    ) -> RuleSet:
        rules = [
            RawRule(text=line, source=source, line_number=number, base=base)
            for number, line in enumerate(lines, start=1)
        ]
        return cls.from_rules(rules, ignore_case=ignore_case)

    @classmethod
    def merge(cls, *rule_sets: RuleSet) -> RuleSet:
        return cls(
            patterns=tuple(p for rule_set in rule_sets for p in rule_set.patterns),
            diagnostics=tuple(d for rule_set in rule_sets for d in rule_set.diagnostics),
        )

    def __len__(self) -> int:
        return len(self.patterns)

    def __iter__(self) -> Iterator[CompiledPattern]:
        return iter(self.patterns)

    def last_match(self, segments: tuple[str, ...], is_directory: bool) -> CompiledPattern | None:
        for pattern in reversed(self.patterns):
            if pattern.matches(segments, is_directory):
                return pattern
        return None

    def evaluate(self, path: str | PurePath | NormalizedPath, is_directory: bool = False) -> MatchResult:
        return evaluate(self, path, is_directory=is_directory)

    def is_ignored(self, path: str | PurePath | NormalizedPath, is_directory: bool = False) -> bool:
        return evaluate(self, path, is_directory=is_directory).ignored

    def filter_paths(self, paths: Iterable[str]) -> list[str]:
        return [path for path in paths if not self.is_ignored(path)]


def evaluate(
    rule_set: RuleSet,
    path: str | PurePath | NormalizedPath,
    is_directory: bool = False,
) -> MatchResult:
    """Decide whether ``path`` is ignored by ``rule_set``.

    Ancestor directories are checked from the top down first: once a parent
    directory is excluded nothing below it can be re-included, so the
    pattern that excluded the parent is reported. Otherwise the last pattern
    matching the path itself decides, and a negated one means not ignored.
    """
    if isinstance(path, NormalizedPath):
        target = NormalizedPath(path.segments, path.is_directory or is_directory)
    else:
        target = normalize(path, is_directory=is_directory)
    if not target.segments or not rule_set.patterns:
        return NOT_MATCHED
    for parent in target.parents():
        decided = rule_set.last_match(parent, is_directory=True)
        if decided is not None and not decided.negated:
            return MatchResult(ignored=True, matched_by=decided)
    decided = rule_set.last_match(target.segments, target.is_directory)
    if decided is None:
        return NOT_MATCHED
    return MatchResult(ignored=not decided.negated, matched_by=decided)
