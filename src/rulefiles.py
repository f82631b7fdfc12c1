from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from ignore import Diagnostic, MatchResult, RuleSet
from pathnorm import NormalizedPath, normalize
from patterns import RawRule, compile_pattern
from repo import common_git_dir
from settings import DEFAULT_RULE_FILE, IgnoreSettings
from wildmatch import PatternSyntaxError

logger = logging.getLogger(__name__)

TEMPLATE_NOTE = "# Created by pyignore"

GLOBAL_RANK = 0
INFO_EXCLUDE_RANK = 1
TREE_RANK = 2


@dataclass(frozen=True)
class RuleFile:
    path: Path
    base: tuple[str, ...] = ()
    rank: int = TREE_RANK

    def read(self) -> list[RawRule]:
        return read_rule_file(self.path, base=self.base, rank=self.rank)

    def load(self, ignore_case: bool = False) -> RuleSet:
        return RuleSet.from_rules(self.read(), ignore_case=ignore_case)


def read_rule_file(
    path: Path,
    base: tuple[str, ...] = (),
    rank: int = 0,
    source: str | None = None,
) -> list[RawRule]:
    label = source if source is not None else str(path)
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("could not read rule file %s: %s", path, exc)
        return []
    return [
        RawRule(text=line, source=label, line_number=number, base=base, rank=rank)
        for number, line in enumerate(text.splitlines(), start=1)
    ]


def outer_rule_files(repo_root: Path, settings: IgnoreSettings) -> list[RuleFile]:
    files: list[RuleFile] = []
    if settings.use_global_excludes:
        excludes = settings.excludes_file()
        if excludes.is_file():
            files.append(RuleFile(excludes, (), GLOBAL_RANK))
        else:
            logger.debug("no global excludes file at %s", excludes)
    if settings.use_info_exclude:
        info_exclude = common_git_dir(repo_root) / "info" / "exclude"
        if info_exclude.is_file():
            files.append(RuleFile(info_exclude, (), INFO_EXCLUDE_RANK))
    return files


def _walk_rule_files(
    repo_root: Path,
    settings: IgnoreSettings,
    loaded: RuleSet,
    extra: RuleSet,
) -> Iterator[tuple[RuleFile, RuleSet]]:
    current = loaded
    for dirpath, dirnames, filenames in os.walk(repo_root):
        base = Path(dirpath).relative_to(repo_root).parts
        for name in settings.rule_file_names:
            if name not in filenames:
                continue
            rule_file = RuleFile(Path(dirpath) / name, base, TREE_RANK + len(base))
            rule_set = rule_file.load(ignore_case=settings.ignore_case)
            current = RuleSet.merge(current, rule_set)
            yield rule_file, rule_set
        # Rule files inside an excluded directory can never re-include anything.
        checker = RuleSet.merge(current, extra)
        dirnames[:] = sorted(
            name
            for name in dirnames
            if name != ".git" and not checker.is_ignored(NormalizedPath(base + (name,), True))
        )


def discover_rule_files(repo_root: Path, settings: IgnoreSettings | None = None) -> list[RuleFile]:
    settings = settings or IgnoreSettings()
    outer = outer_rule_files(repo_root, settings)
    loaded = RuleSet.merge(*(rule_file.load(settings.ignore_case) for rule_file in outer))
    extra = _extra_rules(settings)
    tree = [rule_file for rule_file, _ in _walk_rule_files(repo_root, settings, loaded, extra)]
    return outer + tree


def _extra_rules(settings: IgnoreSettings) -> RuleSet:
    return RuleSet.from_lines(settings.extra_rules, source="<extra>", ignore_case=settings.ignore_case)


def load_rule_set(repo_root: Path, settings: IgnoreSettings | None = None) -> RuleSet:
    settings = settings or IgnoreSettings()
    outer = [rule_file.load(settings.ignore_case) for rule_file in outer_rule_files(repo_root, settings)]
    loaded = RuleSet.merge(*outer)
    extra = _extra_rules(settings)
    tree = [rule_set for _, rule_set in _walk_rule_files(repo_root, settings, loaded, extra)]
    rule_set = RuleSet.merge(loaded, *tree, extra)
    logger.debug("loaded %d patterns for %s", len(rule_set), repo_root)
    return rule_set


class IgnoreMatcher:
    """Holds the rule set of one working tree and answers path queries.

    ``reload`` builds a complete new rule set before swapping it in, so
    concurrent readers always see a finished set.
    """

    def __init__(self, root: str | Path, settings: IgnoreSettings | None = None) -> None:
        self._root = Path(root).resolve()
        self._settings = settings if settings is not None else IgnoreSettings.from_repo(self._root)
        self._rule_set = load_rule_set(self._root, self._settings)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def settings(self) -> IgnoreSettings:
        return self._settings

    @property
    def rule_set(self) -> RuleSet:
        return self._rule_set

    def check(self, path: str | Path, is_directory: bool | None = None) -> MatchResult:
        target = normalize(path, root=self._root, is_directory=is_directory)
        if is_directory is None and not target.is_directory and target.segments:
            on_disk = self._root.joinpath(*target.segments)
            target = NormalizedPath(target.segments, on_disk.is_dir())
        return self._rule_set.evaluate(target)

    def is_ignored(self, path: str | Path, is_directory: bool | None = None) -> bool:
        return self.check(path, is_directory=is_directory).ignored

    def filter_paths(self, paths: Iterable[str]) -> list[str]:
        return [path for path in paths if not self.is_ignored(path)]

    def reload(self) -> None:
        rule_set = load_rule_set(self._root, self._settings)
        self._rule_set = rule_set
        logger.debug("reloaded %d patterns for %s", len(rule_set), self._root)


def create_rule_file(
    directory: Path,
    filename: str = DEFAULT_RULE_FILE,
    header: str = TEMPLATE_NOTE,
) -> Path:
    path = directory / filename
    if path.exists():
        return path
    directory.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{header}\n" if header else "", encoding="utf-8")
    logger.info("created %s", path)
    return path


def append_entries(
    path: Path,
    entries: Iterable[str],
    ignore_duplicates: bool = True,
    ignore_comments: bool = False,
) -> list[str]:
    existing = path.read_text(encoding="utf-8", errors="replace") if path.exists() else ""
    present = {line.strip() for line in existing.splitlines() if line.strip()}
    written: list[str] = []
    for entry in entries:
        line = entry.rstrip("\r\n")
        stripped = line.strip()
        if ignore_comments and stripped.startswith("#"):
            continue
        if ignore_duplicates and stripped and stripped in present:
            continue
        written.append(line)
        if stripped:
            present.add(stripped)
    if not written:
        return written
    prefix = "" if not existing or existing.endswith("\n") else "\n"
    with path.open("a", encoding="utf-8") as handle:
        handle.write(prefix + "\n".join(written) + "\n")
    return written


def lint_rule_file(path: Path, source: str | None = None) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    seen: dict[str, int] = {}
    for rule in read_rule_file(path, source=source):
        try:
            compiled = compile_pattern(rule.text, source=rule.source, line_number=rule.line_number)
        except PatternSyntaxError as exc:
            diagnostics.append(Diagnostic(rule.source, rule.line_number, rule.text, str(exc)))
            continue
        if compiled is None:
            continue
        key = rule.text.strip()
        if key in seen:
            diagnostics.append(
                Diagnostic(
                    rule.source,
                    rule.line_number,
                    rule.text,
                    f"duplicate of line {seen[key]}",
                    severity="warning",
                )
            )
        else:
            seen[key] = rule.line_number
    return diagnostics
