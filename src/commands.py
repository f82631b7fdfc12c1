from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from ignore import MatchResult
from index import list_ignored_paths, list_unignored_files, tracked_ignored_files
from pathnorm import PathOutsideRootError, normalize
from patterns import escape_pattern
from repo import common_git_dir, find_rule_root
from rulefiles import (
    IgnoreMatcher,
    append_entries,
    create_rule_file,
    discover_rule_files,
    lint_rule_file,
)
from settings import DEFAULT_RULE_FILE, IgnoreSettings


def _load_settings(args: argparse.Namespace, root: Path) -> IgnoreSettings:
    overrides: dict[str, object] = {}
    if getattr(args, "no_global", False):
        overrides["use_global_excludes"] = False
    if getattr(args, "rule_files", None):
        overrides["rule_file_names"] = tuple(args.rule_files)
    return IgnoreSettings.from_repo(root, **overrides)


def _load_matcher(args: argparse.Namespace) -> IgnoreMatcher:
    root = find_rule_root()
    return IgnoreMatcher(root, _load_settings(args, root))


def _absolute(raw: str) -> str:
    if os.path.isabs(raw):
        return raw
    return os.path.join(Path.cwd().resolve(), raw)


def _describe(result: MatchResult, path: str) -> str:
    pattern = result.matched_by
    if pattern is None:
        return f"::\t{path}"
    return f"{pattern.location()}:{pattern.source_text}\t{path}"


def cmd_check_ignore(args: argparse.Namespace) -> int:
    matcher = _load_matcher(args)
    any_ignored = False
    for raw in args.paths:
        try:
            result = matcher.check(_absolute(raw))
        except PathOutsideRootError as exc:
            print(f"error: {exc}", file=sys.stderr)
            continue
        any_ignored = any_ignored or result.ignored
        if args.quiet:
            continue
        if args.verbose:
            if result.matched_by is not None or args.non_matching:
                print(_describe(result, raw))
        elif result.ignored:
            print(raw)
    return 0 if any_ignored else 1


def cmd_ls_ignored(args: argparse.Namespace) -> int:
    matcher = _load_matcher(args)
    for path in list_ignored_paths(matcher.root, matcher.rule_set):
        print(path)
    return 0


def cmd_ls_unignored(args: argparse.Namespace) -> int:
    matcher = _load_matcher(args)
    for path in list_unignored_files(matcher.root, matcher.rule_set):
        print(path)
    return 0


def cmd_tracked_ignored(args: argparse.Namespace) -> int:
    matcher = _load_matcher(args)
    for path, result in tracked_ignored_files(matcher.root, matcher.rule_set):
        print(_describe(result, path) if args.verbose else path)
    return 0


def _pattern_base(args: argparse.Namespace, root: Path, rule_file: Path) -> Path:
    """Directory the patterns of ``rule_file`` are anchored to."""
    outer = {
        (common_git_dir(root) / "info" / "exclude").resolve(),
        _load_settings(args, root).excludes_file().resolve(),
    }
    if rule_file.resolve() in outer:
        return root
    return rule_file.parent.resolve()


def cmd_add(args: argparse.Namespace) -> int:
    root = find_rule_root()
    rule_file = Path(_absolute(args.file)) if args.file else root / DEFAULT_RULE_FILE
    base = _pattern_base(args, root, rule_file)
    entries: list[str] = []
    for raw in args.paths:
        try:
            target = normalize(_absolute(raw), root=base)
        except PathOutsideRootError as exc:
            raise PathOutsideRootError(f"{raw} is not under {base}, where {rule_file.name} applies") from exc
        if not target.segments:
            raise ValueError(f"cannot ignore the directory of the rule file itself: {raw}")
        is_dir = target.is_directory or base.joinpath(*target.segments).is_dir()
        entries.append(escape_pattern("/".join(target.segments), is_directory=is_dir))
    for line in append_entries(rule_file, entries):
        print(f"added {line}")
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    directory = Path(args.directory).resolve()
    path = create_rule_file(directory, filename=args.name)
    print(f"rule file: {path}")
    return 0


def cmd_lint(args: argparse.Namespace) -> int:
    if args.files:
        files = [Path(raw) for raw in args.files]
    else:
        root = find_rule_root()
        files = [rule_file.path for rule_file in discover_rule_files(root, _load_settings(args, root))]
    errors = 0
    for path in files:
        if not path.is_file():
            raise FileNotFoundError(f"rule file not found: {path}")
        for diagnostic in lint_rule_file(path):
            print(diagnostic)
            if diagnostic.severity == "error":
                errors += 1
    return 1 if errors else 0
