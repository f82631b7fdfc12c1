from __future__ import annotations

import hashlib
import os
import struct
from collections.abc import Iterator
from pathlib import Path

from ignore import MatchResult, RuleSet
from pathnorm import NormalizedPath
from repo import git_dir

INDEX_SIGNATURE = b"DIRC"
SUPPORTED_VERSIONS = {2, 3}
INDEX_HEADER = struct.Struct("!4sLL")
INDEX_ENTRY_HEAD = struct.Struct("!LLLLLLLLLL20sH")
EXTENDED_FLAG = 0x4000


def _index_path(repo_root: Path) -> Path:
    return git_dir(repo_root) / "index"


def read_index_paths(repo_root: Path) -> list[str]:
    path = _index_path(repo_root)
    if not path.is_file():
        return []
    data = path.read_bytes()
    if len(data) < 32:
        raise ValueError("index file is too short")
    if hashlib.sha1(data[:-20]).digest() != data[-20:]:
        raise ValueError("invalid index checksum")
    signature, version, num_entries = INDEX_HEADER.unpack(data[:12])
    if signature != INDEX_SIGNATURE:
        raise ValueError("invalid index signature")
    if version not in SUPPORTED_VERSIONS:
        raise ValueError(f"unsupported index version {version}")

    paths: list[str] = []
    body = data[12:-20]
    i = 0
    while len(paths) < num_entries and i + INDEX_ENTRY_HEAD.size <= len(body):
        flags = INDEX_ENTRY_HEAD.unpack(body[i : i + INDEX_ENTRY_HEAD.size])[-1]
        path_start = i + INDEX_ENTRY_HEAD.size
        if version >= 3 and flags & EXTENDED_FLAG:
            path_start += 2
        path_end = body.find(b"\x00", path_start)
        if path_end == -1:
            raise ValueError("unterminated index path entry")
        paths.append(body[path_start:path_end].decode(errors="replace"))
        entry_len = path_end - i
        i += ((entry_len + 8) // 8) * 8
    if len(paths) != num_entries:
        raise ValueError("invalid number of index entries")
    return paths


def walk_tree(repo_root: Path, rule_set: RuleSet) -> Iterator[tuple[str, bool, MatchResult]]:
    """Yield ``(relative_path, is_dir, result)`` for the working tree.

    Ignored directories are reported once and not descended into.
    """
    for dirpath, dirnames, filenames in os.walk(repo_root):
        base = Path(dirpath).relative_to(repo_root).parts
        kept: list[str] = []
        for name in sorted(dirnames):
            if name == ".git":
                continue
            segments = base + (name,)
            result = rule_set.evaluate(NormalizedPath(segments, True))
            yield "/".join(segments), True, result
            if not result.ignored:
                kept.append(name)
        dirnames[:] = kept
        for name in sorted(filenames):
            if name == ".git":
                continue
            segments = base + (name,)
            yield "/".join(segments), False, rule_set.evaluate(NormalizedPath(segments, False))


def list_unignored_files(repo_root: Path, rule_set: RuleSet) -> list[str]:
    return sorted(path for path, is_dir, result in walk_tree(repo_root, rule_set) if not is_dir and not result.ignored)


def list_ignored_paths(repo_root: Path, rule_set: RuleSet) -> list[str]:
    ignored: list[str] = []
    for path, is_dir, result in walk_tree(repo_root, rule_set):
        if result.ignored:
            ignored.append(f"{path}/" if is_dir else path)
    return sorted(ignored)


def tracked_ignored_files(repo_root: Path, rule_set: RuleSet) -> list[tuple[str, MatchResult]]:
    tracked: list[tuple[str, MatchResult]] = []
    for path in read_index_paths(repo_root):
        result = rule_set.evaluate(path)
        if result.ignored:
            tracked.append((path, result))
    return tracked
