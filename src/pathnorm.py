from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import PurePath

DRIVE_PREFIX = re.compile(r"^[A-Za-z]:/")


class PathOutsideRootError(ValueError):
    """Raised when a path does not live under the rule root."""


@dataclass(frozen=True)
class NormalizedPath:
    segments: tuple[str, ...]
    is_directory: bool = False

    def as_posix(self) -> str:
        rel = "/".join(self.segments)
        return f"{rel}/" if self.is_directory and rel else rel

    def parents(self) -> list[tuple[str, ...]]:
        return [self.segments[:depth] for depth in range(1, len(self.segments))]


def _is_absolute(text: str) -> bool:
    return text.startswith("/") or bool(DRIVE_PREFIX.match(text))


def _segments(text: str, original: str) -> list[str]:
    segments: list[str] = []
    for part in text.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if not segments:
                raise PathOutsideRootError(f"path escapes the root: {original}")
            segments.pop()
            continue
        segments.append(part)
    return segments


def normalize(
    path: str | PurePath,
    root: str | PurePath | None = None,
    is_directory: bool | None = None,
) -> NormalizedPath:
    original = os.fspath(path)
    text = original.replace("\\", "/")
    trailing = text.endswith("/") and text.strip("/") != ""
    if _is_absolute(text):
        if root is None:
            raise PathOutsideRootError(f"absolute path needs a root: {original}")
        root_text = os.fspath(root).replace("\\", "/")
        root_segments = _segments(root_text, root_text)
        segments = _segments(text, original)
        if segments[: len(root_segments)] != root_segments or not _is_absolute(root_text):
            raise PathOutsideRootError(f"path is outside {root_text}: {original}")
        segments = segments[len(root_segments) :]
    else:
        segments = _segments(text, original)
    return NormalizedPath(tuple(segments), trailing or bool(is_directory))
