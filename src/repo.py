from __future__ import annotations

from pathlib import Path

GITFILE_PREFIX = "gitdir:"


class RepositoryNotFoundError(RuntimeError):
    """Raised when no .git directory can be discovered."""


def find_repo_root(start: Path | None = None) -> Path:
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
    raise RepositoryNotFoundError("could not find .git directory from current path")


def _resolve_from(anchor: Path, raw: str) -> Path:
    target = Path(raw.strip())
    return target if target.is_absolute() else (anchor / target).resolve()


def git_dir(repo_root: Path) -> Path:
    """Return the git directory of a working tree.

    Linked worktrees and submodules keep a ``.git`` file holding a
    ``gitdir: <path>`` line instead of the directory itself.
    """
    dot_git = repo_root / ".git"
    if not dot_git.is_file():
        return dot_git
    content = dot_git.read_text(encoding="utf-8").strip()
    if not content.startswith(GITFILE_PREFIX):
        raise RepositoryNotFoundError(f"invalid gitfile format: {dot_git}")
    return _resolve_from(repo_root, content[len(GITFILE_PREFIX) :])


def common_git_dir(repo_root: Path) -> Path:
    """Return the directory shared by all worktrees (``config``, ``info/exclude``)."""
    directory = git_dir(repo_root)
    commondir = directory / "commondir"
    if commondir.is_file():
        return _resolve_from(directory, commondir.read_text(encoding="utf-8"))
    return directory


def find_rule_root(start: Path | None = None) -> Path:
    """Return the enclosing repository root, or ``start`` when there is none."""
    try:
        return find_repo_root(start=start)
    except RepositoryNotFoundError:
        return (start or Path.cwd()).resolve()
