from __future__ import annotations

import configparser
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from repo import common_git_dir

logger = logging.getLogger(__name__)

DEFAULT_RULE_FILE = ".gitignore"


@dataclass(frozen=True)
class IgnoreSettings:
    ignore_case: bool = False
    rule_file_names: tuple[str, ...] = (DEFAULT_RULE_FILE,)
    use_info_exclude: bool = True
    use_global_excludes: bool = True
    global_excludes_file: Path | None = None
    extra_rules: tuple[str, ...] = ()

    @classmethod
    def from_repo(cls, repo_root: Path, **overrides) -> IgnoreSettings:
        config = load_git_config(repo_root)
        values: dict[str, object] = {
            "ignore_case": _get_bool(config, "core", "ignorecase"),
        }
        excludes = _unquote(config.get("core", "excludesfile", fallback=""))
        if excludes:
            values["global_excludes_file"] = Path(os.path.expanduser(excludes))
        values.update(overrides)
        return cls(**values)

    def excludes_file(self) -> Path:
        if self.global_excludes_file is not None:
            return self.global_excludes_file
        return default_excludes_file()


def default_excludes_file() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME", "").strip()
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "git" / "ignore"


def _user_config_paths() -> list[Path]:
    xdg = os.environ.get("XDG_CONFIG_HOME", "").strip()
    xdg_base = Path(xdg) if xdg else Path.home() / ".config"
    return [xdg_base / "git" / "config", Path.home() / ".gitconfig"]


def load_git_config(repo_root: Path | None = None) -> configparser.ConfigParser:
    config = configparser.ConfigParser(strict=False, interpolation=None)
    paths = _user_config_paths()
    if repo_root is not None:
        paths.append(common_git_dir(repo_root) / "config")
    for path in paths:
        if not path.is_file():
            continue
        try:
            config.read(path, encoding="utf-8")
        except configparser.Error as exc:
            logger.warning("could not parse git config %s: %s", path, exc)
    return config


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        value = value[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return value


def _get_bool(config: configparser.ConfigParser, section: str, option: str) -> bool:
    try:
        return config.getboolean(section, option, fallback=False)
    except ValueError:
        logger.warning("ignoring non-boolean %s.%s value", section, option)
        return False
