from __future__ import annotations

import argparse
import logging
import sys

from commands import (
    cmd_add,
    cmd_check_ignore,
    cmd_init,
    cmd_lint,
    cmd_ls_ignored,
    cmd_ls_unignored,
    cmd_tracked_ignored,
)
from settings import DEFAULT_RULE_FILE

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pyignore", description="Evaluate and edit gitignore-style rules")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--no-global", action="store_true", help="Skip the user's global excludes file")
    parser.add_argument(
        "--rule-file",
        dest="rule_files",
        action="append",
        metavar="NAME",
        help=f"Per-directory rule file name to read; repeatable (default: {DEFAULT_RULE_FILE})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("check-ignore", help="Report which paths are ignored")
    check_parser.add_argument("-v", "--verbose", action="store_true", help="Show the deciding pattern")
    check_parser.add_argument(
        "-n",
        "--non-matching",
        action="store_true",
        help="With --verbose, also list paths no pattern matched",
    )
    check_parser.add_argument("-q", "--quiet", action="store_true", help="Only set the exit status")
    check_parser.add_argument("paths", nargs="+", help="Paths to check")
    check_parser.set_defaults(func=cmd_check_ignore)

    ls_ignored_parser = subparsers.add_parser("ls-ignored", help="List ignored paths in the working tree")
    ls_ignored_parser.set_defaults(func=cmd_ls_ignored)

    ls_unignored_parser = subparsers.add_parser("ls-unignored", help="List files that are not ignored")
    ls_unignored_parser.set_defaults(func=cmd_ls_unignored)

    tracked_parser = subparsers.add_parser("tracked-ignored", help="List tracked files matched by ignore rules")
    tracked_parser.add_argument("-v", "--verbose", action="store_true", help="Show the deciding pattern")
    tracked_parser.set_defaults(func=cmd_tracked_ignored)

    add_parser = subparsers.add_parser("add", help="Append patterns ignoring the given paths")
    add_parser.add_argument("-f", "--file", help=f"Rule file to edit (default: {DEFAULT_RULE_FILE} at the root)")
    add_parser.add_argument("paths", nargs="+", help="Files or directories to ignore")
    add_parser.set_defaults(func=cmd_add)

    init_parser = subparsers.add_parser("init", help="Create a rule file from the template")
    init_parser.add_argument("directory", nargs="?", default=".", help="Directory for the rule file")
    init_parser.add_argument("--name", default=DEFAULT_RULE_FILE, help="Rule file name")
    init_parser.set_defaults(func=cmd_init)

    lint_parser = subparsers.add_parser("lint", help="Report syntax errors and duplicate entries")
    lint_parser.add_argument("files", nargs="*", help="Rule files (default: every file that applies)")
    lint_parser.set_defaults(func=cmd_lint)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING, format=LOG_FORMAT)
    try:
        return int(args.func(args))
    except Exception as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
