from __future__ import annotations

from pathlib import Path

from conftest import run_pyignore, write, write_git_index


def init_repo(root: Path, rules: str) -> None:
    (root / ".git").mkdir()
    write(root / ".gitignore", rules)


def test_check_ignore_lists_ignored_paths(tmp_path: Path) -> None:
    init_repo(tmp_path, "*.log\nbuild/\n!important.log\n")
    (tmp_path / "build").mkdir()

    proc = run_pyignore(tmp_path, "check-ignore", "debug.log", "src/main.py", "build", "build/out.o")
    assert proc.stdout.splitlines() == ["debug.log", "build", "build/out.o"]

    proc = run_pyignore(tmp_path, "check-ignore", "src/main.py", check=False)
    assert proc.returncode == 1
    assert proc.stdout == ""


def test_check_ignore_verbose_shows_deciding_pattern(tmp_path: Path) -> None:
    init_repo(tmp_path, "*.log\nbuild/\n!important.log\n")
    gitignore = tmp_path.resolve() / ".gitignore"

    proc = run_pyignore(tmp_path, "check-ignore", "-v", "important.log", "a/debug.log", check=False)
    assert proc.returncode == 0
    assert proc.stdout.splitlines() == [
        f"{gitignore}:3:!important.log\timportant.log",
        f"{gitignore}:1:*.log\ta/debug.log",
    ]

    proc = run_pyignore(tmp_path, "check-ignore", "-v", "-n", "src/main.py", check=False)
    assert proc.returncode == 1
    assert proc.stdout.splitlines() == ["::\tsrc/main.py"]


def test_check_ignore_quiet(tmp_path: Path) -> None:
    init_repo(tmp_path, "*.log\n")
    proc = run_pyignore(tmp_path, "check-ignore", "-q", "debug.log")
    assert proc.stdout == ""


def test_check_ignore_reads_nested_and_info_exclude(tmp_path: Path) -> None:
    init_repo(tmp_path, "*.log\n")
    write(tmp_path / ".git" / "info" / "exclude", "local.txt\n")
    write(tmp_path / "pkg" / ".gitignore", "!keep.log\n")

    proc = run_pyignore(tmp_path, "check-ignore", "local.txt", "pkg/keep.log", "pkg/other.log", check=False)
    assert proc.stdout.splitlines() == ["local.txt", "pkg/other.log"]


def test_check_ignore_from_subdirectory(tmp_path: Path) -> None:
    init_repo(tmp_path, "/pkg/generated/\n")
    (tmp_path / "pkg" / "generated").mkdir(parents=True)
    proc = run_pyignore(tmp_path / "pkg", "check-ignore", "generated/file.py")
    assert proc.stdout.splitlines() == ["generated/file.py"]


def test_ls_ignored_and_unignored(tmp_path: Path) -> None:
    init_repo(tmp_path, "*.log\nbuild/\n")
    write(tmp_path / "build" / "out.o", "")
    write(tmp_path / "debug.log", "")
    write(tmp_path / "src" / "main.py", "")

    ignored = run_pyignore(tmp_path, "ls-ignored").stdout.splitlines()
    assert ignored == ["build/", "debug.log"]

    unignored = run_pyignore(tmp_path, "ls-unignored").stdout.splitlines()
    assert unignored == [".gitignore", "src/main.py"]


def test_tracked_ignored(tmp_path: Path) -> None:
    init_repo(tmp_path, "*.log\n")
    write_git_index(tmp_path, ["debug.log", "src/main.py"])

    proc = run_pyignore(tmp_path, "tracked-ignored")
    assert proc.stdout.splitlines() == ["debug.log"]


def test_add_appends_escaped_patterns(tmp_path: Path) -> None:
    init_repo(tmp_path, "*.log\n")
    (tmp_path / "build").mkdir()
    write(tmp_path / "we*ird.txt", "")

    proc = run_pyignore(tmp_path, "add", "build", "we*ird.txt", "build")
    assert proc.stdout.splitlines() == ["added /build/", "added /we\\*ird.txt"]
    assert (tmp_path / ".gitignore").read_text(encoding="utf-8") == "*.log\n/build/\n/we\\*ird.txt\n"

    run_pyignore(tmp_path, "check-ignore", "build/x.o")
    proc = run_pyignore(tmp_path, "check-ignore", "weXird.txt", check=False)
    assert proc.returncode == 1


def test_init_creates_template(tmp_path: Path) -> None:
    (tmp_path / ".git").mkdir()
    run_pyignore(tmp_path, "init", "docs")
    assert (tmp_path / "docs" / ".gitignore").read_text(encoding="utf-8") == "# Created by pyignore\n"


def test_lint_reports_problems(tmp_path: Path) -> None:
    init_repo(tmp_path, "[abc\n*.log\n*.log\n")
    proc = run_pyignore(tmp_path, "lint", check=False)
    assert proc.returncode == 1
    lines = proc.stdout.splitlines()
    assert len(lines) == 2
    assert ":1: error: unterminated character class" in lines[0]
    assert ":3: warning: duplicate of line 2" in lines[1]

    write(tmp_path / "clean.gitignore", "*.tmp\n")
    assert run_pyignore(tmp_path, "lint", "clean.gitignore").stdout == ""


def test_errors_are_reported(tmp_path: Path) -> None:
    init_repo(tmp_path, "*.log\n")
    proc = run_pyignore(tmp_path, "lint", "missing.gitignore", check=False)
    assert proc.returncode == 1
    assert "error: rule file not found" in proc.stderr


def test_add_into_nested_rule_file_is_relative_to_it(tmp_path: Path) -> None:
    init_repo(tmp_path, "*.log\n")
    write(tmp_path / "sub" / ".gitignore", "")
    write(tmp_path / "sub" / "x.txt", "")

    proc = run_pyignore(tmp_path, "add", "--file", "sub/.gitignore", "sub/x.txt")
    assert proc.stdout.splitlines() == ["added /x.txt"]
    assert (tmp_path / "sub" / ".gitignore").read_text(encoding="utf-8") == "/x.txt\n"

    proc = run_pyignore(tmp_path, "check-ignore", "sub/x.txt", "x.txt")
    assert proc.stdout.splitlines() == ["sub/x.txt"]

    proc = run_pyignore(tmp_path / "sub", "add", "--file", ".gitignore", "../other.txt", check=False)
    assert proc.returncode == 1
    assert "is not under" in proc.stderr
    assert (tmp_path / "sub" / ".gitignore").read_text(encoding="utf-8") == "/x.txt\n"


def test_add_into_info_exclude_is_relative_to_root(tmp_path: Path) -> None:
    init_repo(tmp_path, "")
    write(tmp_path / ".git" / "info" / "exclude", "")

    proc = run_pyignore(tmp_path, "add", "--file", ".git/info/exclude", "sub/y.txt")
    assert proc.stdout.splitlines() == ["added /sub/y.txt"]
    proc = run_pyignore(tmp_path, "check-ignore", "sub/y.txt")
    assert proc.stdout.splitlines() == ["sub/y.txt"]


def test_several_rule_file_names(tmp_path: Path) -> None:
    init_repo(tmp_path, "*.log\n")
    write(tmp_path / ".dockerignore", "node_modules/\n")
    write(tmp_path / "web" / ".npmignore", "*.map\n")

    proc = run_pyignore(tmp_path, "check-ignore", "a.log", "node_modules/x.js", "web/app.js.map", check=False)
    assert proc.stdout.splitlines() == ["a.log"]

    proc = run_pyignore(
        tmp_path,
        "--rule-file",
        ".gitignore",
        "--rule-file",
        ".dockerignore",
        "--rule-file",
        ".npmignore",
        "check-ignore",
        "a.log",
        "node_modules/x.js",
        "web/app.js.map",
    )
    assert proc.stdout.splitlines() == ["a.log", "node_modules/x.js", "web/app.js.map"]
