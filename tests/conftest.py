from __future__ import annotations

import hashlib
import os
import struct
import subprocess
import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


def run_pyignore(cwd: Path, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    existing = env.get("PYTHONPATH", "")
    env["PYTHONPATH"] = str(SRC_DIR) if not existing else f"{SRC_DIR}{os.pathsep}{existing}"
    env["HOME"] = str(cwd)
    env["XDG_CONFIG_HOME"] = str(cwd / ".xdg")
    proc = subprocess.run(
        [sys.executable, "-m", "cli", *args],
        cwd=cwd,
        env=env,
        text=True,
        capture_output=True,
    )
    if check and proc.returncode != 0:
        raise AssertionError(
            f"command failed: pyignore {' '.join(args)}\nstdout:\n{proc.stdout}\nstderr:\n{proc.stderr}"
        )
    return proc


def write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def write_git_index(
    repo_root: Path,
    paths: list[str],
    version: int = 2,
    extended: bool = False,
    index_path: Path | None = None,
) -> None:
    payload = bytearray(struct.pack("!4sLL", b"DIRC", version, len(paths)))
    for path in sorted(paths):
        encoded = path.encode()
        flags = min(len(encoded), 0xFFF) | (0x4000 if extended else 0)
        entry = bytearray(struct.pack("!LLLLLLLLLL20sH", 0, 0, 0, 0, 0, 0, 0o100644, 0, 0, 0, b"\x00" * 20, flags))
        if extended:
            entry.extend(b"\x00\x00")
        entry.extend(encoded)
        padded = ((len(entry) + 8) // 8) * 8
        payload.extend(entry.ljust(padded, b"\x00"))
    payload.extend(hashlib.sha1(payload).digest())
    index_path = index_path or repo_root / ".git" / "index"
    index_path.parent.mkdir(parents=True, exist_ok=True)
    index_path.write_bytes(bytes(payload))
