"""Code version capture so each fit result can be traced to its code."""

import subprocess
from importlib.metadata import PackageNotFoundError, version


def _git(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["git", *args], capture_output=True, text=True, check=False
    )


def get_code_version() -> str:
    """Short git SHA of HEAD, suffixed "-dirty" when the tree has changes.

    Falls back to "ergmfit-<version>" outside a git checkout and to
    "unknown" when neither source is available.
    """
    try:
        head = _git("rev-parse", "--short", "HEAD")
    except FileNotFoundError:
        head = None

    if head is not None and head.returncode == 0:
        sha = head.stdout.strip()
        status = _git("status", "--porcelain", "--untracked-files=no")
        if status.returncode == 0 and status.stdout.strip():
            sha += "-dirty"
        return sha

    try:
        return f"ergmfit-{version('ergmfit')}"
    except PackageNotFoundError:
        return "unknown"
