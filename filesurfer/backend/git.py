"""Git-tracked file listing for git-only mode."""

from __future__ import annotations

import os
import shutil
import subprocess

from ..errors import GitFallbackError


def git_tracked_files(root: str) -> list[str]:
    """Return absolute paths of files in the git index under ``root``.

    Raises ``GitFallbackError`` when git is missing or ``root`` is not a
    work tree; callers fall back to the unfiltered scan.
    """
    if shutil.which("git") is None:
        raise GitFallbackError("git executable not found")
    try:
        proc = subprocess.run(
            ["git", "-C", root, "ls-files", "-z", "--cached"],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=True,
        )
    except subprocess.CalledProcessError as exc:
        message = exc.stderr.decode("utf-8", errors="replace").strip() if exc.stderr else str(exc)
        raise GitFallbackError(f"Failed to open git repository: {message}") from exc
    except OSError as exc:
        raise GitFallbackError(f"Failed to run git: {exc}") from exc

    tracked: list[str] = []
    for raw in proc.stdout.split(b"\x00"):
        if not raw:
            continue
        relative = raw.decode("utf-8", errors="replace")
        tracked.append(os.path.join(root, *relative.split("/")))
    return tracked


__all__ = ["git_tracked_files"]
