"""``DiffSource`` backed by the local git CLI."""

from __future__ import annotations

import logging
import os
import subprocess

from codeintel.errors import DiffUnavailable

logger = logging.getLogger(__name__)


class GitDiffSource:
    """Runs ``git diff <a> <b> -- <path>`` inside a local clone.

    Parameters
    ----------
    repo_path:
        Working tree or bare repository containing both commits.
    timeout:
        Seconds before a single ``git diff`` is abandoned.
    """

    def __init__(self, repo_path: str, timeout: float = 60.0) -> None:
        self.repo_path = os.path.abspath(repo_path)
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        try:
            out = subprocess.check_output(
                ["git", "--no-pager", *args],
                cwd=self.repo_path,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise DiffUnavailable("`git` CLI not found. Install Git or run in an environment with Git available.") from exc
        except subprocess.TimeoutExpired as exc:
            raise DiffUnavailable(f"git command timeout: {' '.join(args)}") from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or b"").decode("utf-8", errors="ignore")
            raise DiffUnavailable(f"git command failed: {' '.join(args)}\n{stderr}") from exc
        return out.decode("utf-8", errors="replace")

    def get_diff(self, commit_a: str, commit_b: str, path: str) -> str:
        logger.debug("git diff %s %s -- %s", commit_a, commit_b, path)
        return self._run("diff", "--no-color", "--no-ext-diff", commit_a, commit_b, "--", path)
