"""Helpers shared by the git and GitHub accessors."""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from github import GithubException

from .errors import GitError

logger = logging.getLogger(__name__)


def repo_url(username: str, repo: str, is_login: bool = False, host: str = "github.com") -> str:
    """Build the HTTPS clone URL for ``username/repo``.

    With ``is_login`` the username is embedded so git asks for the matching
    password when pushing.
    """
    login = f"{username}@" if is_login else ""
    return f"https://{login}{host}/{username}/{repo}.git"


def no_auth(error: Exception) -> bool:
    """Check whether a GitHub error means the credentials were rejected."""
    return isinstance(error, GithubException) and error.status == 401


def github_message(error: GithubException) -> str:
    """Pull the API's message out of a PyGithub exception."""
    data = getattr(error, "data", None)
    if isinstance(data, dict) and data.get("message"):
        return data["message"]
    return str(error)


def run_git(args: list[str], cwd: Path, capture: bool = False) -> Optional[str]:
    """
    Run a git command in ``cwd``.

    Output streams to the terminal unless ``capture`` is set, in which case
    stdout is returned stripped.

    Raises:
        GitError: git could not be started or exited non-zero
    """
    cmd = ["git", *args]
    logger.debug("Running %s in %s", " ".join(cmd), cwd)

    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd),
            check=True,
            capture_output=capture,
            text=True,
        )
    except OSError as e:
        raise GitError(f"could not run git in {cwd}: {e}") from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or "").strip() if capture else ""
        message = f"'{' '.join(cmd)}' exited with code {e.returncode}"
        raise GitError(f"{message}: {detail}" if detail else message) from e

    return result.stdout.strip() if capture else None
