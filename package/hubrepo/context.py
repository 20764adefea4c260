"""
hubrepo repository context.

Inspects the working directory to find out which workflow applies: whether
it is inside a git repository, which branch is checked out, and which
remotes exist.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import GitError
from .util import run_git

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepositoryContext:
    """State of the repository a command runs in."""

    git_root: Path
    name: Optional[str] = None
    branch: Optional[str] = None
    remotes: Optional[dict] = None

    @property
    def is_repo(self) -> bool:
        return self.name is not None

    @property
    def has_origin(self) -> bool:
        return bool(self.remotes and self.remotes.get("origin"))


def _git(args: list[str], cwd: Path) -> Optional[str]:
    """Run a read-only git query, returning None if it fails."""
    try:
        return run_git(args, cwd, capture=True)
    except GitError as e:
        logger.debug("git %s: %s", " ".join(args), e)
        return None


def parse_remotes(output: str) -> Optional[dict]:
    """Parse ``git remote -v`` output into a name to fetch URL mapping."""
    remotes = {}
    for line in output.splitlines():
        parts = line.split()
        if len(parts) >= 2 and (len(parts) < 3 or parts[2] == "(fetch)"):
            remotes[parts[0]] = parts[1]
    return remotes or None


def inspect_repo(cwd: Path) -> RepositoryContext:
    """
    Describe the git repository containing ``cwd``.

    Outside a repository only ``git_root`` is set, to ``cwd``. ``branch`` is
    only set once the repository has a commit.
    """
    cwd = Path(cwd)
    if not cwd.is_dir():
        raise GitError(f"{cwd} is not a directory")

    top = _git(["rev-parse", "--show-toplevel"], cwd)
    if not top:
        return RepositoryContext(git_root=cwd)

    git_root = Path(top)
    branch = None
    if _git(["rev-parse", "--verify", "-q", "HEAD"], git_root):
        # Detached HEAD has no branch name to come back to
        branch = _git(["symbolic-ref", "--short", "-q", "HEAD"], git_root) or None

    remotes = parse_remotes(_git(["remote", "-v"], git_root) or "")

    return RepositoryContext(
        git_root=git_root,
        name=git_root.name,
        branch=branch,
        remotes=remotes,
    )
