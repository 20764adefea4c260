"""
hubrepo git accessor.

Local git operations used by the pipeline. Only ``init``, ``clone`` and
``update_package`` need a username; each returns ``None`` without touching
git when the config store has none.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from .config import ConfigStore, Settings
from .errors import GitError, MetadataError
from .util import repo_url, run_git

logger = logging.getLogger(__name__)

METADATA_FILE = "package.json"
METADATA_COMMIT_MESSAGE = "updates repository information in package.json"


class Git:
    """Git operations on the repository at ``git_root``."""

    def __init__(
        self,
        git_root: Path,
        name: Optional[str],
        branch: Optional[str],
        store: ConfigStore,
        settings: Optional[Settings] = None,
    ):
        self.git_root = Path(git_root)
        self.name = name
        self.branch = branch
        self.store = store
        self.settings = settings or Settings()

    def _url(self, username: str, repo: str, is_login: bool = False) -> str:
        return repo_url(username, repo, is_login, host=self.settings.github_host)

    def init(self) -> Optional[bool]:
        """
        Add the new GitHub repository as origin and push the default branch.

        The working tree ends up on the branch it started on. If the push
        fails, origin is removed again so the command can be retried.

        Returns:
            True on success, None if no username is configured

        Raises:
            GitError: any git step failed
        """
        username = self.store.username
        if not username:
            return None

        default_branch = self.settings.default_branch
        origin = self._url(username, self.name, is_login=True)

        run_git(["remote", "add", "origin", origin], self.git_root)
        try:
            run_git(["checkout", default_branch, "-q"], self.git_root)
            run_git(["push", "--set-upstream", "origin", default_branch, "--progress"], self.git_root)
        except GitError:
            logger.debug("Push failed, removing origin from %s", self.git_root)
            try:
                run_git(["remote", "remove", "origin"], self.git_root)
            except GitError as e:
                logger.debug("Could not remove origin: %s", e)
            raise
        finally:
            if self.branch:
                run_git(["checkout", self.branch, "-q"], self.git_root)

        return True

    def clone(self, owner: str, repo: str) -> Optional[bool]:
        """
        Clone the user's copy of ``repo`` into ``<git_root>/<owner>/<repo>``.

        An ``upstream`` remote is added pointing at the owner's repository so
        a fork can be kept in sync.
        """
        username = self.store.username
        if not username:
            return None

        parent = self.git_root / owner
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise GitError(f"could not create {parent}: {e}") from e

        run_git(["clone", self._url(username, repo), "--progress"], parent)
        run_git(["remote", "add", "upstream", self._url(owner, repo)], parent / repo)

        return True

    def update_package(self) -> Optional[bool]:
        """Point package.json at the new GitHub repository and commit it.

        A repository without a package.json has nothing to update.
        """
        username = self.store.username
        if not username:
            return None

        pkg_path = self.git_root / METADATA_FILE
        if not pkg_path.exists():
            logger.debug("No %s in %s, nothing to update", METADATA_FILE, self.git_root)
            return True

        try:
            pkg = json.loads(pkg_path.read_text())
        except (OSError, ValueError) as e:
            raise MetadataError(f"could not read {pkg_path}: {e}") from e

        if not isinstance(pkg, dict):
            raise MetadataError(f"{pkg_path} does not contain a JSON object")

        git_url = self._url(username, self.name)
        web_url = git_url[:-4]
        pkg["homepage"] = f"{web_url}#readme"
        pkg["bugs"] = f"{web_url}/issues"
        pkg["repository"] = {
            "type": "git",
            "url": git_url,
        }

        try:
            pkg_path.write_text(f"{json.dumps(pkg, indent=2, ensure_ascii=False)}\n")
        except OSError as e:
            raise MetadataError(f"could not write {pkg_path}: {e}") from e

        run_git(["add", METADATA_FILE], self.git_root)
        if not run_git(["status", "--porcelain", "--", METADATA_FILE], self.git_root, capture=True):
            logger.debug("%s already points at %s", METADATA_FILE, web_url)
            return True
        run_git(["commit", "-m", METADATA_COMMIT_MESSAGE], self.git_root, capture=True)

        return True
