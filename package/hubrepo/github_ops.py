"""
hubrepo GitHub accessor.

Repository and credential operations against the GitHub REST API. A 401
from GitHub is reported as a decline (``None``) rather than an error, so a
missing and a rejected credential look the same to the pipeline.
"""

import logging
from typing import Optional

import requests
from github import Auth, Github, GithubException

from .config import CREDENTIAL_FIELDS, ConfigStore, Settings
from .errors import GitHubError
from .util import github_message, no_auth

logger = logging.getLogger(__name__)

REQUIRED_SCOPES = ("repo", "delete_repo")
API_VERSION = "2022-11-28"


class GitHub:
    """GitHub operations for the repository called ``name``.

    The client is built from the shared config store on every call, so a
    token obtained after construction is picked up.
    """

    def __init__(self, name: Optional[str], store: ConfigStore, settings: Optional[Settings] = None):
        self.name = name
        self.store = store
        self.settings = settings or Settings()

    def _client(self, token: Optional[str] = None) -> Github:
        token = token or self.store.token
        if token:
            return Github(auth=Auth.Token(token), base_url=self.settings.api_url)
        return Github(base_url=self.settings.api_url)

    def _request(self, action: str, call) -> Optional[bool]:
        """Run a PyGithub call, mapping 401 to a decline and other errors to GitHubError."""
        try:
            call()
        except GithubException as e:
            if no_auth(e):
                logger.debug("%s declined: credentials rejected", action)
                return None
            raise GitHubError(f"{action} failed: {github_message(e)}", status=e.status) from e
        except requests.RequestException as e:
            raise GitHubError(f"{action} failed: {e}") from e

        logger.debug("%s succeeded", action)
        return True

    def get_auth(self, answers: dict, config: dict) -> Optional[dict]:
        """
        Exchange prompted answers for a credential record.

        Args:
            answers: Values entered for the credential prompt (``token`` and
                optionally ``username``)
            config: The currently persisted record

        Returns:
            ``{username, id, token}``, or None if the token is missing, was
            rejected, or belongs to a different user than the one entered
        """
        token = (answers.get("token") or "").strip()
        username = (answers.get("username") or "").strip()
        if not token:
            return None

        gh = self._client(token)
        try:
            user = gh.get_user()
            login, user_id = user.login, user.id
        except GithubException as e:
            if no_auth(e):
                return None
            raise GitHubError(f"Authentication failed: {github_message(e)}", status=e.status) from e
        except requests.RequestException as e:
            raise GitHubError(f"Authentication failed: {e}") from e

        if username and username.lower() != login.lower():
            logger.warning("Token belongs to %s, not %s", login, username)
            return None

        scopes = gh.oauth_scopes
        if scopes is not None:
            missing = [scope for scope in REQUIRED_SCOPES if scope not in scopes]
            if missing:
                logger.warning("Token is missing scopes: %s", ", ".join(missing))

        return {"username": login, "id": user_id, "token": token}

    def clear_auth(self, config: dict) -> Optional[list]:
        """
        Revoke the stored token on GitHub.

        Returns:
            Names of the fields to drop from the record, or None if GitHub
            rejected the request
        """
        token = config.get("token")
        if not token:
            raise GitHubError("no token present")

        try:
            response = requests.post(
                f"{self.settings.api_url}/credentials/revoke",
                headers={
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": API_VERSION,
                },
                json={"credentials": [token]},
                timeout=30,
            )
        except requests.RequestException as e:
            raise GitHubError(f"Revoking token failed: {e}") from e

        if response.status_code == 401:
            return None
        if not response.ok:
            raise GitHubError(
                f"Revoking token failed: {response.status_code} - {response.text}",
                status=response.status_code,
            )

        return list(CREDENTIAL_FIELDS)

    def create(self) -> Optional[bool]:
        """Create a repository named after the working tree."""
        if not self.store.username:
            return None
        return self._request(
            f"Creating {self.name}",
            lambda: self._client().get_user().create_repo(self.name),
        )

    def fork(self, owner: str, repo: str) -> Optional[bool]:
        """Fork ``owner/repo`` into the user's account."""
        if not self.store.username:
            return None
        return self._request(
            f"Forking {owner}/{repo}",
            lambda: self._client().get_repo(f"{owner}/{repo}").create_fork(),
        )

    def restrict(self, repo_name: Optional[str]) -> Optional[bool]:
        """
        Protect the default branch of one of the user's repositories.

        Pushes to the branch must pass status checks against an up-to-date
        base, and the rule applies to admins too.

        Args:
            repo_name: Repository to protect, or None for the one named
                after the working tree
        """
        username = self.store.username
        if not username:
            return None

        full_name = f"{username}/{repo_name or self.name}"

        def protect():
            repo = self._client().get_repo(full_name)
            branch = repo.get_branch(repo.default_branch)
            branch.edit_protection(strict=True, contexts=[], enforce_admins=True)

        return self._request(f"Protecting {full_name}", protect)

    def delete(self) -> Optional[bool]:
        """Delete the repository named after the working tree."""
        username = self.store.username
        if not username:
            return None
        full_name = f"{username}/{self.name}"
        return self._request(
            f"Deleting {full_name}",
            lambda: self._client().get_repo(full_name).delete(),
        )
