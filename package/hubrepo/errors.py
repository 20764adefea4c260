"""
hubrepo error types.

Collaborators translate library exceptions (subprocess, PyGithub, requests,
json) into these so the authorization provider can tell an operational
failure apart from a programming error.
"""


class HubRepoError(Exception):
    """Base class for failures a pipeline step can report."""


class GitError(HubRepoError):
    """A git command exited non-zero or could not be started."""


class GitHubError(HubRepoError):
    """A GitHub API call failed for a reason other than bad credentials."""

    def __init__(self, message: str, status=None):
        super().__init__(message)
        self.status = status


class MetadataError(HubRepoError):
    """The project metadata file could not be read or written."""


class PreconditionError(HubRepoError):
    """The working tree is not in a state the command can start from."""


class UsageError(HubRepoError):
    """The command line did not name a known command."""
