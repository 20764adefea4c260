"""
hubrepo operation set.

The fixed catalog of operations the pipeline can run, and the three-way
outcome every authorized step reports.

An operation is a bound accessor method. It returns ``True`` (or another
value) on success and ``None`` when it declined because no GitHub username
is configured, and raises a ``HubRepoError`` when it was attempted and failed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional


class Outcome(Enum):
    """How a pipeline step ended."""
    SUCCEEDED = "succeeded"
    DECLINED = "declined"  # Nothing attempted: no usable credential
    FAILED = "failed"      # Attempted and failed


class OperationName(Enum):
    """Names of the operations the pipeline knows about."""
    CREATE_REMOTE_REPO = "create-remote-repo"
    FORK_REMOTE_REPO = "fork-remote-repo"
    CLONE_REPO = "clone-repo"
    RESTRICT_BRANCH = "restrict-branch"
    DELETE_REMOTE_REPO = "delete-remote-repo"
    PUSH_AND_TRACK = "push-and-track"
    UPDATE_METADATA_FILE = "update-metadata-file"


@dataclass(frozen=True)
class OperationSpec:
    """Declared signature and side effect of one operation."""

    name: OperationName
    collaborator: str  # "git" or "github"
    method: str
    params: tuple = ()
    side_effect: str = ""


CATALOG = {
    spec.name: spec
    for spec in (
        OperationSpec(
            OperationName.CREATE_REMOTE_REPO, "github", "create",
            side_effect="creates a repository named after the working tree on the user's account",
        ),
        OperationSpec(
            OperationName.FORK_REMOTE_REPO, "github", "fork", ("owner", "repo_name"),
            side_effect="forks owner/repo_name into the user's account",
        ),
        OperationSpec(
            OperationName.CLONE_REPO, "git", "clone", ("owner", "repo_name"),
            side_effect="clones the user's copy into <owner>/<repo_name> and adds an upstream remote",
        ),
        OperationSpec(
            OperationName.RESTRICT_BRANCH, "github", "restrict", ("repo_name",),
            side_effect="protects the default branch of the user's repository",
        ),
        OperationSpec(
            OperationName.DELETE_REMOTE_REPO, "github", "delete",
            side_effect="deletes the repository named after the working tree",
        ),
        OperationSpec(
            OperationName.PUSH_AND_TRACK, "git", "init",
            side_effect="adds origin and pushes the default branch to it",
        ),
        OperationSpec(
            OperationName.UPDATE_METADATA_FILE, "git", "update_package",
            side_effect="points package.json at the new repository and commits it",
        ),
    )
}


def resolve(name: OperationName, git, github) -> Callable:
    """Get the bound accessor method implementing ``name``."""
    spec = CATALOG[name]
    target = git if spec.collaborator == "git" else github
    return getattr(target, spec.method)


@dataclass(frozen=True)
class StepResult:
    """Outcome of one authorized step, with its value or error."""

    outcome: Outcome
    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def from_value(cls, value) -> "StepResult":
        """Map an operation's return value to a result."""
        if value is None:
            return cls(Outcome.DECLINED)
        return cls(Outcome.SUCCEEDED, value=value)

    @classmethod
    def failed(cls, error: BaseException) -> "StepResult":
        return cls(Outcome.FAILED, error=error)

    @classmethod
    def succeeded(cls, value=True) -> "StepResult":
        return cls(Outcome.SUCCEEDED, value=value)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCEEDED
