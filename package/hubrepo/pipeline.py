"""
hubrepo command pipeline.

Picks the workflow for a command (clone, fork then clone, or publish the
local repository) and runs its steps in order behind the authorizer. When a
step after the remote repository was created fails, the new repository is
deleted again.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from .auth import Authorizer
from .config import ConfigStore
from .context import RepositoryContext
from .errors import HubRepoError, PreconditionError, UsageError
from .operations import OperationName, Outcome, StepResult, resolve

logger = logging.getLogger(__name__)

REPO_USAGE = "hubrepo repo <owner> <name> --ext? --unsafe? --debug?"
USAGE = f"{REPO_USAGE}\nhubrepo repo --unsafe? --debug?\nhubrepo logout --debug?"


@dataclass
class UserInput:
    """A parsed command line."""

    cmd: Optional[str]
    args: list = field(default_factory=list)
    unsafe: bool = False
    debug: bool = False
    ext: bool = False


def run_steps(steps: Iterable[Callable[[], StepResult]]) -> StepResult:
    """Run steps in order until one does not succeed, returning its result."""
    result = StepResult.succeeded()
    for step in steps:
        result = step()
        if not result.ok:
            break
    return result


class CommandPipeline:
    """Runs one ``hubrepo`` command.

    ``log`` receives the user-facing messages and is also the primary
    provider's failure handler, so any failed step ends up in front of the
    user.
    """

    def __init__(
        self,
        user_input: UserInput,
        context: RepositoryContext,
        log: Callable,
        git,
        github,
        authorizer: Authorizer,
        store: ConfigStore,
    ):
        self.input = user_input
        self.context = context
        self.log = log
        self.git = git
        self.github = github
        self.authorizer = authorizer
        self.store = store
        self.auth = authorizer.create_provider(store, log)
        self.completed = []

    def op(self, name: OperationName) -> Callable:
        return resolve(name, self.git, self.github)

    def step(self, provider, name: OperationName, *args) -> StepResult:
        """Run one operation behind ``provider``, remembering it if it succeeded."""
        result = provider(self.op(name))(*args)
        if result.ok:
            self.completed.append(name)
        return result

    def run(self) -> StepResult:
        if self.input.cmd == "logout":
            revoked = self.authorizer.revoke(self.log, self.store)
            if revoked is False:
                return StepResult.failed(HubRepoError("logout failed"))
            return StepResult.succeeded()

        if self.input.cmd != "repo":
            return self._reject(USAGE, UsageError)

        if self.input.args:
            return self.clone_existing()
        return self.publish_local()

    def should_restrict(self) -> bool:
        """Branch protection is skipped with --unsafe, and for plain clones."""
        return not self.input.unsafe and (not self.input.args or self.input.ext)

    def restrict_step(self) -> StepResult:
        args = self.input.args
        repo_name = args[1] if len(args) > 1 else None
        return self.step(self.auth, OperationName.RESTRICT_BRANCH, repo_name)

    def clone_existing(self) -> StepResult:
        """Clone ``<owner> <name>``, forking it first with --ext."""
        args = self.input.args
        if self.context.is_repo:
            return self._reject("already a repo")
        if len(args) != 2:
            return self._reject(REPO_USAGE)

        owner, repo = args
        steps = []
        if self.input.ext:
            steps.append(lambda: self.step(self.auth, OperationName.FORK_REMOTE_REPO, owner, repo))
        steps.append(lambda: self.step(self.auth, OperationName.CLONE_REPO, owner, repo))
        if self.should_restrict():
            steps.append(self.restrict_step)

        return self._finish(run_steps(steps))

    def publish_local(self) -> StepResult:
        """Create a GitHub repository for the local one and push to it."""
        if not self.context.is_repo:
            return self._reject("not in a repo")
        if not self.context.branch:
            return self._reject("no commits")
        if self.context.has_origin:
            return self._reject("already has origin")

        created = self.step(self.auth, OperationName.CREATE_REMOTE_REPO)
        if not created.ok:
            return self._finish(created)

        auth_new = self.authorizer.create_provider(self.store, self.compensate)
        steps = [
            lambda: self.step(auth_new, OperationName.UPDATE_METADATA_FILE),
            lambda: self.step(auth_new, OperationName.PUSH_AND_TRACK),
        ]
        if self.should_restrict():
            steps.append(self.restrict_step)

        return self._finish(run_steps(steps))

    def compensate(self, error: Exception) -> None:
        """Delete the repository created by this run, then report ``error``.

        The deletion is best effort; its own failure is logged by the
        primary provider and does not replace ``error``.
        """
        logger.debug("Publishing failed, deleting %s", self.context.name)
        deleted = self.auth(self.op(OperationName.DELETE_REMOTE_REPO))()
        if not deleted.ok:
            logger.warning("Could not delete %s after a failed publish", self.context.name)
        self.log(error)

    def _reject(self, message: str, error_type=PreconditionError) -> StepResult:
        self.log(message)
        return StepResult.failed(error_type(message))

    def _finish(self, result: StepResult) -> StepResult:
        logger.debug("Pipeline finished: %s", result.outcome.value)
        # a late decline carries the steps that already changed something
        if result.outcome is Outcome.DECLINED and self.completed:
            return StepResult(Outcome.DECLINED, value=tuple(self.completed))
        return result
