"""
hubrepo authorization.

The ``Authorizer`` makes sure a GitHub credential is available before an
operation runs, prompting for one and persisting it when it is not. Its
providers wrap operations into authorized steps that report a
``StepResult`` and hand failures to a per-provider failure handler.
"""

import functools
import logging
from getpass import getpass
from typing import Callable, Optional

from .config import ConfigStore, CredentialFile
from .errors import HubRepoError
from .operations import StepResult

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


def get_props() -> dict:
    """Prompts shown when a credential is needed."""
    return {
        "username": {"message": "Enter Github username"},
        "token": {"message": "Enter Github personal access token", "hidden": True},
    }


def prompt_credentials(props: dict) -> Optional[dict]:
    """
    Ask the user for each field in ``props``.

    Returns:
        The entered values, or None if the user entered nothing (or input
        was closed), which means they declined to log in
    """
    answers = {}
    try:
        for name, spec in props.items():
            message = f"{spec['message']}: "
            value = getpass(message) if spec.get("hidden") else input(message)
            answers[name] = value.strip()
    except EOFError:
        return None

    if not any(answers.values()):
        return None
    return answers


class AuthProvider:
    """Wraps operations so they run with a resolved credential.

    ``on_failure`` is called with the error the first time any operation
    wrapped by this provider fails; later failures are only returned.
    """

    def __init__(self, authorizer: "Authorizer", store: ConfigStore, on_failure: Callable):
        self.authorizer = authorizer
        self.store = store
        self.on_failure = on_failure
        self.failed = False

    def wrap(self, operation: Callable) -> Callable:
        """Return an authorized version of ``operation`` with the same arguments."""
        name = getattr(operation, "__name__", repr(operation))

        @functools.wraps(operation)
        def authorized(*args) -> StepResult:
            try:
                if not self.authorizer.authorize(self.store):
                    logger.debug("No credential for %s, delegating anyway", name)
                result = StepResult.from_value(operation(*args))
            except HubRepoError as e:
                logger.debug("%s failed: %s", name, e)
                self._fail(e)
                return StepResult.failed(e)

            logger.debug("%s %s", name, result.outcome.value)
            return result

        return authorized

    __call__ = wrap

    def _fail(self, error: HubRepoError) -> None:
        if self.failed:
            return
        self.failed = True
        self.on_failure(error)


class Authorizer:
    """Resolves, persists and revokes the GitHub credential."""

    def __init__(
        self,
        props: dict,
        get_auth: Callable,
        clear_auth: Callable,
        credentials: CredentialFile,
        prompt: Callable = prompt_credentials,
        env_token: Optional[str] = None,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.props = props
        self.get_auth = get_auth
        self.clear_auth = clear_auth
        self.credentials = credentials
        self.prompt = prompt
        self.env_token = env_token
        self.max_attempts = max_attempts

    def get_config(self) -> dict:
        """Get a copy of the persisted credential record."""
        return dict(self.credentials.load())

    def create_provider(self, store: ConfigStore, on_failure: Callable) -> AuthProvider:
        return AuthProvider(self, store, on_failure)

    def authorize(self, store: ConfigStore) -> bool:
        """
        Make sure ``store`` holds a token.

        Uses the token already in the store, then a token from the
        environment, then prompts, re-prompting while GitHub rejects what
        was entered. A new credential is written into ``store`` in place and
        persisted.

        Returns:
            True if a credential is available, False if the user declined or
            every attempt was rejected

        Raises:
            HubRepoError: the credential exchange itself failed
        """
        if store.has_token:
            return True

        if self.env_token:
            fields = self.get_auth({"token": self.env_token}, store.to_dict())
            if fields:
                self._accept(store, fields)
                return True
            logger.warning("Token from the environment was rejected")

        for attempt in range(1, self.max_attempts + 1):
            answers = self.prompt(self.props)
            if not answers:
                logger.debug("Credential prompt declined")
                return False

            fields = self.get_auth(answers, store.to_dict())
            if fields:
                self._accept(store, fields)
                return True

            print("Invalid credentials, try again" if attempt < self.max_attempts else "Invalid credentials")

        return False

    def _accept(self, store: ConfigStore, fields: dict) -> None:
        store.update(fields)
        self.credentials.save(store.to_dict())
        logger.debug("Authenticated as %s", store.username)

    def revoke(self, log: Callable, store: Optional[ConfigStore] = None) -> Optional[bool]:
        """
        Revoke the persisted token and forget it.

        The revoked fields are dropped from the credential file and from
        ``store``, when given. Does nothing when no token is persisted. The
        outcome, including errors, is reported through ``log``.
        """
        config = self.get_config()
        if not config.get("token"):
            logger.debug("No stored credential to revoke")
            return None

        try:
            fields = self.clear_auth(config)
        except HubRepoError as e:
            log(e)
            return False

        if fields is None:
            log("GitHub rejected the stored token; credentials were kept")
            return False

        self.credentials.remove(fields)
        if store is not None:
            store.clear(fields)
        log("Logged out")
        return True
