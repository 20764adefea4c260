"""
hubrepo configuration.

Holds the environment-driven settings, the in-memory credential store shared
by the accessors and the authorizer, and the JSON file the credential record
is persisted to between invocations.
"""

import os
import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CREDENTIAL_FIELDS = ("username", "id", "token")


def default_credentials_path() -> Path:
    """Get the default location of the credential record."""
    return Path.home() / ".config" / "hubrepo" / "credentials.json"


@dataclass(frozen=True)
class Settings:
    """Settings read from the environment."""

    credentials_path: Path = field(default_factory=default_credentials_path)
    default_branch: str = "master"
    github_url: str = "https://github.com"
    api_url: str = "https://api.github.com"
    env_token: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "Settings":
        """Create from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ

        config_path = env.get("HUBREPO_CONFIG")

        return cls(
            credentials_path=Path(config_path).expanduser() if config_path else default_credentials_path(),
            default_branch=env.get("HUBREPO_DEFAULT_BRANCH", "master"),
            github_url=env.get("HUBREPO_GITHUB_URL", "https://github.com").rstrip("/"),
            api_url=env.get("HUBREPO_API_URL", "https://api.github.com").rstrip("/"),
            env_token=env.get("GH_TOKEN") or env.get("GITHUB_TOKEN") or None,
        )

    @property
    def github_host(self) -> str:
        """Host part of the web URL, used to build git remotes."""
        return self.github_url.split("://", 1)[-1]


@dataclass
class ConfigStore:
    """Credential fields for the current invocation.

    One instance is created per command and passed by reference to the git
    accessor, the GitHub accessor and the authorizer, so a credential picked
    up mid-pipeline is seen by every later step. Any subset of the fields
    may be set; a store without a token means "not authenticated".
    """

    username: Optional[str] = None
    id: Optional[int] = None
    token: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ConfigStore":
        """Create from a persisted record, ignoring unknown keys."""
        data = data or {}
        return cls(**{name: data.get(name) for name in CREDENTIAL_FIELDS})

    def to_dict(self) -> dict:
        """Convert to a record containing only the fields that are set."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    def update(self, values: dict) -> None:
        """Overwrite the credential fields present in ``values``."""
        for name in CREDENTIAL_FIELDS:
            if name in values:
                setattr(self, name, values[name])

    def clear(self, names=CREDENTIAL_FIELDS) -> None:
        for name in names:
            if name in CREDENTIAL_FIELDS:
                setattr(self, name, None)

    @property
    def has_token(self) -> bool:
        return bool(self.token)


class CredentialFile:
    """JSON file holding the persisted ``{username, id, token}`` record."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> dict:
        """Load the record, returning an empty dict if there is none."""
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable credential file %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring credential file %s: expected an object", self.path)
            return {}

        return {name: data[name] for name in CREDENTIAL_FIELDS if data.get(name) is not None}

    def save(self, record: dict) -> None:
        """Write the record, readable by the current user only."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {name: record[name] for name in CREDENTIAL_FIELDS if record.get(name) is not None}

        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            json.dump(payload, f, indent=2)
            f.write("\n")
        # O_CREAT only applies the mode to a new file
        os.chmod(self.path, 0o600)

        logger.debug("Saved credentials to %s", self.path)

    def remove(self, names) -> dict:
        """Drop the named fields from the record and return what is left."""
        record = self.load()
        for name in names:
            record.pop(name, None)

        if record:
            self.save(record)
        elif self.path.exists():
            self.path.unlink()
            logger.debug("Removed credential file %s", self.path)

        return record
