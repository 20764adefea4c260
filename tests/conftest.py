"""Shared fixtures for the hubrepo test suite."""

import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from hubrepo.auth import Authorizer, get_props
from hubrepo.config import ConfigStore, CredentialFile, Settings
from hubrepo.context import RepositoryContext
from hubrepo.pipeline import CommandPipeline, UserInput

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


class FakeCollaborator:
    """Records calls into a shared list and returns canned results.

    ``results`` maps a method name to its return value, or to an exception
    instance to raise. Unlisted methods succeed.
    """

    def __init__(self, calls: list, results: dict):
        self.calls = calls
        self.results = results

    def _call(self, name, *args):
        self.calls.append((name, *args))
        result = self.results.get(name, True)
        if isinstance(result, BaseException):
            raise result
        return result


class FakeGit(FakeCollaborator):
    def init(self):
        return self._call("init")

    def clone(self, owner, repo):
        return self._call("clone", owner, repo)

    def update_package(self):
        return self._call("update_package")


class FakeGitHub(FakeCollaborator):
    def create(self):
        return self._call("create")

    def fork(self, owner, repo):
        return self._call("fork", owner, repo)

    def restrict(self, repo_name):
        return self._call("restrict", repo_name)

    def delete(self):
        return self._call("delete")


class CountingAuthorizer(Authorizer):
    """Authorizer that counts how often a credential was resolved."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.authorize_calls = 0

    def authorize(self, store):
        self.authorize_calls += 1
        return super().authorize(store)


@dataclass
class Harness:
    pipeline: CommandPipeline
    authorizer: CountingAuthorizer
    calls: list = field(default_factory=list)
    messages: list = field(default_factory=list)


def no_prompt(props):
    raise AssertionError("unexpected credential prompt")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(credentials_path=tmp_path / "config" / "credentials.json")


@pytest.fixture
def store() -> ConfigStore:
    return ConfigStore(username="alice", id=42, token="ghp_secret")


@pytest.fixture
def publish_context(tmp_path) -> RepositoryContext:
    return RepositoryContext(git_root=tmp_path, name="x", branch="main", remotes={})


@pytest.fixture
def make_pipeline(tmp_path, settings, store):
    """Build a pipeline over fake collaborators.

    Returns a factory taking the command line pieces, the repository
    context, canned results and an optional prompt.
    """

    def make(args=(), cmd="repo", ext=False, unsafe=False, context=None, results=None,
             prompt=no_prompt, config_store=None) -> Harness:
        calls, messages = [], []
        results = results or {}
        config_store = store if config_store is None else config_store
        context = context or RepositoryContext(git_root=tmp_path)

        git = FakeGit(calls, results)
        github = FakeGitHub(calls, results)
        authorizer = CountingAuthorizer(
            props=get_props(),
            get_auth=lambda answers, config: None,
            clear_auth=lambda config: None,
            credentials=CredentialFile(settings.credentials_path),
            prompt=prompt,
        )
        user_input = UserInput(cmd=cmd, args=list(args), unsafe=unsafe, ext=ext)
        pipeline = CommandPipeline(user_input, context, messages.append, git, github, authorizer, config_store)
        return Harness(pipeline=pipeline, authorizer=authorizer, calls=calls, messages=messages)

    return make


def git(*args, cwd) -> str:
    result = subprocess.run(["git", *args], cwd=str(cwd), check=True, capture_output=True, text=True)
    return result.stdout.strip()


def init_repo(path: Path, commit: bool = True) -> Path:
    """Create a repository on master with a local identity, optionally with one commit."""
    path.mkdir(parents=True, exist_ok=True)
    git("init", "-q", cwd=path)
    git("symbolic-ref", "HEAD", "refs/heads/master", cwd=path)
    git("config", "user.name", "Test User", cwd=path)
    git("config", "user.email", "test@example.com", cwd=path)
    git("config", "commit.gpgsign", "false", cwd=path)
    if commit:
        (path / "file1.txt").write_text("one\n")
        git("add", ".", cwd=path)
        git("commit", "-q", "-m", "commit file1", cwd=path)
    return path
