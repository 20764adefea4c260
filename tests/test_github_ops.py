"""Tests for the GitHub accessor, with PyGithub and requests patched out."""

import logging
from unittest.mock import MagicMock, Mock

import pytest
import requests
from github import GithubException

from hubrepo import github_ops
from hubrepo.config import ConfigStore
from hubrepo.errors import GitHubError
from hubrepo.github_ops import GitHub


@pytest.fixture
def client_class(monkeypatch):
    """Replace the PyGithub client class; ``.return_value`` is the client."""
    cls = MagicMock(name="Github")
    monkeypatch.setattr(github_ops, "Github", cls)
    return cls


@pytest.fixture
def github(store, settings) -> GitHub:
    return GitHub("my-repo", store, settings)


def unauthorized():
    return GithubException(401, {"message": "Bad credentials"}, None)


class TestDeclined:
    @pytest.mark.parametrize(
        "method, args",
        [("create", ()), ("fork", ("owner", "repo")), ("restrict", (None,)), ("delete", ())],
    )
    def test_no_username_never_calls_github(self, client_class, settings, method, args):
        github = GitHub("my-repo", ConfigStore(), settings)

        assert getattr(github, method)(*args) is None
        client_class.assert_not_called()

    @pytest.mark.parametrize(
        "method, args",
        [("create", ()), ("fork", ("owner", "repo")), ("restrict", ("repo",)), ("delete", ())],
    )
    def test_unauthorized_is_declined(self, client_class, github, method, args):
        client = client_class.return_value
        client.get_user.return_value.create_repo.side_effect = unauthorized()
        client.get_repo.side_effect = unauthorized()

        assert getattr(github, method)(*args) is None


class TestRepositoryOperations:
    def test_create(self, client_class, github, settings):
        assert github.create() is True

        _, kwargs = client_class.call_args
        assert kwargs["base_url"] == settings.api_url
        client_class.return_value.get_user.return_value.create_repo.assert_called_once_with("my-repo")

    def test_create_uses_token_added_after_construction(self, client_class, settings):
        store = ConfigStore(username="alice")
        github = GitHub("my-repo", store, settings)
        store.update({"token": "ghp_late"})

        github.create()

        auth = client_class.call_args.kwargs["auth"]
        assert auth.token == "ghp_late"

    def test_create_failure_raises(self, client_class, github):
        client_class.return_value.get_user.return_value.create_repo.side_effect = GithubException(
            422, {"message": "Repository creation failed."}, None
        )

        with pytest.raises(GitHubError, match="Repository creation failed") as excinfo:
            github.create()
        assert excinfo.value.status == 422

    def test_network_failure_raises(self, client_class, github):
        client_class.return_value.get_user.return_value.create_repo.side_effect = requests.ConnectionError("down")

        with pytest.raises(GitHubError, match="down"):
            github.create()

    def test_fork(self, client_class, github):
        client = client_class.return_value

        assert github.fork("octocat", "hello") is True
        client.get_repo.assert_called_once_with("octocat/hello")
        client.get_repo.return_value.create_fork.assert_called_once_with()

    def test_restrict_defaults_to_this_repository(self, client_class, github):
        client = client_class.return_value
        repo = client.get_repo.return_value
        repo.default_branch = "master"

        assert github.restrict(None) is True

        client.get_repo.assert_called_once_with("alice/my-repo")
        repo.get_branch.assert_called_once_with("master")
        repo.get_branch.return_value.edit_protection.assert_called_once_with(
            strict=True, contexts=[], enforce_admins=True
        )

    def test_restrict_named_repository(self, client_class, github):
        client = client_class.return_value
        client.get_repo.return_value.default_branch = "main"

        github.restrict("hello")

        client.get_repo.assert_called_once_with("alice/hello")
        client.get_repo.return_value.get_branch.assert_called_once_with("main")

    def test_delete(self, client_class, github):
        client = client_class.return_value

        assert github.delete() is True
        client.get_repo.assert_called_once_with("alice/my-repo")
        client.get_repo.return_value.delete.assert_called_once_with()


class TestGetAuth:
    @pytest.fixture
    def user(self, client_class):
        client = client_class.return_value
        client.oauth_scopes = ["repo", "delete_repo", "user"]
        user = client.get_user.return_value
        user.login = "Alice"
        user.id = 42
        return user

    def test_valid_token(self, github, user, client_class):
        fields = github.get_auth({"username": "alice", "token": " ghp_new "}, {})

        assert fields == {"username": "Alice", "id": 42, "token": "ghp_new"}
        assert client_class.call_args.kwargs["auth"].token == "ghp_new"

    def test_token_without_username(self, github, user):
        assert github.get_auth({"token": "ghp_env"}, {})["username"] == "Alice"

    def test_missing_token(self, github, client_class):
        assert github.get_auth({"username": "alice", "token": ""}, {}) is None
        client_class.assert_not_called()

    def test_token_of_another_user(self, github, user):
        assert github.get_auth({"username": "bob", "token": "ghp_new"}, {}) is None

    def test_rejected_token(self, github, client_class):
        client_class.return_value.get_user.side_effect = unauthorized()

        assert github.get_auth({"token": "ghp_bad"}, {}) is None

    def test_missing_scopes_warn(self, github, user, client_class, caplog):
        client_class.return_value.oauth_scopes = ["repo"]

        with caplog.at_level(logging.WARNING, logger="hubrepo.github_ops"):
            assert github.get_auth({"token": "ghp_new"}, {}) is not None

        assert "delete_repo" in caplog.text


class TestClearAuth:
    @pytest.fixture
    def post(self, monkeypatch):
        post = Mock(return_value=Mock(status_code=202, ok=True, text=""))
        monkeypatch.setattr(github_ops.requests, "post", post)
        return post

    def test_revokes_token(self, github, post, settings):
        fields = github.clear_auth({"username": "alice", "id": 42, "token": "ghp_secret"})

        assert fields == ["username", "id", "token"]
        args, kwargs = post.call_args
        assert args[0] == f"{settings.api_url}/credentials/revoke"
        assert kwargs["json"] == {"credentials": ["ghp_secret"]}
        assert kwargs["timeout"] == 30

    def test_unauthorized_is_declined(self, github, post):
        post.return_value = Mock(status_code=401, ok=False, text="Requires authentication")

        assert github.clear_auth({"token": "ghp_secret"}) is None

    def test_server_error_raises(self, github, post):
        post.return_value = Mock(status_code=500, ok=False, text="boom")

        with pytest.raises(GitHubError, match="500"):
            github.clear_auth({"token": "ghp_secret"})

    def test_network_error_raises(self, github, post):
        post.side_effect = requests.Timeout("slow")

        with pytest.raises(GitHubError, match="slow"):
            github.clear_auth({"token": "ghp_secret"})

    def test_no_token(self, github, post):
        with pytest.raises(GitHubError, match="no token present"):
            github.clear_auth({"username": "alice"})
        post.assert_not_called()
