"""
hubrepo CLI module.

Provides the main entry point for the hubrepo command.
"""

import sys
import argparse
from pathlib import Path
from typing import Callable, Optional

from . import __version__
from .auth import Authorizer, get_props
from .config import ConfigStore, CredentialFile, Settings
from .context import RepositoryContext, inspect_repo
from .errors import HubRepoError
from .git_ops import Git
from .github_ops import GitHub
from .log import Logger, configure_logging
from .operations import Outcome, StepResult
from .pipeline import USAGE, CommandPipeline, UserInput

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_DECLINED = 2


class ArgumentParser(argparse.ArgumentParser):
    """Reports bad command lines with the hubrepo usage, as a failure."""

    def error(self, message):
        self.exit(EXIT_FAILED, f"{self.prog}: {message}\n{USAGE}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = ArgumentParser(
        prog="hubrepo",
        description="Publish a local git repository to GitHub, or clone one from it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"hubrepo {__version__}"
    )
    parser.add_argument("cmd", nargs="?", help="repo or logout")
    parser.add_argument("args", nargs="*", help="<owner> <name> of a repository to clone")
    parser.add_argument("--ext", action="store_true", help="Fork the repository before cloning it")
    parser.add_argument("--unsafe", action="store_true", help="Don't protect the default branch")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    return parser


def parse_input(argv: Optional[list] = None) -> UserInput:
    """Parse the command line; flags may appear anywhere."""
    parsed = build_parser().parse_intermixed_args(argv)
    return UserInput(
        cmd=parsed.cmd,
        args=list(parsed.args or []),
        unsafe=parsed.unsafe,
        debug=parsed.debug,
        ext=parsed.ext,
    )


def run_command(
    user_input: UserInput,
    context: RepositoryContext,
    log: Callable,
    settings: Settings,
) -> StepResult:
    """Wire the collaborators for one invocation and run the pipeline."""
    credentials = CredentialFile(settings.credentials_path)
    store = ConfigStore()
    git = Git(context.git_root, context.name, context.branch, store, settings)
    github = GitHub(context.name, store, settings)

    authorizer = Authorizer(
        props=get_props(),
        get_auth=github.get_auth,
        clear_auth=github.clear_auth,
        credentials=credentials,
        env_token=settings.env_token,
    )
    store.update(authorizer.get_config())

    pipeline = CommandPipeline(user_input, context, log, git, github, authorizer, store)
    return pipeline.run()


def exit_code(result: StepResult, log: Callable) -> int:
    if result.outcome is Outcome.SUCCEEDED:
        return EXIT_OK
    if result.outcome is Outcome.DECLINED:
        if result.value:
            done = ", ".join(name.value for name in result.value)
            log(f"Not authenticated with GitHub; stopped after {done}")
        else:
            log("Not authenticated with GitHub; nothing was done")
        return EXIT_DECLINED
    return EXIT_FAILED


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    user_input = parse_input(argv)
    configure_logging(user_input.debug)
    log = Logger(user_input.debug)

    settings = Settings.from_env()

    try:
        context = inspect_repo(Path.cwd())
    except HubRepoError as e:
        log(e)
        return EXIT_FAILED

    result = run_command(user_input, context, log, settings)
    return exit_code(result, log)


if __name__ == "__main__":
    sys.exit(main())
