"""
hubrepo - Publish local git repositories to GitHub, or clone them from it.

This package provides:
1. An authorization-gated pipeline that creates a GitHub repository for the
   local one, pushes to it, and deletes it again if a later step fails
2. Clone and fork-then-clone of existing GitHub repositories
3. Management of the GitHub credential the above need
"""

__version__ = "0.1.0"

from .operations import (
    Outcome,
    OperationName,
    StepResult,
    CATALOG,
)
from .config import (
    ConfigStore,
    CredentialFile,
    Settings,
)
from .context import (
    RepositoryContext,
    inspect_repo,
)
from .auth import (
    Authorizer,
    AuthProvider,
)
from .pipeline import (
    CommandPipeline,
    UserInput,
    run_steps,
)

__all__ = [
    # Version
    "__version__",
    # Operations
    "Outcome",
    "OperationName",
    "StepResult",
    "CATALOG",
    # Configuration
    "ConfigStore",
    "CredentialFile",
    "Settings",
    # Context
    "RepositoryContext",
    "inspect_repo",
    # Authorization
    "Authorizer",
    "AuthProvider",
    # Pipeline
    "CommandPipeline",
    "UserInput",
    "run_steps",
]
