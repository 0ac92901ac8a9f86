"""Acesso ao cliente git externo."""

from .client import (
    GitClient,
    GitError,
    GitResult,
    NotGitRepositoryError,
    find_git_dir,
    find_hooks_dir,
)

__all__ = [
    "GitClient",
    "GitError",
    "GitResult",
    "NotGitRepositoryError",
    "find_git_dir",
    "find_hooks_dir",
]
