"""Repositórios de hooks compartilhados."""

from .sync import (
    SharedRepoRegistry,
    SharedRepoSynchronizer,
    normalize_shared_name,
    parse_shared_list,
)

__all__ = [
    "SharedRepoRegistry",
    "SharedRepoSynchronizer",
    "normalize_shared_name",
    "parse_shared_list",
]
