"""Verificação de atualizações do Githooks."""

from .checker import UpdateChecker, UpdateCheckResult, UpdateFetchError, read_version

__all__ = ["UpdateChecker", "UpdateCheckResult", "UpdateFetchError", "read_version"]
