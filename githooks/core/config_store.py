"""
GITHOOKS - Config Store
Acesso explícito ao estado de configuração (git config), por escopo.
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..git.client import GitClient


# =============================================================================
# Chaves
# =============================================================================

KEY_DISABLE = "githooks.disable"
KEY_TRUST_ALL = "githooks.trust.all"
KEY_SHARED = "githooks.shared"
KEY_AUTOUPDATE_ENABLED = "githooks.autoupdate.enabled"
KEY_AUTOUPDATE_LASTRUN = "githooks.autoupdate.lastrun"
KEY_SINGLE_INSTALL = "githooks.single.install"
KEY_PREVIOUS_SEARCHDIR = "githooks.previous.searchdir"
KEY_ALIAS = "alias.hooks"
KEY_TEMPLATE_DIR = "init.templateDir"


class ConfigScope(str, Enum):
    """Escopo de uma chave de configuração."""
    LOCAL = "local"
    GLOBAL = "global"
    ANY = "any"


def is_yes(value: Optional[str]) -> bool:
    """Interpreta valores tipo Y/y/yes/true como verdadeiro."""
    return (value or "").strip().lower() in ("y", "yes", "true", "1")


# =============================================================================
# Interface
# =============================================================================

class ConfigStore(ABC):
    """Porta de configuração injetada nos componentes do engine."""

    @abstractmethod
    def get(self, key: str, scope: ConfigScope = ConfigScope.ANY) -> Optional[str]:
        """Retorna o último valor da chave, ou None se não definida."""

    @abstractmethod
    def get_all(self, key: str, scope: ConfigScope = ConfigScope.ANY) -> List[str]:
        """Retorna todos os valores de uma chave multi-valor."""

    @abstractmethod
    def set(self, key: str, value: str, scope: ConfigScope = ConfigScope.LOCAL) -> bool:
        """Define (substitui) o valor. Retorna False em caso de falha."""

    @abstractmethod
    def add(self, key: str, value: str, scope: ConfigScope = ConfigScope.LOCAL) -> bool:
        """Acrescenta um valor a uma chave multi-valor."""

    @abstractmethod
    def unset(self, key: str, scope: ConfigScope = ConfigScope.LOCAL) -> bool:
        """Remove todos os valores. Retorna False se a chave não existia."""

    def is_set(self, key: str, scope: ConfigScope = ConfigScope.ANY) -> bool:
        return self.get(key, scope) is not None


# =============================================================================
# Git Config
# =============================================================================

class GitConfigStore(ConfigStore):
    """ConfigStore baseado em `git config`."""

    def __init__(self, git: Optional[GitClient] = None, repo_root: Optional[Path] = None):
        self.git = git or GitClient()
        self.repo_root = repo_root

    def _scope_args(self, scope: ConfigScope) -> List[str]:
        if scope == ConfigScope.ANY:
            return []
        return [f"--{scope.value}"]

    def get(self, key: str, scope: ConfigScope = ConfigScope.ANY) -> Optional[str]:
        return self.git.config_get(key, self._scope_args(scope), cwd=self.repo_root)

    def get_all(self, key: str, scope: ConfigScope = ConfigScope.ANY) -> List[str]:
        return self.git.config_get_all(key, self._scope_args(scope), cwd=self.repo_root)

    def set(self, key: str, value: str, scope: ConfigScope = ConfigScope.LOCAL) -> bool:
        return self.git.config_set(key, value, self._scope_args(scope), cwd=self.repo_root)

    def add(self, key: str, value: str, scope: ConfigScope = ConfigScope.LOCAL) -> bool:
        return self.git.config_add(key, value, self._scope_args(scope), cwd=self.repo_root)

    def unset(self, key: str, scope: ConfigScope = ConfigScope.LOCAL) -> bool:
        return self.git.config_unset(key, self._scope_args(scope), cwd=self.repo_root)


# =============================================================================
# Memória (testes)
# =============================================================================

class MemoryConfigStore(ConfigStore):
    """ConfigStore em memória; LOCAL tem precedência sobre GLOBAL em ANY."""

    def __init__(self, initial: Optional[Dict[Tuple[ConfigScope, str], List[str]]] = None):
        self.values: Dict[Tuple[ConfigScope, str], List[str]] = dict(initial or {})

    def _lookup(self, key: str, scope: ConfigScope) -> List[str]:
        if scope == ConfigScope.ANY:
            return self.values.get((ConfigScope.GLOBAL, key), []) + self.values.get((ConfigScope.LOCAL, key), [])
        return list(self.values.get((scope, key), []))

    def get(self, key: str, scope: ConfigScope = ConfigScope.ANY) -> Optional[str]:
        values = self._lookup(key, scope)
        return values[-1] if values else None

    def get_all(self, key: str, scope: ConfigScope = ConfigScope.ANY) -> List[str]:
        return self._lookup(key, scope)

    def set(self, key: str, value: str, scope: ConfigScope = ConfigScope.LOCAL) -> bool:
        self.values[(self._writable(scope), key)] = [value]
        return True

    def add(self, key: str, value: str, scope: ConfigScope = ConfigScope.LOCAL) -> bool:
        self.values.setdefault((self._writable(scope), key), []).append(value)
        return True

    def unset(self, key: str, scope: ConfigScope = ConfigScope.LOCAL) -> bool:
        return self.values.pop((self._writable(scope), key), None) is not None

    @staticmethod
    def _writable(scope: ConfigScope) -> ConfigScope:
        return ConfigScope.LOCAL if scope == ConfigScope.ANY else scope


__all__ = [
    "ConfigScope",
    "ConfigStore",
    "GitConfigStore",
    "MemoryConfigStore",
    "is_yes",
    "KEY_DISABLE",
    "KEY_TRUST_ALL",
    "KEY_SHARED",
    "KEY_AUTOUPDATE_ENABLED",
    "KEY_AUTOUPDATE_LASTRUN",
    "KEY_SINGLE_INSTALL",
    "KEY_PREVIOUS_SEARCHDIR",
    "KEY_ALIAS",
    "KEY_TEMPLATE_DIR",
]
